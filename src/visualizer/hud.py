"""
Training HUD (Heads-Up Display)
================================

On-screen overlay showing the session mode, scores and training statistics.
"""

import pygame
from typing import List, Tuple

from config import Config
from src.ai.trainer import TrainingStats


class TrainingHUD:
    """
    On-screen session statistics overlay.

    Displays:
    - Current mode badge
    - Score and best score
    - Samples collected, with a bar towards the AI unlock
    - Current loss and trained epochs
    - Key binding hints
    """

    MODE_COLORS = {
        'idle': (150, 150, 150),
        'playing': (52, 152, 219),
        'training': (241, 196, 15),
        'ai': (46, 204, 113),
    }

    def __init__(self, config: Config):
        """
        Initialize the HUD.

        Args:
            config: Configuration object
        """
        self.config = config

        pygame.font.init()
        self._font_small = pygame.font.Font(None, 20)
        self._font_medium = pygame.font.Font(None, 24)

        self.text_color = (220, 220, 220)
        self.text_dim = (150, 150, 150)
        self.accent_color = (52, 152, 219)
        self.good_color = (46, 204, 113)
        self.bg_color = (0, 0, 0, 180)

        self.enabled = True

    def format_lines(self, score: int, best_score: int, stats: TrainingStats) -> List[str]:
        """Text rows of the statistics block."""
        return [
            f"Score: {score:,}  |  Best: {best_score:,}",
            f"Samples: {stats.total_samples:,}",
            f"Loss: {stats.current_loss:.4f}",
            f"Epochs: {stats.trained_epochs:,}",
        ]

    def unlock_progress(self, stats: TrainingStats) -> float:
        """Fraction of the samples needed before the AI can play, capped at 1."""
        return min(stats.total_samples / self.config.AI_UNLOCK_SAMPLES, 1.0)

    def render(
        self,
        surface: pygame.Surface,
        mode: str,
        score: int,
        best_score: int,
        stats: TrainingStats,
    ) -> None:
        """
        Render all HUD elements onto the surface.

        Args:
            surface: Pygame surface to render onto
            mode: Session mode name (idle, playing, training, ai)
            score: Current game score
            best_score: Best score achieved
            stats: Latest training statistics
        """
        if not self.enabled:
            return

        self._render_mode_badge(surface, mode)
        self._render_stats(surface, self.format_lines(score, best_score, stats))
        self._render_unlock_bar(surface, stats)
        self._render_key_hints(surface)

    def _panel(self, surface: pygame.Surface, rect: pygame.Rect) -> None:
        bg_surface = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        pygame.draw.rect(bg_surface, self.bg_color, bg_surface.get_rect(), border_radius=5)
        surface.blit(bg_surface, rect.topleft)

    def _render_mode_badge(self, surface: pygame.Surface, mode: str) -> None:
        """Render the mode in the top-right corner."""
        color = self.MODE_COLORS.get(mode, self.text_color)
        text_surface = self._font_medium.render(mode.upper(), True, color)

        bg_rect = text_surface.get_rect(topright=(self.config.SCREEN_WIDTH - 10, 10))
        bg_rect.inflate_ip(16, 8)
        self._panel(surface, bg_rect)
        pygame.draw.rect(surface, color, bg_rect, 2, border_radius=5)
        surface.blit(text_surface, text_surface.get_rect(center=bg_rect.center))

    def _render_stats(self, surface: pygame.Surface, lines: List[str]) -> None:
        """Render the statistics block in the top-left corner."""
        line_height = 18
        self._panel(surface, pygame.Rect(10, 10, 190, line_height * len(lines) + 10))
        for i, line in enumerate(lines):
            text_surface = self._font_small.render(line, True, self.text_color)
            surface.blit(text_surface, (18, 15 + i * line_height))

    def _render_unlock_bar(self, surface: pygame.Surface, stats: TrainingStats) -> None:
        """Render progress towards the AI unlock under the statistics block."""
        progress = self.unlock_progress(stats)

        bar_x, bar_y, bar_width, bar_height = 18, 95, 150, 10
        pygame.draw.rect(surface, (40, 40, 40), (bar_x, bar_y, bar_width, bar_height), border_radius=3)

        fill_width = int(bar_width * progress)
        if fill_width > 0:
            fill_color = self.good_color if progress >= 1.0 else self.accent_color
            pygame.draw.rect(surface, fill_color, (bar_x, bar_y, fill_width, bar_height), border_radius=3)

        label = "AI ready" if progress >= 1.0 else "AI unlock"
        label_surface = self._font_small.render(label, True, self.text_dim)
        surface.blit(label_surface, (bar_x + bar_width + 8, bar_y - 2))

    def _render_key_hints(self, surface: pygame.Surface) -> None:
        hints: List[Tuple[str, str]] = [
            ("SPACE", "flap"), ("T", "train"), ("A", "AI"), ("R", "reset"), ("S", "save"),
        ]
        text = "   ".join(f"{key}: {action}" for key, action in hints)
        text_surface = self._font_small.render(text, True, self.text_dim)
        rect = text_surface.get_rect(
            centerx=self.config.SCREEN_WIDTH // 2,
            bottom=self.config.SCREEN_HEIGHT - 8,
        )
        surface.blit(text_surface, rect)
