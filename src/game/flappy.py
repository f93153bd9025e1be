"""
Flappy Bird Implementation
==========================

Side-scrolling flappy bird used as the telemetry source for online learning.

Key Features:
- Normalized 4-feature telemetry for the network
- Seedable pipe gap placement
- Callbacks for scoring, game over and per-frame state capture
- Runs headless; pygame is only touched by render()

Game Rules:
- Gravity pulls the bird down every frame; a flap sets an upward velocity
- Pipes scroll left; passing one scores a point
- Touching a pipe, the ground or the ceiling ends the game
"""

from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np
import pygame

import sys
sys.path.append('..')
from config import Config
from src.ai.telemetry import Telemetry


class GamePhase(Enum):
    """Lifecycle of a single game."""
    IDLE = 'idle'
    PLAYING = 'playing'
    GAME_OVER = 'gameover'


class Bird:
    """The player-controlled bird."""

    def __init__(self, x: float, y: float, config: Config):
        self.x = x
        self.y = y
        self.width = config.BIRD_WIDTH
        self.height = config.BIRD_HEIGHT
        self.gravity = config.GRAVITY
        self.flap_force = config.FLAP_FORCE
        self.terminal_velocity = config.TERMINAL_VELOCITY
        self.hitbox_inset = config.BIRD_HITBOX_INSET
        self.velocity = 0.0
        self.rotation = 0.0
        self.alive = True

    def flap(self) -> None:
        if self.alive:
            self.velocity = self.flap_force

    def update(self) -> None:
        """Apply gravity and move."""
        if not self.alive:
            return

        self.velocity = min(self.velocity + self.gravity, self.terminal_velocity)
        self.y += self.velocity

        # Nose-up when rising, nose-down when falling (degrees)
        self.rotation = min(max(self.velocity * 3, -30.0), 90.0)

    def bounds(self) -> Tuple[float, float, float, float]:
        """Collision box as (x, y, width, height), shrunk by the hitbox inset."""
        inset = self.hitbox_inset
        return (
            self.x + inset,
            self.y + inset,
            self.width - 2 * inset,
            self.height - 2 * inset,
        )


class Pipe:
    """A top/bottom pipe pair with a gap."""

    def __init__(self, x: float, gap_y: float, config: Config):
        self.x = x
        self.gap_y = gap_y
        self.width = config.PIPE_WIDTH
        self.gap_height = config.PIPE_GAP
        self.speed = config.PIPE_SPEED
        self.passed = False

    def update(self) -> None:
        self.x -= self.speed

    @property
    def gap_center(self) -> float:
        return self.gap_y + self.gap_height / 2

    @property
    def gap_bottom(self) -> float:
        return self.gap_y + self.gap_height

    def is_off_screen(self) -> bool:
        return self.x + self.width < 0

    def collides_with(self, bird: Bird) -> bool:
        """Check whether the bird's hitbox overlaps either pipe."""
        bx, by, bw, bh = bird.bounds()
        overlaps_x = bx < self.x + self.width and bx + bw > self.x
        if not overlaps_x:
            return False
        return by < self.gap_y or by + bh > self.gap_bottom


class FlappyBird:
    """
    Flappy bird simulation.

    Telemetry (normalized):
        - position_y: bird.y / screen height
        - velocity: (bird.velocity + VELOCITY_OFFSET) / VELOCITY_RANGE
        - distance: (next_pipe.x - bird.x) / screen width, 1 if no pipe ahead
        - gap_center_y: next gap center / screen height, 0.5 if no pipe ahead

    Actions:
        flap() - the only control input
    """

    def __init__(self, config: Optional[Config] = None, seed: Optional[int] = None):
        """
        Initialize the game.

        Args:
            config: Configuration object
            seed: Seed for pipe gap placement
        """
        self.config = config or Config()
        self.width = self.config.SCREEN_WIDTH
        self.height = self.config.SCREEN_HEIGHT
        self.ground_y = self.height - self.config.GROUND_HEIGHT

        self._rng = np.random.default_rng(seed if seed is not None else self.config.SEED)

        self.best_score = 0
        self.phase = GamePhase.IDLE
        self.bird: Optional[Bird] = None
        self.pipes: List[Pipe] = []
        self.score = 0
        self.frame_count = 0

        # Callbacks
        self.on_score: Optional[Callable[[int], None]] = None
        self.on_game_over: Optional[Callable[[int], None]] = None
        self.on_state_capture: Optional[Callable[[Telemetry], None]] = None

        self._font: Optional[pygame.font.Font] = None

        self.reset()

    def seed(self, seed: int) -> None:
        """Reseed pipe gap placement."""
        self._rng = np.random.default_rng(seed)

    def reset(self) -> None:
        """Place a fresh bird mid-screen and clear pipes. The game waits in IDLE."""
        self.bird = Bird(self.config.BIRD_X, self.height / 2, self.config)
        self.pipes = []
        self.score = 0
        self.frame_count = 0
        self.phase = GamePhase.IDLE

    def start(self) -> None:
        """Reset and start playing with one pipe on the right edge."""
        self.reset()
        self.phase = GamePhase.PLAYING
        self.spawn_pipe()

    def spawn_pipe(self) -> None:
        margin = self.config.PIPE_GAP_MARGIN
        min_gap_y = margin
        max_gap_y = self.ground_y - self.config.PIPE_GAP - margin
        gap_y = float(self._rng.uniform(min_gap_y, max_gap_y))
        self.pipes.append(Pipe(self.width, gap_y, self.config))

    def flap(self) -> None:
        if self.phase == GamePhase.PLAYING and self.bird is not None:
            self.bird.flap()

    def game_over(self) -> None:
        if self.bird is None:
            return
        self.phase = GamePhase.GAME_OVER
        self.bird.alive = False
        if self.on_game_over:
            self.on_game_over(self.score)

    def update(self) -> None:
        """Advance the simulation by one frame."""
        if self.phase != GamePhase.PLAYING or self.bird is None:
            return

        bird = self.bird
        self.frame_count += 1
        bird.update()

        # Ground / ceiling
        if bird.y + bird.height > self.ground_y or bird.y < 0:
            self.game_over()
            return

        for pipe in self.pipes:
            pipe.update()

            if pipe.collides_with(bird):
                self.game_over()
                return

            if not pipe.passed and pipe.x + pipe.width < bird.x:
                pipe.passed = True
                self.score += 1
                self.best_score = max(self.best_score, self.score)
                if self.on_score:
                    self.on_score(self.score)

        self.pipes = [pipe for pipe in self.pipes if not pipe.is_off_screen()]

        if self.frame_count % self.config.PIPE_SPAWN_INTERVAL == 0:
            self.spawn_pipe()

        if self.on_state_capture:
            telemetry = self.get_telemetry()
            if telemetry is not None:
                self.on_state_capture(telemetry)

    def next_pipe(self) -> Optional[Pipe]:
        """The first pipe whose right edge is still ahead of the bird."""
        if self.bird is None:
            return None
        return next((p for p in self.pipes if p.x + p.width > self.bird.x), None)

    def get_telemetry(self) -> Optional[Telemetry]:
        """Normalized state for the network, or None if there is no bird."""
        if self.bird is None:
            return None

        pipe = self.next_pipe()
        return Telemetry(
            position_y=self.bird.y / self.height,
            velocity=(self.bird.velocity + self.config.VELOCITY_OFFSET) / self.config.VELOCITY_RANGE,
            distance=(pipe.x - self.bird.x) / self.width if pipe else 1.0,
            gap_center_y=pipe.gap_center / self.height if pipe else 0.5,
        )

    def is_playing(self) -> bool:
        return self.phase == GamePhase.PLAYING

    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, screen: pygame.Surface) -> None:
        """Draw the game onto a pygame surface."""
        cfg = self.config
        screen.fill(cfg.COLOR_SKY, pygame.Rect(0, 0, self.width, self.height))

        # Stars
        for i in range(50):
            x = (i * 97) % self.width
            y = (i * 53) % (self.height - 100)
            pygame.draw.circle(screen, (235, 245, 255), (x, y), (i % 3) + 1)

        # Ground
        ground_rect = pygame.Rect(0, self.ground_y, self.width, self.height - self.ground_y)
        pygame.draw.rect(screen, cfg.COLOR_GROUND, ground_rect)
        pygame.draw.line(screen, cfg.COLOR_GROUND_LINE, (0, self.ground_y), (self.width, self.ground_y), 2)

        for pipe in self.pipes:
            self._draw_pipe(screen, pipe)

        if self.bird is not None:
            self._draw_bird(screen, self.bird)

        if self._font is None:
            pygame.font.init()
            self._font = pygame.font.Font(None, 64)
        text = self._font.render(str(self.score), True, cfg.COLOR_TEXT)
        screen.blit(text, text.get_rect(centerx=self.width // 2, top=30))

    def _draw_pipe(self, screen: pygame.Surface, pipe: Pipe) -> None:
        cfg = self.config
        x = int(pipe.x)
        top = pygame.Rect(x, 0, pipe.width, int(pipe.gap_y))
        bottom_y = int(pipe.gap_bottom)
        bottom = pygame.Rect(x, bottom_y, pipe.width, self.height - bottom_y)
        pygame.draw.rect(screen, cfg.COLOR_PIPE, top)
        pygame.draw.rect(screen, cfg.COLOR_PIPE, bottom)

        # Caps
        top_cap = pygame.Rect(x - 4, int(pipe.gap_y) - 25, pipe.width + 8, 25)
        bottom_cap = pygame.Rect(x - 4, bottom_y, pipe.width + 8, 25)
        for cap in (top_cap, bottom_cap):
            pygame.draw.rect(screen, cfg.COLOR_PIPE, cap)
            pygame.draw.rect(screen, cfg.COLOR_PIPE_BORDER, cap, 2)

    def _draw_bird(self, screen: pygame.Surface, bird: Bird) -> None:
        body = pygame.Surface((bird.width + 12, bird.height + 12), pygame.SRCALPHA)
        cx, cy = body.get_width() // 2, body.get_height() // 2
        pygame.draw.ellipse(body, self.config.COLOR_BIRD,
                            pygame.Rect(6, 6, bird.width, bird.height))
        pygame.draw.ellipse(body, (255, 170, 0), pygame.Rect(cx - 15, cy - 2, 20, 12))  # Wing
        pygame.draw.circle(body, (255, 255, 255), (cx + 8, cy - 4), 6)                  # Eye
        pygame.draw.circle(body, (0, 0, 0), (cx + 10, cy - 4), 3)                       # Pupil
        pygame.draw.polygon(body, (255, 102, 0),
                            [(cx + 15, cy), (cx + 22, cy + 3), (cx + 15, cy + 6)])    # Beak

        rotated = pygame.transform.rotate(body, -bird.rotation)
        center = (int(bird.x + bird.width / 2), int(bird.y + bird.height / 2))
        screen.blit(rotated, rotated.get_rect(center=center))
