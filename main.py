#!/usr/bin/env python3
"""
NeuroFlap - Main Entry Point
============================

Play flappy bird, let a small neural network learn from how you play, then
watch it fly on its own.

Usage:
    # Windowed app (default)
    python main.py

    # Headless demo: oracle-driven collection, training and AI evaluation
    python main.py --headless --epochs 200 --games 5

    # Start from saved parameters (checkpoint or JSON snapshot)
    python main.py --model models/flap_network.pth

    # Export the trained network when done
    python main.py --headless --save models/flap_network.json

In the window:
    - SPACE: Flap (starts a game when idle)
    - T: Start/stop continuous training (needs 32 samples)
    - A: Watch the AI play (unlocks at 100 samples)
    - R: Reset network and collected data
    - S: Save the network
    - ESC or Q: Quit
"""

# Suppress pygame's pkg_resources deprecation warning (pygame issue #4557)
import warnings
warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import pygame
import argparse
import sys
import os
import time
from typing import Dict, List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import Config
from src.ai.session import LearningSession, Mode
from src.visualizer.hud import TrainingHUD
from src.visualizer.nn_visualizer import NeuralNetVisualizer
from src.utils.logger import LogLevel, get_logger, setup_logging

_logger = get_logger(__name__)


def load_parameters(session: LearningSession, filepath: str) -> bool:
    """Load a .json parameter snapshot or a torch checkpoint into the session's network."""
    if filepath.endswith('.json'):
        if not os.path.exists(filepath):
            _logger.error(f"Parameter file not found: {filepath}")
            return False
        with open(filepath, 'r') as f:
            session.import_parameters(f.read())
        return True
    return session.load_model(filepath)


def save_parameters(session: LearningSession, filepath: str) -> str:
    """Write a .json parameter snapshot or a torch checkpoint, depending on the extension."""
    if filepath.endswith('.json'):
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w') as f:
            f.write(session.export_parameters())
        _logger.info(f"Parameters exported to {filepath}")
        return filepath
    return session.save_model(filepath)


class GameApp:
    """
    Windowed application: the game on the left, the network on the right.

    This class manages:
        - Pygame window and rendering
        - Keyboard input mapped onto LearningSession actions
        - Visualizations (network panel + HUD)
        - On-screen notifications
    """

    def __init__(self, config: Config, args: argparse.Namespace):
        """
        Initialize the application.

        Args:
            config: Configuration object
            args: Command line arguments
        """
        self.config = config
        self.args = args

        pygame.init()
        pygame.display.set_caption("NeuroFlap - learn to flap")

        self.window_width = config.SCREEN_WIDTH + config.PANEL_WIDTH
        self.window_height = config.SCREEN_HEIGHT
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        self.clock = pygame.time.Clock()
        self.game_surface = pygame.Surface((config.SCREEN_WIDTH, config.SCREEN_HEIGHT))

        self._notification_font = pygame.font.Font(None, 28)
        self._notifications: List[dict] = []

        self.session = LearningSession(config)
        self.session.on_mode_change = self._on_mode_change

        if args.model and load_parameters(self.session, args.model):
            self._show_notification(f"Loaded {os.path.basename(args.model)}", (100, 255, 100))

        self.visualizer = NeuralNetVisualizer(
            self.session.view, config,
            x=config.SCREEN_WIDTH, y=0,
            width=config.PANEL_WIDTH, height=config.SCREEN_HEIGHT,
        )
        self.hud = TrainingHUD(config)

        self.learning_rate = args.lr or config.LEARNING_RATE
        self.running = True

    def _on_mode_change(self, mode: Mode) -> None:
        if mode == Mode.IDLE and self.session.game.is_game_over():
            self._show_notification(f"Game Over - score {self.session.game.score}", (255, 200, 100))

    def _show_notification(self, text: str, color: tuple = (100, 200, 255), duration: float = 2.0) -> None:
        """
        Show a notification on screen.

        Args:
            text: Notification text
            color: Text color (RGB tuple)
            duration: How long to show the notification in seconds
        """
        self._notifications.append({
            'text': text,
            'color': color,
            'start_time': time.time(),
            'duration': duration
        })

    def _render_notifications(self, surface: pygame.Surface) -> None:
        """Render active notifications and drop expired ones."""
        current_time = time.time()
        self._notifications = [
            n for n in self._notifications
            if current_time - n['start_time'] < n['duration']
        ]

        y_offset = 130
        for notification in self._notifications:
            elapsed = current_time - notification['start_time']
            # Fade out in the last 0.5 seconds
            alpha = 255
            if elapsed > notification['duration'] - 0.5:
                alpha = int(255 * (notification['duration'] - elapsed) / 0.5)
            alpha = max(0, min(255, alpha))

            text_surface = self._notification_font.render(notification['text'], True, notification['color'])
            text_surface.set_alpha(alpha)

            bg_width = text_surface.get_width() + 20
            bg_height = text_surface.get_height() + 10
            bg_surface = pygame.Surface((bg_width, bg_height), pygame.SRCALPHA)
            pygame.draw.rect(bg_surface, (0, 0, 0, int(alpha * 0.7)), bg_surface.get_rect(), border_radius=5)

            x = (surface.get_width() - bg_width) // 2
            surface.blit(bg_surface, (x, y_offset))
            surface.blit(text_surface, (x + 10, y_offset + 5))
            y_offset += bg_height + 5

    def run(self) -> None:
        """Main loop: input, one session tick, render."""
        _logger.info("Window started - press SPACE to play")

        while self.running:
            self._handle_events()
            self.session.tick()
            self._render_frame()
            self.clock.tick(self.config.FPS)

        self.session.trainer.stop()
        if self.args.save:
            save_parameters(self.session, self.args.save)
        pygame.quit()

    def _handle_events(self) -> None:
        """Handle pygame events and keyboard input."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    self.running = False

                elif event.key == pygame.K_SPACE:
                    self.session.handle_flap()

                elif event.key == pygame.K_t:
                    if self.session.mode == Mode.TRAINING:
                        self.session.stop_training()
                        self._show_notification("Training stopped", (255, 200, 100), 1.0)
                    elif self.session.start_training(self.learning_rate):
                        self._show_notification("Training...", (241, 196, 15), 1.0)
                    else:
                        self._show_notification(
                            f"Need {self.config.BATCH_SIZE} samples to train", (255, 100, 100)
                        )

                elif event.key == pygame.K_a:
                    if self.session.mode == Mode.AI:
                        self.session.stop_ai()
                    elif not self.session.start_ai():
                        self._show_notification(
                            f"AI unlocks at {self.config.AI_UNLOCK_SAMPLES} samples", (255, 100, 100)
                        )

                elif event.key == pygame.K_r:
                    self.session.reset()
                    self._show_notification("Network reset", (255, 200, 100), 1.0)

                elif event.key == pygame.K_s:
                    path = self.session.save_model()
                    self._show_notification(f"Saved {os.path.basename(path)}", (100, 255, 100), 1.5)

    def _render_frame(self) -> None:
        """Render the game, HUD and network panel."""
        self.session.game.render(self.game_surface)
        self.hud.render(
            self.game_surface,
            self.session.mode.value,
            self.session.game.score,
            self.session.game.best_score,
            self.session.get_stats(),
        )
        self._render_notifications(self.game_surface)

        self.screen.blit(self.game_surface, (0, 0))
        self.visualizer.render(self.screen)
        pygame.display.flip()


class HeadlessDemo:
    """
    Runs the whole learning cycle without a window.

    Steps:
        1. The heuristic oracle plays a few games; every frame is stored as a sample
        2. The network trains on the buffer for --epochs epochs
        3. The network plays --games games on its own
    """

    def __init__(self, config: Config, args: argparse.Namespace):
        self.config = config
        self.args = args
        self.session = LearningSession(config)

        if args.model:
            load_parameters(self.session, args.model)

    def collect(self, games: int) -> int:
        """Let the oracle play, collecting one sample per frame. Returns samples stored."""
        session = self.session
        trainer = session.trainer

        for game_index in range(games):
            session.start_playing()
            frames = 0
            while session.mode == Mode.PLAYING and frames < self.config.MAX_FRAMES_PER_GAME:
                if trainer.heuristic_action(session.game.get_telemetry()):
                    session.handle_flap()
                session.tick()
                frames += 1
            if session.game.is_playing():
                session.game.game_over()
            print(f"   Oracle game {game_index + 1}/{games}: score {session.game.score}, "
                  f"{session.sample_count:,} samples")

        return session.sample_count

    def train(self, learning_rate: float, epochs: int) -> float:
        if not self.session.can_train:
            print(f"   Skipped training: {self.session.sample_count}/{self.config.BATCH_SIZE} samples")
            return 0.0
        start_time = time.time()
        loss = self.session.trainer.run_epochs(learning_rate, epochs)
        print(f"   Trained {epochs} epochs in {time.time() - start_time:.1f}s, loss {loss:.5f}")
        return loss

    def evaluate(self, games: int) -> List[int]:
        """Let the network play. Returns one score per game."""
        session = self.session
        scores: List[int] = []

        for game_index in range(games):
            if not session.start_ai():
                break
            frames = 0
            while session.mode == Mode.AI and frames < self.config.MAX_FRAMES_PER_GAME:
                session.tick()
                frames += 1
            score = session.game.score
            session.stop_ai()
            scores.append(score)
            print(f"   AI game {game_index + 1}/{games}: score {score} "
                  f"({session.autopilot.flaps}/{session.autopilot.decisions} flaps)")

        return scores

    def run(self) -> Dict[str, object]:
        args = self.args
        learning_rate = args.lr or self.config.LEARNING_RATE
        epochs = args.epochs or self.config.DEFAULT_EPOCHS

        print("\n📥 Collecting samples from the oracle")
        samples = self.collect(args.collect_games)

        print(f"\n🧠 Training on {samples:,} samples (lr={learning_rate})")
        loss = self.train(learning_rate, epochs)

        print(f"\n🤖 Evaluating the network")
        scores = self.evaluate(args.games)
        if scores:
            print(f"   Mean score {sum(scores) / len(scores):.1f}, best {max(scores)}")
        else:
            print(f"   Not enough samples for the AI ({samples}/{self.config.AI_UNLOCK_SAMPLES})")

        if args.save:
            save_parameters(self.session, args.save)

        return {'samples': samples, 'loss': loss, 'scores': scores}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="NeuroFlap - a neural network learns flappy bird from your play",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES
========
    python main.py                                 Play, train and watch in a window
    python main.py --headless                      Full cycle without a window
    python main.py --headless --save net.json      Export the trained parameters
    python main.py --model models/flap_network.pth Start from a checkpoint
        """
    )

    parser.add_argument(
        '--headless', action='store_true',
        help='Run the oracle -> train -> evaluate demo without a window'
    )
    parser.add_argument(
        '--model', type=str, default=None,
        help='Checkpoint (.pth) or parameter snapshot (.json) to load'
    )
    parser.add_argument(
        '--save', type=str, default=None,
        help='Where to write the network on exit (.json snapshot or .pth checkpoint)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for weights, shuffling and pipe gaps'
    )
    parser.add_argument(
        '--lr', type=float, default=None,
        help='Learning rate (default: config LEARNING_RATE)'
    )
    parser.add_argument(
        '--epochs', type=int, default=None,
        help='Epochs for the headless training pass (default: config DEFAULT_EPOCHS)'
    )
    parser.add_argument(
        '--collect-games', type=int, default=3,
        help='Oracle games played to collect samples in headless mode'
    )
    parser.add_argument(
        '--games', type=int, default=5,
        help='AI games played for evaluation in headless mode'
    )
    parser.add_argument(
        '--log-level', type=str, default=None,
        help='DEBUG, INFO, WARNING or ERROR (default: config LOG_LEVEL)'
    )

    return parser.parse_args(argv)


def print_startup_banner() -> None:
    """Print a welcome banner for the application."""
    print()
    print("=" * 60)
    print("       NEUROFLAP - Online-Learning Flappy Bird")
    print("=" * 60)
    print("   Play, train a tiny network on your moves, watch it fly!")
    print()
    print("   Quick Start:")
    print("   - python main.py              # Windowed app")
    print("   - python main.py --headless   # Oracle -> train -> evaluate")
    print("   - python main.py --help       # See all options")
    print("=" * 60)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    if '--help' not in argv and '-h' not in argv:
        print_startup_banner()

    args = parse_args(argv)

    config = Config()
    if args.seed is not None:
        config.SEED = args.seed
    if args.log_level:
        config.LOG_LEVEL = args.log_level

    setup_logging(
        log_dir=config.LOG_DIR,
        level=LogLevel.from_name(config.LOG_LEVEL),
        file_output=not args.headless,
        force=True,
    )

    if args.headless:
        demo = HeadlessDemo(config, args)
        try:
            demo.run()
        except KeyboardInterrupt:
            print("\n\n⛔ Interrupted by user")
            if args.save:
                save_parameters(demo.session, args.save)
        return

    app = GameApp(config, args)
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n\n⛔ Interrupted by user")
        pygame.quit()


if __name__ == "__main__":
    main()
