"""
Learning Session
================

Single owner of the game, the network and everything that touches it.

Modes:
    IDLE     - nothing running
    PLAYING  - a human plays; every frame is labelled and stored
    TRAINING - continuous training, one burst of epochs per frame
    AI       - the network plays through the autopilot

Only the Trainer receives the mutable FlapNetwork. The policy and any
visualizer get the session's NetworkView, which is re-pointed when reset()
builds a fresh network.
"""

import os
from enum import Enum
from typing import Callable, Optional

import torch

import sys
sys.path.append('../..')
from config import Config
from src.ai.network import FlapNetwork, NetworkView
from src.ai.policy import Autopilot, ControlPolicy
from src.ai.scheduler import FrameScheduler
from src.ai.telemetry import Telemetry
from src.ai.trainer import Trainer, TrainingStats
from src.game.flappy import FlappyBird
from src.utils.logger import get_logger

_logger = get_logger(__name__)


class Mode(Enum):
    IDLE = 'idle'
    PLAYING = 'playing'
    TRAINING = 'training'
    AI = 'ai'


class LearningSession:
    """
    Orchestrates manual play, training and autonomous play.

    The host calls tick() once per frame; everything else is driven from
    user actions (start_playing, handle_flap, toggle_training, start_ai, reset).

    Example:
        >>> session = LearningSession(Config(SEED=1))
        >>> session.start_playing()
        >>> for _ in range(200):
        ...     session.handle_flap()
        ...     session.tick()
        >>> session.start_training()
    """

    def __init__(self, config: Optional[Config] = None, game: Optional[FlappyBird] = None):
        self.config = config or Config()
        self.game = game if game is not None else FlappyBird(self.config)
        self.scheduler = FrameScheduler()

        self._generator = torch.Generator()
        if self.config.SEED is not None:
            self._generator.manual_seed(self.config.SEED)
        else:
            self._generator.seed()

        self.network = self._build_network()
        self.view = NetworkView(self.network)
        self.trainer = Trainer(self.network, self.config)
        self.policy = ControlPolicy(self.view, self.config.DECISION_THRESHOLD)
        self.autopilot = Autopilot(self.policy, self.game, self.scheduler)

        self.mode = Mode.IDLE
        self.learning_rate = self.config.LEARNING_RATE
        self.on_mode_change: Optional[Callable[[Mode], None]] = None

        self.game.on_state_capture = self._on_state_capture
        self.game.on_game_over = self._on_game_over

    def _build_network(self) -> FlapNetwork:
        return FlapNetwork(
            self.config.INPUT_SIZE,
            self.config.HIDDEN_SIZE,
            self.config.OUTPUT_SIZE,
            config=self.config,
            generator=self._generator,
        )

    # ------------------------------------------------------------------
    # Game callbacks
    # ------------------------------------------------------------------

    def _on_state_capture(self, telemetry: Telemetry) -> None:
        if self.mode == Mode.PLAYING:
            self.trainer.collect_from_telemetry(telemetry)

    def _on_game_over(self, score: int) -> None:
        _logger.info(f"Game over in {self.mode.value} mode, score {score} (best {self.game.best_score})")
        if self.mode in (Mode.PLAYING, Mode.AI):
            self.autopilot.stop()
            self._set_mode(Mode.IDLE)

    def _set_mode(self, mode: Mode) -> None:
        if mode == self.mode:
            return
        _logger.info(f"Mode: {self.mode.value} -> {mode.value}")
        self.mode = mode
        if self.on_mode_change is not None:
            self.on_mode_change(mode)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    @property
    def sample_count(self) -> int:
        return len(self.trainer.buffer)

    @property
    def ai_available(self) -> bool:
        """Autonomous play unlocks once enough samples have been collected."""
        return self.sample_count >= self.config.AI_UNLOCK_SAMPLES

    @property
    def can_train(self) -> bool:
        return self.trainer.buffer.is_ready(self.trainer.batch_size)

    def start_playing(self) -> None:
        """Start a manual game. Stops training or autonomous play first."""
        self._stop_loops()
        self.game.start()
        self._set_mode(Mode.PLAYING)

    def handle_flap(self) -> None:
        """
        Space-bar semantics: flap while playing, otherwise start a new manual
        game. Ignored during autonomous play.
        """
        if self.mode == Mode.PLAYING and self.game.is_playing():
            self.game.flap()
        elif self.mode in (Mode.IDLE, Mode.PLAYING):
            self.start_playing()

    def start_training(self, learning_rate: Optional[float] = None) -> bool:
        """
        Start continuous training.

        Returns:
            False (and does nothing) if fewer than batch_size samples are stored
        """
        if not self.can_train:
            _logger.warning(
                f"Need at least {self.trainer.batch_size} samples to train, have {self.sample_count}"
            )
            return False

        if learning_rate is not None:
            self.learning_rate = learning_rate

        self._stop_loops()
        self.game.reset()
        self.trainer.run_continuous(self.learning_rate, self.scheduler)
        self._set_mode(Mode.TRAINING)
        return True

    def stop_training(self) -> None:
        if self.mode != Mode.TRAINING:
            return
        self.trainer.stop()
        self._set_mode(Mode.IDLE)

    def toggle_training(self, learning_rate: Optional[float] = None) -> bool:
        """Start training if stopped, stop it if running. Returns whether training is now on."""
        if self.mode == Mode.TRAINING:
            self.stop_training()
            return False
        return self.start_training(learning_rate)

    def start_ai(self) -> bool:
        """
        Let the network play a fresh game.

        Returns:
            False if not enough samples have been collected yet
        """
        if not self.ai_available:
            _logger.warning(
                f"AI unlocks at {self.config.AI_UNLOCK_SAMPLES} samples, have {self.sample_count}"
            )
            return False

        self._stop_loops()
        self.game.start()
        self._set_mode(Mode.AI)
        self.autopilot.start()
        return True

    def stop_ai(self) -> None:
        if self.mode != Mode.AI:
            return
        self.autopilot.stop()
        self.game.reset()
        self._set_mode(Mode.IDLE)

    def reset(self) -> None:
        """Stop everything, clear collected data and start over with a new random network."""
        self._stop_loops()
        self.scheduler.clear()
        self.game.reset()
        self.trainer.reset()

        self.network = self._build_network()
        self.trainer.attach(self.network)
        self.view._bind(self.network)

        self._set_mode(Mode.IDLE)
        _logger.info("Session reset with a new network")

    def _stop_loops(self) -> None:
        self.trainer.stop()
        self.autopilot.stop()

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """One host frame: simulation step, then scheduled work."""
        self.game.update()
        self.scheduler.tick()

    def get_stats(self) -> TrainingStats:
        return self.trainer.get_stats()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_parameters(self) -> str:
        """Export the current network as a JSON parameter snapshot."""
        return self.network.to_json()

    def import_parameters(self, payload: str) -> None:
        """
        Replace the network's parameters from a JSON snapshot.

        Raises:
            json.JSONDecodeError, KeyError, TypeError, ValueError: On a
                malformed payload; the network is left unchanged
        """
        self.network.from_json(payload)
        _logger.info("Network parameters imported")

    def save_model(self, filepath: Optional[str] = None) -> str:
        """Save a checkpoint (defaults to MODEL_DIR/flap_network.pth) and return its path."""
        if filepath is None:
            filepath = os.path.join(self.config.MODEL_DIR, 'flap_network.pth')
        stats = self.trainer.get_stats()
        self.network.save(
            filepath,
            trained_epochs=stats.trained_epochs,
            current_loss=stats.current_loss,
            best_score=self.game.best_score,
        )
        return filepath

    def load_model(self, filepath: str) -> bool:
        return self.network.load(filepath)
