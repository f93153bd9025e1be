"""
Training Loop
=============

Turns telemetry collected during manual play into network updates:
    1. Label each tick of telemetry with the heuristic oracle
    2. Store (features, label) samples in a bounded FIFO buffer
    3. Run shuffled epochs over the buffer, one update per sample
    4. Track loss and epoch statistics and push them to an observer

Continuous training is cooperative: one short burst of epochs per frame,
driven by a FrameScheduler, until stop() is observed at a frame boundary.
"""

import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

import numpy as np

import sys
sys.path.append('../..')
from config import Config
from src.ai.network import FlapNetwork
from src.ai.scheduler import CancellationToken, FrameScheduler
from src.ai.telemetry import Telemetry
from src.ai.training_buffer import Sample, TrainingBuffer
from src.utils.logger import get_logger, log_training_metrics

_logger = get_logger(__name__)


@dataclass
class TrainingStats:
    """Statistics reported after every buffer change and training pass."""
    total_samples: int = 0
    current_loss: float = 0.0
    trained_epochs: int = 0


def heuristic_action(telemetry: Any, velocity_weight: float = 0.1) -> int:
    """
    Label telemetry with the action the oracle would take.

    Flap (1) when the bird is below the gap center, shifted by velocity:
    a falling bird (velocity > 0.5) flaps a little earlier. This is a
    hand-written rule standing in for a reward signal, not an optimal policy.

    Returns:
        1 to flap, 0 otherwise
    """
    t = Telemetry.coerce(telemetry)
    velocity_factor = (t.velocity - 0.5) * velocity_weight
    return 1 if t.position_y > t.gap_center_y - velocity_factor else 0


def fisher_yates_shuffle(values: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Shuffle values in place with an unbiased Fisher-Yates pass and return them."""
    for i in range(len(values) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        values[i], values[j] = values[j], values[i]
    return values


class Trainer:
    """
    Owns the training buffer and updates the network from it.

    Responsibilities:
        1. Collect labelled samples from telemetry
        2. Run epoch-batched training passes
        3. Run continuous training one burst per frame
        4. Report statistics to an observer

    Example:
        >>> net = FlapNetwork(4, 8, 1)
        >>> trainer = Trainer(net)
        >>> trainer.collect_from_telemetry(game.get_telemetry())
        >>> loss = trainer.run_epochs(learning_rate=0.1, epoch_count=100)
    """

    def __init__(
        self,
        network: FlapNetwork,
        config: Optional[Config] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the trainer.

        Args:
            network: Network to train (the trainer is its only writer)
            config: Configuration object
            rng: Generator used for shuffling (seeded from config.SEED if omitted)
        """
        self.network = network
        self.config = config or Config()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.SEED)

        self.batch_size = self.config.BATCH_SIZE
        self.buffer = TrainingBuffer(
            capacity=self.config.MAX_SAMPLES,
            input_size=self.config.INPUT_SIZE,
            target_size=self.config.OUTPUT_SIZE,
        )
        self.stats = TrainingStats()

        self.on_stats_update: Optional[Callable[[TrainingStats], None]] = None

        self._stop_token: Optional[CancellationToken] = None

    @property
    def is_training(self) -> bool:
        """True while a continuous-training loop is live and not yet asked to stop."""
        return self._stop_token is not None and not self._stop_token.cancelled

    def attach(self, network: FlapNetwork) -> None:
        """Train a different network from now on (buffer and stats are kept)."""
        self.network = network

    # ------------------------------------------------------------------
    # Sample collection
    # ------------------------------------------------------------------

    def add_sample(self, telemetry: Any, label: float) -> None:
        """
        Store one labelled sample built from telemetry.

        Raises:
            InvalidTelemetryError: If telemetry is missing or malformed
        """
        features = Telemetry.coerce(telemetry).to_features()
        self.buffer.push(Sample.create(features, [label]))

        self.stats.total_samples = len(self.buffer)
        self._notify()

    def heuristic_action(self, telemetry: Any) -> int:
        return heuristic_action(telemetry, self.config.HEURISTIC_VELOCITY_WEIGHT)

    def collect_from_telemetry(self, telemetry: Any) -> None:
        """Label telemetry with the heuristic oracle and store it. Call once per frame of play."""
        self.add_sample(telemetry, self.heuristic_action(telemetry))

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def run_epochs(self, learning_rate: float, epoch_count: int) -> float:
        """
        Train over the whole buffer epoch_count times.

        Each epoch visits a fresh random permutation of the buffer in chunks
        of batch_size samples. Every sample triggers its own parameter update;
        chunking only groups the schedule.

        Args:
            learning_rate: Step size for each update
            epoch_count: Number of epochs to run

        Returns:
            Mean per-sample loss over the run, or 0.0 if the buffer holds
            fewer than batch_size samples (nothing is trained)
        """
        if epoch_count < 1:
            raise ValueError(f"epoch_count must be at least 1, got {epoch_count}")

        if not self.buffer.is_ready(self.batch_size):
            _logger.debug(
                f"Not enough training data ({len(self.buffer)}/{self.batch_size} samples)"
            )
            return 0.0

        start_time = time.time()
        inputs, targets = self.buffer.as_arrays()
        order = np.arange(len(inputs))

        total_loss = 0.0
        samples_trained = 0

        for _ in range(epoch_count):
            fisher_yates_shuffle(order, self.rng)

            for start in range(0, len(order), self.batch_size):
                for index in order[start:start + self.batch_size]:
                    total_loss += self.network.train_step(
                        inputs[index], targets[index], learning_rate
                    )
                    samples_trained += 1

        self.stats.current_loss = total_loss / samples_trained
        self.stats.trained_epochs += epoch_count
        self._notify()

        log_training_metrics(
            self.stats.trained_epochs,
            self.stats.current_loss,
            self.stats.total_samples,
            burst_epochs=epoch_count,
            duration=time.time() - start_time,
        )
        return self.stats.current_loss

    def run_continuous(
        self,
        learning_rate: float,
        scheduler: FrameScheduler,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> CancellationToken:
        """
        Train one burst now and one burst per scheduler tick until stopped.

        Stop requests are seen at the start of the next tick, never mid-burst.
        Starting again cancels any loop that is still running.

        Args:
            learning_rate: Step size for each update
            scheduler: Frame scheduler that drives the loop
            on_complete: Called once, on the tick that observes the stop

        Returns:
            The loop's cancellation token
        """
        if self._stop_token is not None:
            self._stop_token.cancel()

        token = CancellationToken()
        self._stop_token = token
        burst_epochs = self.config.EPOCHS_PER_BURST

        _logger.info(f"Continuous training started (lr={learning_rate}, {burst_epochs} epochs/frame)")

        def burst() -> None:
            if token.cancelled:
                _logger.info(
                    f"Continuous training stopped after {self.stats.trained_epochs} epochs"
                )
                if on_complete is not None:
                    on_complete()
                return

            self.run_epochs(learning_rate, burst_epochs)
            scheduler.schedule(burst)

        burst()
        return token

    def stop(self) -> None:
        """Ask continuous training to stop at the next frame boundary."""
        if self._stop_token is not None:
            self._stop_token.cancel()

    def reset(self) -> None:
        """Clear all training data and statistics."""
        self.buffer.clear()
        self.stats = TrainingStats()
        self._notify()
        _logger.info("Training data cleared")

    def get_stats(self) -> TrainingStats:
        """Get a copy of the current statistics."""
        return replace(self.stats)

    def _notify(self) -> None:
        if self.on_stats_update is not None:
            self.on_stats_update(self.get_stats())


# Testing
if __name__ == "__main__":
    print("Trainer module - import and use with a FlapNetwork and telemetry")
