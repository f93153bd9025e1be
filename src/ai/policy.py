"""
Control Policy
==============

Maps live telemetry through the network to a flap / no-flap decision, and
runs the autonomous-play loop one decision per frame.
"""

from typing import Any, Callable, Optional

from src.ai.network import NetworkView
from src.ai.scheduler import CancellationToken, FrameScheduler
from src.ai.telemetry import Telemetry
from src.utils.logger import get_logger

_logger = get_logger(__name__)


class ControlPolicy:
    """
    Thresholded network output.

    Holds only a read-only NetworkView, so it can evaluate the network but
    never train it.
    """

    def __init__(self, view: NetworkView, threshold: float = 0.5):
        self.view = view
        self.threshold = threshold

    def flap_probability(self, telemetry: Any) -> float:
        features = Telemetry.coerce(telemetry).to_features()
        return float(self.view.forward(features)[0])

    def decide(self, telemetry: Any) -> bool:
        """
        Decide whether to flap.

        Returns:
            True only if the network output is strictly above the threshold

        Raises:
            InvalidTelemetryError: If telemetry is missing or malformed
        """
        return self.flap_probability(telemetry) > self.threshold


class Autopilot:
    """
    Autonomous-play loop: one policy decision per scheduler tick.

    The loop ends when stop() is called or the game leaves the playing
    state, whichever is seen first at a tick boundary.
    """

    def __init__(self, policy: ControlPolicy, game, scheduler: FrameScheduler):
        """
        Args:
            policy: Decision policy
            game: Simulation exposing is_playing(), get_telemetry() and flap()
            scheduler: Frame scheduler that drives the loop
        """
        self.policy = policy
        self.game = game
        self.scheduler = scheduler

        self.decisions = 0
        self.flaps = 0
        self._token: Optional[CancellationToken] = None

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def start(self, on_finish: Optional[Callable[[], None]] = None) -> CancellationToken:
        """Start deciding on every tick. Any previous loop is cancelled."""
        self.stop()
        token = CancellationToken()
        self._token = token
        self.decisions = 0
        self.flaps = 0

        def step() -> None:
            if token.cancelled or not self.game.is_playing():
                token.cancel()
                _logger.debug(f"Autopilot finished: {self.flaps}/{self.decisions} flaps")
                if on_finish is not None:
                    on_finish()
                return

            self.decisions += 1
            if self.policy.decide(self.game.get_telemetry()):
                self.flaps += 1
                self.game.flap()
            self.scheduler.schedule(step)

        step()
        return token

    def stop(self) -> None:
        if self._token is not None:
            self._token.cancel()
