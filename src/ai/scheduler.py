"""
Cooperative Frame Scheduler
===========================

Long-running loops (continuous training, autonomous play) never block the
host loop. Each one does a small unit of work, then asks the scheduler to
call it again on the next frame.

The host owns the clock: a pygame frame loop, a headless loop, or a test
calls tick() once per frame.

    scheduler = FrameScheduler()
    trainer.run_continuous(0.1, scheduler)
    while running:
        game.update()
        scheduler.tick()   # one training burst per frame
"""

from collections import deque
from typing import Callable, Deque

from src.utils.logger import get_logger

_logger = get_logger(__name__)

FrameCallback = Callable[[], None]


class CancellationToken:
    """A flag polled between units of work. Cancelling never interrupts a unit in progress."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class FrameScheduler:
    """
    Queue of callbacks to run on the next frame.

    A callback scheduled while tick() is running lands in the following
    frame, so a self-rescheduling loop runs exactly once per tick.
    """

    def __init__(self):
        self._pending: Deque[FrameCallback] = deque()
        self.frame = 0

    def schedule(self, callback: FrameCallback) -> None:
        """Run callback on the next tick."""
        self._pending.append(callback)

    def tick(self) -> int:
        """
        Advance one frame and run every callback queued before it started.

        Returns:
            Number of callbacks run
        """
        self.frame += 1
        due = len(self._pending)
        for _ in range(due):
            callback = self._pending.popleft()
            callback()
        return due

    def run(self, max_ticks: int) -> int:
        """
        Tick until nothing is pending or max_ticks frames have passed.

        Returns:
            Number of ticks performed
        """
        ticks = 0
        while self._pending and ticks < max_ticks:
            self.tick()
            ticks += 1
        if self._pending:
            _logger.debug(f"Scheduler stopped after {ticks} ticks with {len(self._pending)} pending")
        return ticks

    @property
    def pending(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        """Drop all pending callbacks."""
        self._pending.clear()
