"""
Tests for the cooperative frame scheduler.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.ai.scheduler import CancellationToken, FrameScheduler


class TestCancellationToken:

    def test_starts_live(self):
        assert not CancellationToken().cancelled

    def test_cancel_is_sticky(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.cancelled


class TestFrameScheduler:

    def test_callback_runs_on_next_tick(self):
        scheduler = FrameScheduler()
        calls = []
        scheduler.schedule(lambda: calls.append(scheduler.frame))
        assert calls == []
        assert scheduler.tick() == 1
        assert calls == [1]

    def test_rescheduled_callback_waits_for_following_tick(self):
        scheduler = FrameScheduler()
        calls = []

        def loop():
            calls.append(scheduler.frame)
            scheduler.schedule(loop)

        scheduler.schedule(loop)
        for _ in range(3):
            scheduler.tick()
        assert calls == [1, 2, 3]
        assert scheduler.pending == 1

    def test_callbacks_run_in_fifo_order(self):
        scheduler = FrameScheduler()
        order = []
        for name in 'abc':
            scheduler.schedule(lambda name=name: order.append(name))
        scheduler.tick()
        assert order == ['a', 'b', 'c']

    def test_run_stops_when_idle(self):
        scheduler = FrameScheduler()
        remaining = [3]

        def countdown():
            remaining[0] -= 1
            if remaining[0] > 0:
                scheduler.schedule(countdown)

        scheduler.schedule(countdown)
        assert scheduler.run(max_ticks=100) == 3
        assert scheduler.pending == 0

    def test_run_respects_max_ticks(self):
        scheduler = FrameScheduler()

        def forever():
            scheduler.schedule(forever)

        scheduler.schedule(forever)
        assert scheduler.run(max_ticks=10) == 10
        assert scheduler.pending == 1

    def test_clear(self):
        scheduler = FrameScheduler()
        scheduler.schedule(lambda: None)
        scheduler.clear()
        assert scheduler.tick() == 0
