"""
Tests for the Trainer module.

These tests verify:
    - The heuristic oracle
    - Sample collection and statistics notification
    - Epoch training, including the batch-size boundary
    - Continuous training driven by a frame scheduler
    - Reset
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config
from src.ai.network import FlapNetwork
from src.ai.scheduler import FrameScheduler
from src.ai.telemetry import InvalidTelemetryError, Telemetry
from src.ai.trainer import Trainer, TrainingStats, fisher_yates_shuffle, heuristic_action


def random_telemetry(rng: np.random.Generator) -> Telemetry:
    return Telemetry(*rng.uniform(0.0, 1.0, size=4).tolist())


@pytest.fixture
def config():
    """Create a test configuration with the default batch size."""
    return Config(SEED=42)


@pytest.fixture
def network(config):
    return FlapNetwork(4, 8, 1, config, seed=42)


@pytest.fixture
def trainer(network, config):
    return Trainer(network, config)


@pytest.fixture
def small_trainer(small_config):
    """Trainer with a tiny buffer and batch size."""
    return Trainer(FlapNetwork(4, 8, 1, small_config, seed=5), small_config)


def fill(trainer: Trainer, count: int, seed: int = 0) -> None:
    rng = np.random.default_rng(seed)
    for _ in range(count):
        trainer.collect_from_telemetry(random_telemetry(rng))


class TestHeuristicOracle:
    """Test the rule-based label generator."""

    def test_below_gap_flaps(self):
        assert heuristic_action({'positionY': 0.6, 'velocity': 0.5, 'distance': 0.3, 'gapCenterY': 0.5}) == 1

    def test_above_gap_waits(self):
        assert heuristic_action({'positionY': 0.4, 'velocity': 0.5, 'distance': 0.3, 'gapCenterY': 0.5}) == 0

    def test_at_gap_center_waits(self):
        assert heuristic_action(Telemetry(0.5, 0.5, 0.3, 0.5)) == 0

    def test_falling_bird_flaps_earlier(self):
        assert heuristic_action(Telemetry(0.5, 1.0, 0.3, 0.5)) == 1
        assert heuristic_action(Telemetry(0.5, 0.0, 0.3, 0.5)) == 0

    def test_invalid_telemetry_raises(self):
        with pytest.raises(InvalidTelemetryError):
            heuristic_action(None)


class TestShuffle:
    """Test the Fisher-Yates shuffle."""

    def test_is_a_permutation(self):
        values = np.arange(50)
        fisher_yates_shuffle(values, np.random.default_rng(0))
        assert sorted(values.tolist()) == list(range(50))

    def test_seeded_shuffle_is_reproducible(self):
        a = fisher_yates_shuffle(np.arange(20), np.random.default_rng(9))
        b = fisher_yates_shuffle(np.arange(20), np.random.default_rng(9))
        assert a.tolist() == b.tolist()

    def test_single_element(self):
        assert fisher_yates_shuffle(np.arange(1), np.random.default_rng(0)).tolist() == [0]


class TestSampleCollection:
    """Test storing labelled samples."""

    def test_add_sample_updates_stats(self, trainer):
        trainer.add_sample(Telemetry(0.6, 0.5, 0.3, 0.5), 1)
        assert len(trainer.buffer) == 1
        assert trainer.get_stats().total_samples == 1

    def test_collect_uses_oracle_label(self, trainer):
        trainer.collect_from_telemetry(Telemetry(0.6, 0.5, 0.3, 0.5))
        trainer.collect_from_telemetry(Telemetry(0.4, 0.5, 0.3, 0.5))
        assert [s.target for s in trainer.buffer] == [(1.0,), (0.0,)]
        assert trainer.buffer[0].inputs == (0.6, 0.5, 0.3, 0.5)

    def test_observer_notified_per_sample(self, trainer):
        seen = []
        trainer.on_stats_update = seen.append
        fill(trainer, 3)
        assert [s.total_samples for s in seen] == [1, 2, 3]

    def test_invalid_telemetry_not_stored(self, trainer):
        with pytest.raises(InvalidTelemetryError):
            trainer.collect_from_telemetry({'positionY': 0.5})
        assert len(trainer.buffer) == 0

    def test_total_samples_capped_at_capacity(self, small_trainer, small_config):
        fill(small_trainer, small_config.MAX_SAMPLES + 10)
        assert small_trainer.get_stats().total_samples == small_config.MAX_SAMPLES

    def test_get_stats_is_a_copy(self, trainer):
        stats = trainer.get_stats()
        stats.total_samples = 999
        assert trainer.get_stats().total_samples == 0


class TestRunEpochs:
    """Test epoch-batched training."""

    def test_below_batch_size_trains_nothing(self, trainer, network):
        fill(trainer, 31)
        before = network.snapshot_parameters()
        seen = []
        trainer.on_stats_update = seen.append

        assert trainer.run_epochs(0.1, 5) == 0.0
        assert trainer.get_stats().trained_epochs == 0
        assert network.snapshot_parameters() == before
        assert seen == []

    def test_at_batch_size_trains(self, trainer, network):
        fill(trainer, 32)
        before = network.snapshot_parameters()

        loss = trainer.run_epochs(0.1, 3)
        assert loss > 0
        assert trainer.get_stats().trained_epochs == 3
        assert trainer.get_stats().current_loss == loss
        assert network.snapshot_parameters() != before

    def test_epochs_accumulate(self, trainer):
        fill(trainer, 40)
        trainer.run_epochs(0.1, 2)
        trainer.run_epochs(0.1, 3)
        assert trainer.get_stats().trained_epochs == 5

    def test_every_sample_updates_once_per_epoch(self, trainer, network, monkeypatch):
        fill(trainer, 40)
        calls = []
        original = network.train_step

        def counting(inputs, targets, learning_rate=0.1):
            calls.append(learning_rate)
            return original(inputs, targets, learning_rate)

        monkeypatch.setattr(network, 'train_step', counting)
        trainer.run_epochs(0.25, 2)
        assert len(calls) == 80
        assert set(calls) == {0.25}

    def test_non_positive_epoch_count_rejected(self, trainer):
        fill(trainer, 32)
        with pytest.raises(ValueError):
            trainer.run_epochs(0.1, 0)

    def test_loss_falls_with_training(self, small_trainer, small_config):
        fill(small_trainer, small_config.MAX_SAMPLES)
        first = small_trainer.run_epochs(0.5, 1)
        small_trainer.run_epochs(0.5, 100)
        last = small_trainer.run_epochs(0.5, 1)
        assert last < first

    def test_observer_sees_training_result(self, trainer):
        fill(trainer, 32)
        seen = []
        trainer.on_stats_update = seen.append
        loss = trainer.run_epochs(0.1, 1)
        assert seen[-1] == TrainingStats(total_samples=32, current_loss=loss, trained_epochs=1)

    def test_seeded_training_is_reproducible(self, config):
        results = []
        for _ in range(2):
            net = FlapNetwork(4, 8, 1, config, seed=1)
            trainer = Trainer(net, config, rng=np.random.default_rng(3))
            fill(trainer, 40, seed=8)
            trainer.run_epochs(0.1, 2)
            results.append(net.snapshot_parameters())
        assert results[0] == results[1]


class TestContinuousTraining:
    """Test scheduler-driven continuous training."""

    def test_first_burst_runs_immediately(self, small_trainer, small_config):
        fill(small_trainer, 16)
        scheduler = FrameScheduler()
        small_trainer.run_continuous(0.1, scheduler)
        assert small_trainer.get_stats().trained_epochs == small_config.EPOCHS_PER_BURST
        assert small_trainer.is_training

    def test_one_burst_per_tick(self, small_trainer, small_config):
        fill(small_trainer, 16)
        scheduler = FrameScheduler()
        small_trainer.run_continuous(0.1, scheduler)
        for _ in range(3):
            scheduler.tick()
        assert small_trainer.get_stats().trained_epochs == 4 * small_config.EPOCHS_PER_BURST

    def test_stop_observed_at_next_tick(self, small_trainer, small_config):
        fill(small_trainer, 16)
        scheduler = FrameScheduler()
        completed = []
        small_trainer.run_continuous(0.1, scheduler, on_complete=lambda: completed.append(True))

        small_trainer.stop()
        assert not small_trainer.is_training
        assert completed == []

        scheduler.tick()
        assert completed == [True]
        assert small_trainer.get_stats().trained_epochs == small_config.EPOCHS_PER_BURST
        assert scheduler.pending == 0

    def test_restart_cancels_previous_loop(self, small_trainer, small_config):
        fill(small_trainer, 16)
        scheduler = FrameScheduler()
        first = small_trainer.run_continuous(0.1, scheduler)
        second = small_trainer.run_continuous(0.1, scheduler)
        assert first.cancelled and not second.cancelled

        scheduler.tick()
        assert small_trainer.get_stats().trained_epochs == 3 * small_config.EPOCHS_PER_BURST
        assert scheduler.pending == 1

    def test_continuous_without_enough_samples_is_idle_work(self, small_trainer):
        fill(small_trainer, 3)
        scheduler = FrameScheduler()
        small_trainer.run_continuous(0.1, scheduler)
        scheduler.tick()
        assert small_trainer.get_stats().trained_epochs == 0
        assert small_trainer.is_training


class TestReset:
    """Test clearing training data."""

    def test_reset_clears_buffer_and_stats(self, trainer):
        fill(trainer, 40)
        trainer.run_epochs(0.1, 1)
        seen = []
        trainer.on_stats_update = seen.append

        trainer.reset()
        assert len(trainer.buffer) == 0
        assert trainer.get_stats() == TrainingStats()
        assert seen == [TrainingStats()]

    def test_reset_does_not_stop_continuous_training(self, small_trainer):
        fill(small_trainer, 16)
        scheduler = FrameScheduler()
        small_trainer.run_continuous(0.1, scheduler)
        small_trainer.reset()
        assert small_trainer.is_training
