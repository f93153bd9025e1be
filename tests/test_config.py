"""
Tests for Config validation.

These tests verify that invalid configurations are caught early
rather than causing cryptic runtime errors during training.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config


class TestConfigDefaults:
    """Test the shipped defaults."""

    def test_network_layout(self):
        cfg = Config()
        assert (cfg.INPUT_SIZE, cfg.HIDDEN_SIZE, cfg.OUTPUT_SIZE) == (4, 8, 1)

    def test_training_defaults(self):
        cfg = Config()
        assert cfg.LEARNING_RATE == 0.1
        assert cfg.BATCH_SIZE == 32
        assert cfg.MAX_SAMPLES == 10_000
        assert cfg.DECISION_THRESHOLD == 0.5

    def test_label_lists_match_layer_sizes(self):
        cfg = Config()
        assert len(cfg.VIS_INPUT_LABELS) == cfg.INPUT_SIZE
        assert len(cfg.VIS_OUTPUT_LABELS) == cfg.OUTPUT_SIZE

    def test_label_lists_not_shared(self):
        a, b = Config(), Config()
        a.VIS_INPUT_LABELS.append('extra')
        assert len(b.VIS_INPUT_LABELS) == 4


class TestConfigValidation:
    """Test Config.__post_init__ validation."""

    def test_valid_config_passes(self):
        """Default config should validate without errors."""
        assert Config() is not None

    def test_invalid_learning_rate_zero(self):
        cfg = Config()
        cfg.LEARNING_RATE = 0
        with pytest.raises(AssertionError):
            cfg.__post_init__()

    def test_invalid_batch_size(self):
        with pytest.raises(AssertionError):
            Config(BATCH_SIZE=0)

    def test_batch_larger_than_buffer(self):
        with pytest.raises(AssertionError):
            Config(BATCH_SIZE=64, MAX_SAMPLES=32)

    def test_invalid_burst(self):
        with pytest.raises(AssertionError):
            Config(EPOCHS_PER_BURST=0)

    @pytest.mark.parametrize('threshold', [0.0, 1.0, -0.5, 1.5])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(AssertionError):
            Config(DECISION_THRESHOLD=threshold)

    def test_invalid_layer_size(self):
        with pytest.raises(AssertionError):
            Config(HIDDEN_SIZE=0)

    def test_invalid_velocity_range(self):
        with pytest.raises(AssertionError):
            Config(VELOCITY_RANGE=0)
