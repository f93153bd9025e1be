"""
Tests for the command line entry point.

The headless demo runs the full cycle: oracle play, training and AI
evaluation, with small limits so it finishes quickly.
"""

import json
import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config
from main import HeadlessDemo, load_parameters, parse_args, save_parameters
from src.ai.session import LearningSession
from src.ai.telemetry import Telemetry


@pytest.fixture
def config():
    return Config(SEED=21, MAX_SAMPLES=400, MAX_FRAMES_PER_GAME=300)


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert not args.headless
        assert args.model is None and args.save is None
        assert args.games == 5

    def test_overrides(self):
        args = parse_args(['--headless', '--lr', '0.3', '--epochs', '7', '--seed', '4'])
        assert args.headless
        assert args.lr == 0.3
        assert args.epochs == 7
        assert args.seed == 4


class TestParameterFiles:

    def test_json_round_trip(self, config):
        source = LearningSession(config)
        target = LearningSession(Config(SEED=1))
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'out', 'net.json')
            save_parameters(source, path)
            with open(path) as f:
                assert set(json.load(f)) == {'weightsIH', 'weightsHO', 'biasH', 'biasO'}
            assert load_parameters(target, path) is True
        assert target.export_parameters() == source.export_parameters()

    def test_checkpoint_round_trip(self, config):
        source = LearningSession(config)
        target = LearningSession(Config(SEED=1))
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'net.pth')
            save_parameters(source, path)
            assert load_parameters(target, path) is True
        assert target.export_parameters() == source.export_parameters()

    def test_missing_json_file(self, config):
        assert load_parameters(LearningSession(config), '/nonexistent/net.json') is False


class TestHeadlessTraining:

    def test_too_few_samples_skips_training(self, config, capsys):
        demo = HeadlessDemo(config, parse_args(['--headless']))
        for _ in range(config.BATCH_SIZE - 1):
            demo.session.trainer.collect_from_telemetry(Telemetry(0.5, 0.5, 0.5, 0.5))

        assert demo.train(0.1, 5) == 0.0
        assert demo.session.get_stats().trained_epochs == 0
        out = capsys.readouterr().out
        assert "Skipped training" in out
        assert "Trained" not in out

    def test_trains_with_a_batch(self, config, capsys):
        demo = HeadlessDemo(config, parse_args(['--headless']))
        for _ in range(config.BATCH_SIZE):
            demo.session.trainer.collect_from_telemetry(Telemetry(0.6, 0.5, 0.5, 0.5))

        assert demo.train(0.1, 2) > 0
        assert demo.session.get_stats().trained_epochs == 2
        assert "Trained 2 epochs" in capsys.readouterr().out


@pytest.mark.slow
class TestHeadlessDemo:

    def test_full_cycle(self, config):
        args = parse_args(['--headless', '--epochs', '3', '--collect-games', '4', '--games', '2'])
        result = HeadlessDemo(config, args).run()

        assert result['samples'] >= config.AI_UNLOCK_SAMPLES
        assert result['loss'] > 0
        assert len(result['scores']) == 2
