"""
Tests for the logging setup.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.utils.logger import (
    LogLevel,
    get_log_path,
    get_logger,
    log_model_event,
    log_training_metrics,
    setup_logging,
)


@pytest.fixture
def file_logging(tmp_path):
    """Log to a temporary file, restoring the quiet test setup afterwards."""
    setup_logging(log_dir=str(tmp_path), level=LogLevel.DEBUG, console_output=False,
                  log_filename='test.log', force=True)
    yield tmp_path / 'test.log'
    setup_logging(level=LogLevel.WARNING, file_output=False, force=True)


class TestLogLevel:

    def test_from_name_is_case_insensitive(self):
        assert LogLevel.from_name('debug') == LogLevel.DEBUG
        assert LogLevel.from_name('WARNING') == LogLevel.WARNING

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            LogLevel.from_name('loud')


class TestLogging:

    def test_logger_names_drop_src_prefix(self):
        assert get_logger('src.ai.trainer').name == 'neuroflap.ai.trainer'

    def test_no_log_path_without_file_output(self):
        setup_logging(level=LogLevel.WARNING, file_output=False, force=True)
        assert get_log_path() is None

    def test_file_output(self, file_logging):
        assert get_log_path() == file_logging
        get_logger('src.ai.session').info("Mode: idle -> playing")
        log_training_metrics(20, 0.125, 64, burst_epochs=10)
        log_model_event('save', 'models/net.pth', trained_epochs=20)

        text = file_logging.read_text(encoding='utf-8')
        assert "neuroflap.ai.session | Mode: idle -> playing" in text
        assert "epochs=20 | loss=0.125000 | samples=64 | burst=10" in text
        assert "SAVE | models/net.pth | trained_epochs=20" in text
