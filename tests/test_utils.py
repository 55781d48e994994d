"""
Tests for logging utilities.
"""

import logging

import pytest

from nuget_config_creator.utils.logger import (
    ColoredFormatter,
    get_current_log_file,
    get_logger,
    set_global_config,
)


@pytest.fixture
def reset_logging():
    yield
    set_global_config({})


class TestLogger:
    """Test logger configuration."""

    def test_logger_is_cached(self):
        logger = get_logger("ncc.test.cached")
        assert get_logger("ncc.test.cached") is logger
        assert logger.propagate is False

    def test_default_level_is_warning(self, reset_logging):
        set_global_config({})
        logger = get_logger("ncc.test.default")

        assert logger.level == logging.WARNING
        assert get_current_log_file() is None

    def test_quiet_mode(self, reset_logging):
        logger = get_logger("ncc.test.quiet")
        set_global_config({'quiet': True})

        assert logger.level == logging.ERROR
        assert all(handler.level == logging.ERROR for handler in logger.handlers)

    def test_debug_mode_writes_log_file(self, tmp_app_dirs, reset_logging):
        config_dir, _ = tmp_app_dirs
        logger = get_logger("ncc.test.debug")

        set_global_config({'debug_mode': True})
        logger.debug("debug message")

        log_file = get_current_log_file()
        assert log_file is not None
        assert log_file.startswith(str(config_dir / "logs"))
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)

        for handler in logger.handlers:
            handler.flush()
        with open(log_file, encoding="utf-8") as f:
            assert "debug message" in f.read()

    def test_explicit_log_file(self, tmp_path, reset_logging):
        log_file = tmp_path / "ncc.log"
        logger = get_logger("ncc.test.file")

        set_global_config({'log_file': str(log_file)})
        logger.info("info message")

        for handler in logger.handlers:
            handler.flush()
        assert "info message" in log_file.read_text(encoding="utf-8")


class TestColoredFormatter:
    """Test colored console formatting."""

    def test_levelname_colored_on_copy_only(self):
        formatter = ColoredFormatter('%(levelname)s %(message)s')
        record = logging.LogRecord("ncc", logging.WARNING, __file__, 1, "careful", None, None)

        output = formatter.format(record)

        assert "\033[33mWARNING\033[0m careful" == output
        assert record.levelname == "WARNING"
