"""
Tests for logging setup.
"""

import logging

from rich.logging import RichHandler

from ccumd.utils.logging import _parse_level, get_logger, setup_logging, setup_logging_from_config


class TestSetupLogging:
    """Handlers installed on the ccumd logger."""

    def test_rich_console_handler(self):
        logger = setup_logging("DEBUG")
        assert logger.name == "ccumd"
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_plain_console_handler(self):
        logger = setup_logging("INFO", use_rich=False)
        assert not any(isinstance(h, RichHandler) for h in logger.handlers)
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_repeated_setup_replaces_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1

    def test_file_handler_receives_child_records(self, tmp_path):
        log_file = tmp_path / "logs" / "ccumd.log"
        setup_logging("INFO", log_file=log_file, console_enabled=False)

        get_logger("ccumd.sync.device").info("Synced 3 files from device 'laptop'")
        for handler in logging.getLogger("ccumd").handlers:
            handler.flush()

        text = log_file.read_text()
        assert "Synced 3 files from device 'laptop'" in text
        assert "ccumd.sync.device" in text

    def test_quiets_third_party_loggers(self):
        setup_logging("INFO")
        assert logging.getLogger("paramiko").level == logging.WARNING
        setup_logging("DEBUG")
        assert logging.getLogger("paramiko").level == logging.DEBUG


class TestSetupFromConfig:
    def test_relative_log_file_resolved_against_base_dir(self, tmp_path):
        config = {"logging": {"level": "WARNING", "file": "ccumd.log", "console_enabled": False}}
        logger = setup_logging_from_config(config, base_dir=tmp_path)
        logger.warning("disk almost full")
        for handler in logger.handlers:
            handler.flush()
        assert "disk almost full" in (tmp_path / "ccumd.log").read_text()

    def test_defaults_when_section_missing(self):
        logger = setup_logging_from_config({})
        assert logger.level == logging.INFO


class TestParseLevel:
    def test_names_and_ints(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level(logging.ERROR) == logging.ERROR
        assert _parse_level("nonsense") == logging.INFO
