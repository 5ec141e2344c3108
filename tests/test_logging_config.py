"""Tests for logging setup."""

import logging

from tabkey.logging_config import get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_creates_log_file(self, tmp_path):
        logger = setup_logging(tmp_path / "logs", "DEBUG")

        assert logger.name == "tabkey"
        assert logger.level == logging.DEBUG
        assert (tmp_path / "logs" / "tabkey.log").exists()
        logger.handlers.clear()

    def test_rotates_large_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        (log_dir / "tabkey.log").write_bytes(b"x" * (5 * 1024 * 1024 + 1))

        logger = setup_logging(log_dir)

        assert (log_dir / "tabkey.log.1").stat().st_size > 5 * 1024 * 1024
        assert (log_dir / "tabkey.log").stat().st_size < 1024
        logger.handlers.clear()

    def test_unknown_level_defaults_to_info(self, tmp_path):
        logger = setup_logging(tmp_path, "chatty")

        assert logger.level == logging.INFO
        logger.handlers.clear()


class TestGetLogger:
    """Tests for get_logger."""

    def test_namespaces_plain_names(self):
        assert get_logger("cli").name == "tabkey.cli"

    def test_keeps_package_module_names(self):
        assert get_logger("tabkey.services.tables").name == "tabkey.services.tables"
        assert get_logger("tabkey").name == "tabkey"
