"""
Logger Unit Tests.
"""

import logging

from src.core.logger import get_logger, set_log_level, setup_logger


class TestLogger:
    """Test logger setup."""

    def test_setup_logger_handlers(self, tmp_path):
        logger = setup_logger("tests.logger.handlers", level="DEBUG", log_file=tmp_path / "t.log")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert logger.propagate is False

    def test_file_output(self, tmp_path):
        log_file = tmp_path / "ledger.log"
        logger = setup_logger("tests.logger.file", level="INFO", log_file=log_file)

        logger.info("Deposit of 900")
        for handler in logger.handlers:
            handler.flush()

        assert "Deposit of 900" in log_file.read_text()

    def test_get_logger_reuses_handlers(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGER_LOG_FILE", str(tmp_path / "env.log"))

        first = get_logger("tests.logger.reuse")
        second = get_logger("tests.logger.reuse")

        assert first is second
        assert len(second.handlers) == 2

    def test_set_log_level(self, tmp_path):
        logger = setup_logger("tests.logger.level", level="INFO", log_file=tmp_path / "l.log")

        set_log_level("warning")

        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)
        set_log_level("INFO")
