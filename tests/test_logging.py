import logging
from logging.handlers import RotatingFileHandler

from status_bot.logging_setup import logger, setup_logging


def test_console_only_by_default():
    setup_logging("WARNING")
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING


def test_debug_file_and_idempotent(tmp_path):
    path = tmp_path / "debug.log"
    setup_logging("INFO", debug_log_enabled=True, debug_log_file=str(path))
    setup_logging("INFO", debug_log_enabled=True, debug_log_file=str(path))

    assert len(logger.handlers) == 2
    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)

    logger.debug("[TEST] hello")
    for h in logger.handlers:
        h.flush()
    assert "[DEBUG] [TEST] hello" in path.read_text(encoding="utf-8")
    setup_logging()
