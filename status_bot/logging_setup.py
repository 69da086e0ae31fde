import logging
import sys
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "statusbot"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: str = "INFO", debug_log_enabled: bool = False, debug_log_file: str = "debug.log") -> logging.Logger:
    """Console always on; optional rotating file for DEBUG. Safe to call more than once."""
    logger.setLevel(logging.DEBUG)  # master gate
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if debug_log_enabled:
        file_handler = RotatingFileHandler(debug_log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger
