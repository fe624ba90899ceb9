import logging
import sys

from . import config

_is_logging_configured = False


def setup_logging(level=None, log_file=None):
    """Configure the root logger once: stdout handler plus an optional file handler."""
    global _is_logging_configured

    if _is_logging_configured:
        return logging.getLogger()

    level = level or config.LOG_LEVEL
    log_file = log_file or config.LOG_FILE

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Set higher log level for noisy third-party libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    _is_logging_configured = True
    return root_logger
