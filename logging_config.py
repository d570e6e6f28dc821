import logging
import os


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class _LevelFilter(logging.Filter):
    """Pass records whose level lies in [low, high]."""

    def __init__(self, low, high=logging.CRITICAL):
        super().__init__()
        self.low = low
        self.high = high

    def filter(self, record):
        return self.low <= record.levelno <= self.high


def _file_handler(log_dir, filename, low, high=logging.CRITICAL):
    handler = logging.FileHandler(os.path.join(log_dir, filename), delay=True)
    handler.setLevel(low)
    handler.addFilter(_LevelFilter(low, high))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(logger_name, info_file, warning_file, error_file, environment='DEBUG'):
    """
    Build a named logger that splits its records over three files.

    Parameters:
        logger_name (str): Name passed to logging.getLogger.
        info_file (str): File receiving DEBUG and INFO records.
        warning_file (str): File receiving WARNING records.
        error_file (str): File receiving ERROR and CRITICAL records.
        environment (str): 'DEBUG' logs at DEBUG level, anything else at INFO.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG if environment == 'DEBUG' else logging.INFO)
    logger.propagate = False

    # Already configured by an earlier import
    if logger.handlers:
        return logger

    log_dir = os.getenv('LOG_DIR', 'logs')
    os.makedirs(log_dir, exist_ok=True)
    logger.addHandler(_file_handler(log_dir, info_file, logging.DEBUG, logging.INFO))
    logger.addHandler(_file_handler(log_dir, warning_file, logging.WARNING, logging.WARNING))
    logger.addHandler(_file_handler(log_dir, error_file, logging.ERROR))

    return logger
