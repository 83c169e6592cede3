import logging
import os

LOGGER_NAME = "fwatcher"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(level):
    if isinstance(level, str):
        # getLevelName maps known names to numbers and anything else to a string.
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def _open_handlers(log_file, console):
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        yield logging.FileHandler(log_file)
    if console:
        yield logging.StreamHandler()


def setup_logger(name=LOGGER_NAME, level=logging.INFO, log_file=None, console=True):
    """
    Configure the fwatcher logger. Calling it again replaces earlier handlers.

    Args:
        name (str): The logger name.
        level (int or str): Logging level, e.g. logging.DEBUG or "DEBUG".
            Unknown level names fall back to INFO.
        log_file (str, optional): Path of a log file to append to.
        console (bool): Whether to log to stderr as well.

    Returns:
        logging.Logger: The configured logger.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in _open_handlers(log_file, console):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
