"""Shared package logger."""
import logging
import os

LOGGER_NAME = "keypad_calculator"
LOG_LEVEL_ENV = "KEYPAD_CALC_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(processName)s %(name)s: %(message)s"


def build_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Create the package logger with a single stream handler.

    The level is read from the ``KEYPAD_CALC_LOG_LEVEL`` environment variable
    and falls back to ``INFO`` when unset or unknown.

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)

    # Importing the module twice (e.g. in a forked worker) must not duplicate handlers
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)

    level_name: str = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    log.setLevel(getattr(logging, level_name, logging.INFO))
    return log


logger: logging.Logger = build_logger()
