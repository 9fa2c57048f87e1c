"""Package-wide logger."""
import logging
import os


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "shunting_yard") -> logging.Logger:
    """
    Return the package logger, attaching a stream handler on first use.

    The level is read from the ``SHUNTING_YARD_LOG_LEVEL`` environment variable (default ``INFO``).

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    _logger = logging.getLogger(name)
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)
        _logger.setLevel(os.environ.get("SHUNTING_YARD_LOG_LEVEL", "INFO").upper())
    return _logger


logger: logging.Logger = get_logger()
