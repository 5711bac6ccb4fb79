"""Logging configuration for applications using weighted_graph.

The library itself only creates module loggers; call :func:`setup_logging`
from an application or test session to see their output.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None,
                  log_file: Optional[Union[str, Path]] = None,
                  verbose: bool = False) -> logging.Logger:
    """Configure the ``weighted_graph`` logger to log to stdout and optionally a file.

    Args:
        level: Console log level name. Defaults to ``Settings.log_level``.
        log_file: Optional path to a log file, always written at ``DEBUG``.
            Defaults to ``Settings.log_file``.
        verbose: If ``True`` force the console level to ``DEBUG``.

    Returns:
        The configured package logger.
    """
    from .settings import get_config

    config = get_config()
    if level is None:
        level = config.log_level
    if log_file is None:
        log_file = config.log_file

    console_level = logging.DEBUG if verbose else getattr(logging, level.upper())

    logger = logging.getLogger("weighted_graph")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    min_level = console_level
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
        min_level = logging.DEBUG

    logger.setLevel(min_level)
    logger.debug("Logging initialised. Log file: %s", log_file)
    return logger
