"""
Logging Configuration

Library modules only create `logging.getLogger(__name__)` loggers under the
'turbinegen' namespace and never attach handlers themselves. The command line
(`turbinegen.cli.main`) calls `setup_logging` once per invocation to route
their records to stdout and, with --log-file, to a file.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "turbinegen"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route the package's log records to stdout and optionally to a file.

    Handlers from an earlier call are closed and replaced, so running the CLI
    several times in one process neither duplicates records nor leaks open
    log files.

    Args:
        level: Threshold for the package logger and its handlers; --verbose
               maps to logging.DEBUG, which includes spline degree lowering
               and per-grid transform records
        log_file: Optional path of a log file, overwritten on every call

    Returns:
        The configured 'turbinegen' logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to stdout%s at level %s",
                 f" and {log_file}" if log_file else "", logging.getLevelName(level))
    return logger
