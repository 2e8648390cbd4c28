"""
Logging configuration for the brickstack namespace.

Library modules only create module loggers under ``brickstack``; handlers
are attached here.  The ``brickstack-run`` CLI calls ``setup_logging`` once
with the level and optional log file taken from its RunConfig (``--verbose``
forces DEBUG).
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the 'brickstack' logger.

    Safe to call repeatedly: existing handlers are replaced, so a test or a
    second CLI invocation in the same process does not duplicate output.

    Args:
        level: Logging level, usually RunConfig.logging_level.
        log_file: RunConfig.log_file; when set, the run log is also written
            there (truncated per run).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("brickstack")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized at %s", logging.getLevelName(level))
    return logger
