"""Logging setup for hunkstage.

Every module logs through the single ``hunkstage`` logger exported here.
The level comes from the HUNKSTAGE_LOG_LEVEL environment variable and can be
raised at runtime with set_log_level (the CLI does this for --debug).
"""

import logging
import os

LOGGER_NAME = "hunkstage"
DEFAULT_LOG_LEVEL = "WARNING"


def get_logger() -> logging.Logger:
    """Create and configure the hunkstage logger.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Remove any existing handlers so repeated calls don't duplicate output
    logger.handlers.clear()

    # Keep records away from the root logger
    logger.propagate = False

    formatter = logging.Formatter("\033[36mhunkstage\033[0m: %(levelname)-8s %(message)s")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.setLevel(os.environ.get("HUNKSTAGE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper())
    return logger


def set_log_level(level: str) -> None:
    """Change the level of the hunkstage logger.

    Args:
        level: A logging level name such as "DEBUG" or "INFO".
    """
    logger.setLevel(level.upper())


logger = get_logger()
