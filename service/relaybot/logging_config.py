"""
Logging configuration for the relay bot.
"""

import logging
import sys


def setup_logging(level: str = "DEBUG"):
    """Build the "relaybot" logger: one stdout handler, no propagation."""
    logger = logging.getLogger("relaybot")
    logger.setLevel(level.upper())
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)

    # Each line is written once, never again through the root logger
    logger.propagate = False

    return logger


def set_log_level(level: str) -> None:
    """Apply the configured level once settings are loaded."""
    bot_logger.setLevel(level.upper())


# Shared by every module as `bot_logger as logger`
bot_logger = setup_logging()
