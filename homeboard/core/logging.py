"""
Logging setup - one stream handler for the whole "homeboard" logger tree.

Modules create their own child loggers:
    logger = logging.getLogger("homeboard.services.token_manager")

and inherit the handler configured here. Secrets (tokens, client secret)
are never passed to a logger; only their presence and expiry are.
"""

import logging
import sys

LOGGER_NAME = "homeboard"
LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root "homeboard" logger.

    Safe to call more than once (e.g. app reloads, tests creating the app):
    the handler is only attached the first time.

    Args:
        level: Logging level name ("DEBUG", "INFO", ...)

    Returns:
        The configured "homeboard" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
