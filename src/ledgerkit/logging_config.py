"""Logging configuration.

Library modules only create loggers (``logging.getLogger(__name__)``); the
command line installs a handler through :func:`configure_logging`.
"""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Send ledgerkit log records to stderr at ``level``.

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    logger = logging.getLogger("ledgerkit")
    logger.setLevel(numeric_level)
    if not any(getattr(h, "_ledgerkit", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ledgerkit = True
        logger.addHandler(handler)
