"""Logging setup"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once per process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    global _configured

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if _configured:
        logging.getLogger().setLevel(numeric_level)
        return

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))
    _configured = True
