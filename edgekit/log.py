"""Logger setup shared by the CLI and the filters."""

import logging

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logger(name: str = "edgekit", level: int = logging.INFO) -> logging.Logger:
    """Return a configured logger; calling it again only updates the level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
