"""Logging configuration helpers."""

import logging


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the dreamcatcher logger and set its level.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("dreamcatcher")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
