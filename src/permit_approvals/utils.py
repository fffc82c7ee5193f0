import logging
from typing import Union

logger = logging.getLogger("permit_approvals")

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logger(level: Union[int, str] = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Library modules only ever log through ``logger`` (or its children); the
    application decides whether anything is printed by calling this once.
    Calling it again only updates the level.
    """
    logger.setLevel(level)
    if not any(getattr(h, "_permit_approvals", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._permit_approvals = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger for module ``name``."""
    if name.startswith(logger.name + "."):
        name = name[len(logger.name) + 1:]
    return logger.getChild(name)
