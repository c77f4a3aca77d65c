"""Logging setup shared by all simulator components."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_root_level: Optional[int] = None


def setup_logger(name: str, level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Get a configured logger.

    Repeated calls with the same name return the same logger without
    attaching a second handler.

    Args:
        name: Logger name (usually the class name)
        level: Logging level name or number. When omitted, the level set by
            the most recent explicit call is used, defaulting to INFO.

    Returns:
        Configured logger
    """
    global _root_level

    if level is not None:
        _root_level = _coerce_level(level)
    effective_level = _root_level if _root_level is not None else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(effective_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def _coerce_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value
