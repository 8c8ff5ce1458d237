"""Logging configuration helpers."""

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure the ``meal_diary`` logger.

    ``level`` may be a number or a level name such as ``"debug"`` (as read
    from ``Settings.log_level``). A handler is only attached once, but the
    level is applied on every call.
    """
    resolved = level.upper() if isinstance(level, str) else level
    if isinstance(resolved, str) and resolved not in logging.getLevelNamesMapping():
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger("meal_diary")
    logger.setLevel(resolved)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
