"""Logger setup for the ``dynamicmass`` namespace.

Library modules only create child loggers (``dynamicmass.session``,
``dynamicmass.elements`` ...); nothing is printed until an application such
as ``examples/app.py`` calls :func:`setup_logging`.
"""

import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "dynamicmass"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Attach handlers to the package logger and return it.

    Parameters
    ----------
    level : int or str
        Logging level, either a constant such as ``logging.DEBUG`` or its
        name (``"debug"`` works too).
    log_file : str, optional
        Also write records to this path, truncated on every call.
    """

    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"unknown logging level: {name!r}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    # streamlit re-executes the app script on every interaction
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("dynamicmass logging at %s", logging.getLevelName(level))
    return logger


__all__ = ["setup_logging"]
