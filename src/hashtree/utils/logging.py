from __future__ import annotations

import logging

_PACKAGE_LOGGER = "hashtree"


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the 'hashtree' namespace.

    Handlers are left to the application.
    """
    if name != _PACKAGE_LOGGER and not name.startswith(_PACKAGE_LOGGER + "."):
        name = f"{_PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def apply_log_level(level_name: str) -> None:
    """
    Set the package logger level unless the application already set one.
    """
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    if package_logger.level != logging.NOTSET:
        return

    level = logging.getLevelName(level_name)
    if isinstance(level, int):
        package_logger.setLevel(level)
