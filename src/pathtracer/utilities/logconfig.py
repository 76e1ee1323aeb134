"""Logging setup for the renderer and its scripts.

Modules log through ``logging.getLogger(__name__)``, so configuring the
package logger (``PACKAGE_LOGGER``) controls all of them.
"""

import logging

PACKAGE_LOGGER = "src.pathtracer"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    name: str = PACKAGE_LOGGER,
    level: int = logging.WARNING,
    log_format: str = DEFAULT_FORMAT,
    log_file: str | None = None,
) -> logging.Logger:
    """Attach stream (and optionally file) handlers to a logger.

    Calling it again replaces the handlers instead of adding duplicates.

    Args:
        name: Logger to configure. Defaults to the package logger.
        level: Logging level.
        log_format: Format string for every handler.
        log_file: Optional path of a file to log to as well.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False

    return logger
