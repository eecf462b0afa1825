"""Logging setup and error reporting helpers for the command line."""

from __future__ import annotations

import logging

from radiobio.errors import RadioBioError

DEFAULT_LOGGER_NAME = "radiobio"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    verbose: bool = False,
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> logging.Logger:
    """Route radiobio records to stderr, DEBUG when ``verbose`` else INFO."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=fmt, force=True)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger


def get_user_message(exc: BaseException) -> str:
    if isinstance(exc, RadioBioError):
        return exc.user_message
    return f"Unexpected error: {exc}"


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    *,
    show_traceback: bool = False,
) -> str:
    user_message = get_user_message(exc)
    logger.error(user_message)
    if isinstance(exc, RadioBioError) and exc.context:
        logger.debug("Error context: %s", exc.context)
    logger.log(
        logging.ERROR if show_traceback else logging.DEBUG,
        "Detailed traceback:",
        exc_info=exc,
    )
    return user_message


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_LOG_FORMAT",
    "configure_logging",
    "get_user_message",
    "log_exception",
]
