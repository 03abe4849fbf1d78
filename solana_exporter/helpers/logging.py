"""Logger module."""

import logging
import sys

import colorlog

from solana_exporter.helpers.config import get_log_color, get_log_level


loggers: dict[str, logging.Logger] = {}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(log_level: str) -> int:
    if log_level not in LOG_LEVELS:
        err_msg = f"Invalid log level: {log_level}"
        raise ValueError(err_msg)
    return LOG_LEVELS[log_level]


def get_logger(
    name: str,
    log_handler: str = "stdout",
    log_level: str | None = None,
    log_color: bool | None = None,
) -> logging.Logger:
    """Get logger.

    Level and color default to the LOG_LEVEL and LOG_COLOR environment
    variables when not given.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    level = _resolve_level(get_log_level(log_level))
    use_color = get_log_color() if log_color is None else log_color

    logger = logging.getLogger(name) if not use_color else colorlog.getLogger(name)

    if log_handler == "stdout" and not use_color:
        handler = logging.StreamHandler(sys.stdout)
    elif log_handler == "stdout" and use_color:
        handler = colorlog.StreamHandler(sys.stdout)
    else:
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)

    logger.setLevel(level)
    handler.setLevel(level)

    if not use_color:
        formatter = logging.Formatter(LOG_FORMAT)
    else:
        formatter = colorlog.ColoredFormatter(
            f"%(log_color)s {LOG_FORMAT}",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    loggers[name] = logger
    return logger


def set_log_level(log_level: str) -> None:
    """Re-level every logger handed out by get_logger.

    Module loggers are created at import time, before the CLI has parsed
    ``--log-level``, so the level has to be applied after the fact.

    Args:
        log_level: The logging level name.

    Raises:
        ValueError: If the log level is invalid.
    """
    level = _resolve_level(log_level.upper())
    for logger in loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


__all__ = ["LOG_LEVELS", "get_logger", "set_log_level"]
