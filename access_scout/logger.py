# access_scout/logger.py
"""Logging for **AccessScout**.

Every module writes to the single ``AccessScout`` logger, either through the
ready instance::

    from access_scout.logger import logger
    logger.info("Scan %s started", scan_id)

or through ``logging.getLogger(LOGGER_NAME)``. Output goes to a console
stream and, optionally, to a size-rotated file. The CLI points the console
stream at stderr so JSON printed on stdout stays machine-readable.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, TextIO, Union

LOGGER_NAME: Final[str] = "AccessScout"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_ROTATE_BYTES: Final[int] = 5 * 1024 * 1024
_ROTATE_BACKUPS: Final[int] = 3

LevelT = Union[int, str]


def _level(value: LevelT) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(value.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return resolved


def _handlers(fmt: str, stream: TextIO, log_file: str | Path | None) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(stream)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                str(log_file), maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_BACKUPS, encoding="utf-8"
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Attach console (and file) handlers to the project logger.

    Parameters
    ----------
    level
        ``"DEBUG"``, ``"info"``, ``logging.WARNING`` ...
    log_file
        Rotating log file (5 MiB, 3 backups); *None* disables it.
    log_format
        :class:`logging.Formatter` format string.
    replace_handlers
        Drop (and close) handlers attached by an earlier call.
    stream
        Console stream, ``sys.stdout`` when omitted.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(_level(level))

    if replace_handlers:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            if isinstance(old, logging.FileHandler):
                old.close()

    for handler in _handlers(log_format, stream or sys.stdout, log_file):
        lg.addHandler(handler)

    lg.propagate = False
    return lg


def init_logging(
    level: LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Entry-point helper for the CLI and the HTTP server."""
    return configure(level=level, log_file=log_file, log_format=log_format, stream=stream)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
