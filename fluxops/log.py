"""Logging setup and status markers for user-facing progress lines."""

from __future__ import annotations

import logging
from pathlib import Path

_MARK_SUCCESS = "\U0001f389 "
_MARK_FAILED = "❌ "

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(
    level: str | int = "INFO",
    output_file: str | Path | None = None,
) -> logging.Logger:
    """Attach handlers to the ``fluxops`` logger and set its level.

    Console output always goes to stderr.  When *output_file* is given,
    every record down to DEBUG is also appended to that file so verbose
    traces survive a failed run.

    Returns the configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    log = logging.getLogger("fluxops")
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_FORMAT))
    log.addHandler(console)

    if output_file is not None:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(file_handler)
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(level)

    return log


def mark_success(log: logging.Logger, msg: str, *args: object) -> None:
    log.info(_MARK_SUCCESS + msg, *args)


def mark_fail(log: logging.Logger, msg: str, *args: object) -> None:
    log.info(_MARK_FAILED + msg, *args)
