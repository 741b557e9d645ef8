"""Loguru setup for the bot.

Modules log through `get_logger(__name__)`; structured fields are passed as
keyword arguments and end up in the record's `extra`. The CLI calls
`setup_logging()` once, which also routes httpx/httpcore records (emitted
under githubkit) into loguru.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_CONSOLE_FORMAT = (
    "<dim>{{time:HH:mm:ss}}</dim> | "
    "<level>{{level: <8}}</level> | "
    "<cyan>{source}</cyan>{repo} - "
    "<level>{{message}}</level>\n{{exception}}"
)

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} | {extra} | {message}"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib records (httpx, httpcore) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _console_format(record: Record) -> str:
    # Bot modules bind their own name; intercepted records fall back to loguru's
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    repo = " <dim>[{extra[repo]}]</dim>" if "repo" in record["extra"] else ""
    return _CONSOLE_FORMAT.format(source=source, repo=repo)


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Replace loguru's sinks with the bot's console (and optional file) sink.

    `verbose` forces DEBUG and wins over `quiet`, which forces WARNING.
    The file sink always records DEBUG and rotates/compresses per the
    given policy.
    """
    effective_level: LogLevel = "DEBUG" if verbose else "WARNING" if quiet else level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # httpx logs every request at INFO; only show it when debugging
    transport_level = logging.DEBUG if effective_level == "DEBUG" else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(transport_level)

    return logger


def get_logger(name: str) -> Logger:
    """Logger with `name` bound into every record's extra."""
    return logger.bind(name=name)


def bind_repo(name: str, owner: str, repo: str) -> Logger:
    """Logger bound to a module name and an `owner/repo` repository."""
    return logger.bind(name=name, repo=f"{owner}/{repo}")
