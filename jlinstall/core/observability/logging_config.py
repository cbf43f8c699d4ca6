"""
Logging configuration for the jlinstall CLI.

``main.py`` calls :func:`setup_logging` once per process; modules only ever
do ``logger = logging.getLogger(__name__)``.

Console level, highest priority first:
    --debug  >  --verbose  >  --quiet  >  $JLINSTALL_LOG_LEVEL  >  WARNING

``$JLINSTALL_LOG_FILE`` adds a file handler, optionally at its own level
(``$JLINSTALL_LOG_FILE_LEVEL``).
"""

from __future__ import annotations

import logging
import sys

DEFAULT_LEVEL = logging.WARNING

# (max level, format, datefmt): first row whose level is >= the console level wins.
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    # Status lines come from click; log records only need a level tag.
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level from CLI flags and the environment."""
    for flag, name in ((debug, "DEBUG"), (verbose, "INFO"), (quiet, "ERROR")):
        if flag:
            return name
    return env_level or logging.getLevelName(DEFAULT_LEVEL)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Install the console handler (and optional file handler) on the root logger.

    Args:
        level: Console level name. Unknown names fall back to WARNING.
        log_file: Path of an extra log file.
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Pin chatty library loggers to WARNING unless
            the console runs at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for limit, f, d in _CONSOLE_FORMATS if level <= limit)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else DEFAULT_LEVEL
    return numeric if isinstance(numeric, int) else DEFAULT_LEVEL
