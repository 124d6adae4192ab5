"""
Logging configuration for the soapgen CLI.

main.py builds a LogSettings from its flags and the environment, then
calls setup_logging() once.  Modules log through
``logging.getLogger(__name__)`` and never add handlers themselves.

Console level precedence:
    --debug  >  --verbose  >  --quiet  >  SOAPGEN_LOG_LEVEL  >  WARNING

SOAPGEN_LOG_FILE adds a file handler; SOAPGEN_LOG_FILE_LEVEL sets its
level independently of the console.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

ENV_LEVEL = "SOAPGEN_LOG_LEVEL"
ENV_FILE = "SOAPGEN_LOG_FILE"
ENV_FILE_LEVEL = "SOAPGEN_LOG_FILE_LEVEL"

# (highest level the format applies to, format, datefmt), checked in order
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT_FORMAT = "%(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# zeep logs every schema import and HTTP request at DEBUG/INFO
_NOISY_LOGGERS = ("zeep", "urllib3", "requests", "charset_normalizer")


@dataclass(frozen=True)
class LogSettings:
    """Where log records go and how much of them."""

    level: str = "WARNING"
    file: str | None = None
    file_level: str | None = None

    @classmethod
    def from_env(
        cls,
        *,
        debug: bool = False,
        verbose: bool = False,
        quiet: bool = False,
    ) -> LogSettings:
        if debug:
            level = "DEBUG"
        elif verbose:
            level = "INFO"
        elif quiet:
            level = "ERROR"
        else:
            level = os.environ.get(ENV_LEVEL, "WARNING")
        return cls(
            level=level,
            file=os.environ.get(ENV_FILE) or None,
            file_level=os.environ.get(ENV_FILE_LEVEL) or None,
        )


def setup_logging(settings: LogSettings, quiet_third_party: bool = True) -> None:
    """Replace the root logger's handlers according to ``settings``.

    Safe to call more than once: each call starts from a clean root
    logger, so handlers never pile up.

    Args:
        settings: Console level and optional log file.
        quiet_third_party: Hold zeep and the HTTP stack at WARNING unless
            the console is at DEBUG.
    """
    console_level = _parse_level(settings.level)
    fmt, datefmt = _console_format(console_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(console)

    root_level = console_level
    if settings.file:
        file_level = _parse_level(settings.file_level) if settings.file_level else console_level
        file_handler = logging.FileHandler(settings.file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return fmt, datefmt
    return _CONSOLE_DEFAULT_FORMAT, None


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown or empty names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
