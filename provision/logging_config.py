from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "PROVISION_LOG_LEVEL"
_DEFAULT_LOG_LEVEL = "INFO"
_RESET = "\x1b[0m"
_LEVEL_COLORS = {
    "DEBUG": "\x1b[36m",
    "INFO": "\x1b[32m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[1;31m",
}


class _ColorFormatter(logging.Formatter):
    def __init__(self, fmt: str, datefmt: str, *, use_color: bool) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        if self._use_color and original in _LEVEL_COLORS:
            record.levelname = f"{_LEVEL_COLORS[original]}{original}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _should_use_color() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    return sys.stderr.isatty()


def resolve_level(level: str | int | None = None, *, verbose: bool = False) -> int:
    """Pick the log level: ``verbose`` wins, then ``level``, then $PROVISION_LOG_LEVEL."""
    if verbose:
        return logging.DEBUG
    if isinstance(level, int):
        return level
    candidate = (level or os.getenv(LOG_LEVEL_ENV) or _DEFAULT_LOG_LEVEL).upper()
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str | int | None = None, verbose: bool = False, force: bool = False) -> None:
    # Progress lines own stdout, so log records always go to stderr.
    root = logging.getLogger()
    resolved_level = resolve_level(level, verbose=verbose)
    root.setLevel(resolved_level)

    if root.handlers and not force:
        for handler in root.handlers:
            handler.setLevel(resolved_level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved_level)
    handler.setFormatter(
        _ColorFormatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
            use_color=_should_use_color(),
        )
    )
    root.handlers.clear()
    root.addHandler(handler)
