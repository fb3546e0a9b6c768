"""
Logging configuration — one setup call per process.

Both entrypoints (the CLI group in main.py and ``recoverysim web``)
call ``setup_logging`` exactly once. Modules only ever do
``logger = logging.getLogger(__name__)``.

Level precedence:
    --debug / --verbose / --quiet  >  RSIM_LOG_LEVEL  >  settings  >  WARNING

File output is opt-in via RSIM_LOG_FILE (and RSIM_LOG_FILE_LEVEL).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping

# ── Format tiers ────────────────────────────────────────────────

_TIERS: tuple[tuple[int, str, str | None], ...] = (
    # (max level, format, datefmt); first match wins
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Flask's dev server logs every request at INFO
_NOISY_LOGGERS = ("werkzeug",)


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
    fallback: str | None = None,
) -> str:
    """Pick the console level name from flags, environment and settings."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    if env and env.get("RSIM_LOG_LEVEL"):
        return env["RSIM_LOG_LEVEL"]
    return fallback or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Keep noisy library loggers at WARNING unless
            the console is at DEBUG.
    """
    numeric_level = _parse_level(level)
    fmt, datefmt = _console_format(numeric_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_format(numeric_level: int) -> tuple[str, str | None]:
    for ceiling, fmt, datefmt in _TIERS:
        if numeric_level <= ceiling:
            return fmt, datefmt
    return _TIERS[-1][1], _TIERS[-1][2]


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
