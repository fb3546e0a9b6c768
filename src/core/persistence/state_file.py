"""
Session file persistence — atomic read/write for SimulatorSession.

The session is stored as JSON in .state/session.json. Writes are atomic
(write to temp file, then rename) so a crash mid-write never leaves a
half-written history behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from src.core.models.session import SimulatorSession

logger = logging.getLogger(__name__)

# Default session file path (relative to the working root)
DEFAULT_STATE_DIR = ".state"
DEFAULT_SESSION_FILE = "session.json"


def default_session_path(root: Path) -> Path:
    """Get the default session file path under a root directory."""
    return root / DEFAULT_STATE_DIR / DEFAULT_SESSION_FILE


def load_session(path: Path, history_limit: int | None = None) -> SimulatorSession:
    """Load the simulator session from a JSON file.

    Args:
        path: Path to the session JSON file.
        history_limit: Override the stored history cap (trims on load).

    Returns:
        SimulatorSession. A missing or unreadable file gives a fresh session.
    """
    session: SimulatorSession
    if not path.is_file():
        logger.info("No session file at %s — starting fresh", path)
        session = SimulatorSession()
    else:
        try:
            raw = path.read_text(encoding="utf-8")
            data = json.loads(raw)
            session = SimulatorSession.model_validate(data)
            logger.debug("Loaded session from %s (updated_at=%s)", path, session.updated_at)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt session file %s: %s — starting fresh", path, e)
            session = SimulatorSession()
        except Exception as e:
            logger.warning("Cannot load session from %s: %s — starting fresh", path, e)
            session = SimulatorSession()

    if history_limit is not None:
        session.history_limit = history_limit
        session.history = session.history[: max(history_limit, 0)]
    return session


def _write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to a temp file beside ``path``, then rename over it."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".session_", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def save_session(session: SimulatorSession, path: Path) -> None:
    """Save the simulator session to a JSON file (atomic write).

    Args:
        session: The session to save. Its ``updated_at`` is refreshed.
        path: Target path for the session file.
    """
    session.touch()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = session.model_dump(mode="json", by_alias=True)
    try:
        _write_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.error("Failed to save session to %s: %s", path, e)
        raise
    logger.debug("Session saved to %s (%d history entries)", path, len(session.history))
