"""
Configuration loader — reads recoverysim.yml and the environment into Settings.

The file is optional; defaults apply when it is absent. Environment
variables win over the file:

    PORT / RSIM_PORT       listen port
    RSIM_HOST              bind address
    RSIM_ENV               "production" hides error detail in 500s
    RSIM_CORS_ORIGINS      comma-separated allowed origins
    RSIM_HISTORY_LIMIT     session history cap
    RSIM_LOG_LEVEL         default log level
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from src.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
SETTINGS_FILE = "recoverysim.yml"


class ConfigError(Exception):
    """Raised when the settings file or environment is invalid."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for recoverysim.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to recoverysim.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_file(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "server" key or be flat
    if "server" not in data:
        return dict(data)
    wrapped = data["server"]
    if not isinstance(wrapped, dict):
        raise ConfigError(f"Expected a mapping under 'server' in {path}")
    return dict(wrapped)


def _env_overrides(env: Mapping[str, str]) -> dict:
    overrides: dict = {}

    port = env.get("RSIM_PORT") or env.get("PORT")
    if port:
        overrides["port"] = port
    if env.get("RSIM_HOST"):
        overrides["host"] = env["RSIM_HOST"]
    if env.get("RSIM_ENV"):
        overrides["environment"] = env["RSIM_ENV"]
    if env.get("RSIM_CORS_ORIGINS"):
        overrides["cors_origins"] = [
            o.strip() for o in env["RSIM_CORS_ORIGINS"].split(",") if o.strip()
        ]
    if env.get("RSIM_HISTORY_LIMIT"):
        overrides["history_limit"] = env["RSIM_HISTORY_LIMIT"]
    if env.get("RSIM_LOG_LEVEL"):
        overrides["log_level"] = env["RSIM_LOG_LEVEL"]

    return overrides


def load_settings(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to recoverysim.yml. If None, searches upward;
            a missing file means defaults.
        env: Environment mapping (default: ``os.environ``).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit path is missing or any value is invalid.
    """
    if path is not None and not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    if path is None:
        path = find_settings_file()

    data: dict = {}
    if path is not None:
        logger.debug("Loading settings from %s", path)
        data = _read_file(path)

    data.update(_env_overrides(os.environ if env is None else env))

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.info(
        "Settings loaded (port=%d, environment=%s)", settings.port, settings.environment
    )
    return settings
