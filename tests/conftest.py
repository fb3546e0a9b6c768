"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from src.core.models.simulation import AdvancedOptions, Options, SimulationConfig


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def make_config():
    """Build a SimulationConfig from keyword overrides.

    Options and advanced options take snake_case keyword dicts:

        make_config(scenario="lost_admin", advanced={"user_role": "administrator"})
    """

    def _make(
        os_version: str = "Sonoma",
        scenario: str = "forgotten_password",
        options: dict | None = None,
        advanced: dict | None = None,
    ) -> SimulationConfig:
        base_options = {
            "identity_linked": True,
            "disk_encryption": True,
            "recovery_boot_available": True,
            "backup_available": False,
        }
        base_options.update(options or {})
        return SimulationConfig(
            os_version=os_version,
            scenario=scenario,
            options=Options(**base_options),
            advanced_options=AdvancedOptions(**(advanced or {})),
        )

    return _make


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove RSIM_* / PORT variables so settings come from defaults."""
    for key in (
        "PORT",
        "RSIM_PORT",
        "RSIM_HOST",
        "RSIM_ENV",
        "RSIM_CORS_ORIGINS",
        "RSIM_HISTORY_LIMIT",
        "RSIM_LOG_LEVEL",
        "RSIM_LOG_FILE",
        "RSIM_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
