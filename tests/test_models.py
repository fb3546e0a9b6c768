"""
Tests for simulation and session models.
"""

import pytest
from pydantic import ValidationError

from src.core.engine.generator import generate_simulation
from src.core.models import SimulationConfig, SimulatorSession
from src.core.models.settings import Settings


# ── SimulationConfig ─────────────────────────────────────────────────


class TestSimulationConfig:
    def test_camel_case_payload(self):
        config = SimulationConfig.model_validate({
            "osVersion": "Ventura",
            "scenario": "post_update",
            "options": {"identityLinked": True, "backupAvailable": True},
            "advancedOptions": {"securityLevel": "high", "cpuArchitecture": "intel"},
        })
        assert config.os_version == "Ventura"
        assert config.options.identity_linked is True
        assert config.options.disk_encryption is False
        assert config.advanced_options.security_level == "high"
        assert config.advanced_options.cpu_architecture == "intel"

    def test_legacy_payload(self):
        config = SimulationConfig.model_validate({
            "macosVersion": "Monterey",
            "scenario": "lost_admin",
            "options": {
                "appleId": True,
                "fileVault": True,
                "recoveryMode": False,
                "timeMachine": True,
                "advanced": {
                    "securityLevel": "low",
                    "userRole": "administrator",
                    "authMethod": "appleId",
                    "cpuArchitecture": "appleSilicon",
                },
            },
        })
        assert config.os_version == "Monterey"
        assert config.options.identity_linked is True
        assert config.options.recovery_boot_available is False
        assert config.options.backup_available is True
        assert config.advanced_options.user_role == "administrator"
        assert config.advanced_options.auth_method == "identity"
        assert config.advanced_options.cpu_architecture == "apple_silicon"

    def test_missing_options_use_defaults(self):
        config = SimulationConfig.model_validate({"osVersion": "Sonoma", "scenario": "post_update"})
        assert config.options.identity_linked is False
        assert config.advanced_options.security_level == "medium"
        assert config.advanced_options.auth_method == "identity"

    def test_null_options_use_defaults(self):
        config = SimulationConfig.model_validate(
            {"osVersion": "Sonoma", "scenario": "post_update", "options": None}
        )
        assert config.options.backup_available is False

    @pytest.mark.parametrize(
        "payload",
        [
            {"osVersion": "Tahoe", "scenario": "post_update"},
            {"osVersion": "Sonoma", "scenario": "disk_failure"},
            {"osVersion": "Sonoma", "scenario": "post_update",
             "advancedOptions": {"securityLevel": "extreme"}},
            {"scenario": "post_update"},
        ],
    )
    def test_rejects_invalid(self, payload):
        with pytest.raises(ValidationError):
            SimulationConfig.model_validate(payload)

    def test_frozen(self, make_config):
        config = make_config()
        with pytest.raises(ValidationError):
            config.scenario = "lost_admin"

    def test_to_dict_uses_camel_case(self, make_config):
        data = make_config().to_dict()
        assert data["osVersion"] == "Sonoma"
        assert data["options"]["identityLinked"] is True
        assert data["advancedOptions"]["cpuArchitecture"] == "apple_silicon"


class TestSimulationResult:
    def test_wire_shape(self, make_config):
        data = generate_simulation(make_config()).to_dict()
        assert set(data) == {"steps", "result", "message", "metadata"}
        assert set(data["steps"][0]) == {
            "id", "command", "output", "category", "displayDelayMs", "explanation",
        }
        assert set(data["metadata"]) == {"osVersion", "scenario", "totalSteps", "estimatedTimeMs"}


# ── SimulatorSession ─────────────────────────────────────────────────


class TestSessionDefaults:
    def test_default_config(self):
        session = SimulatorSession()
        assert session.config.os_version == "Sonoma"
        assert session.config.scenario == "forgotten_password"
        assert session.config.options.recovery_boot_available is True
        assert session.config.options.backup_available is False
        assert session.history == []


class TestUpdateConfig:
    def test_top_level_fields(self):
        session = SimulatorSession()
        session.update_config({"osVersion": "Catalina", "scenario": "lost_admin"})
        assert session.config.os_version == "Catalina"
        assert session.config.scenario == "lost_admin"

    def test_options_merge_per_field(self):
        session = SimulatorSession()
        session.update_config({"options": {"backupAvailable": True}})
        assert session.config.options.backup_available is True
        assert session.config.options.identity_linked is True
        assert session.config.options.disk_encryption is True

    def test_advanced_merge_per_field(self):
        session = SimulatorSession()
        session.update_config({"advancedOptions": {"userRole": "administrator"}})
        session.update_config({"advancedOptions": {"securityLevel": "high"}})
        adv = session.config.advanced_options
        assert adv.user_role == "administrator"
        assert adv.security_level == "high"

    def test_invalid_update_keeps_config(self):
        session = SimulatorSession()
        with pytest.raises(ValidationError):
            session.update_config({"osVersion": "Tahoe"})
        assert session.config.os_version == "Sonoma"


class TestHistory:
    def _run(self, session: SimulatorSession):
        return session.record(generate_simulation(session.config))

    def test_record_prepends(self):
        session = SimulatorSession()
        first = self._run(session)
        second = self._run(session)
        assert [e.id for e in session.history] == [second.id, first.id]
        assert second.id == first.id + 1

    def test_entry_fields(self):
        session = SimulatorSession()
        entry = self._run(session)
        assert entry.result == "success"
        assert entry.success is True
        assert entry.steps_count == 28
        assert entry.config == session.config

    def test_limit(self):
        session = SimulatorSession()
        for _ in range(7):
            self._run(session)
        assert len(session.history) == 5
        assert [e.id for e in session.history] == [7, 6, 5, 4, 3]

    def test_zero_limit_keeps_nothing(self):
        session = SimulatorSession(history_limit=0)
        self._run(session)
        assert session.history == []

    def test_entry_snapshot_survives_config_change(self):
        session = SimulatorSession()
        entry = self._run(session)
        session.update_config({"scenario": "post_update"})
        assert session.get_entry(entry.id).config.scenario == "forgotten_password"

    def test_clear(self):
        session = SimulatorSession()
        self._run(session)
        session.clear_history()
        assert session.history == []

    def test_ids_not_reused_after_clear(self):
        session = SimulatorSession()
        self._run(session)
        self._run(session)
        session.clear_history()
        assert self._run(session).id == 3

    def test_ids_advance_with_zero_limit(self):
        session = SimulatorSession(history_limit=0)
        first = self._run(session)
        second = self._run(session)
        assert second.id == first.id + 1
        assert session.next_id == 3

    def test_counter_recovered_from_history_only(self):
        entry = self._run(SimulatorSession())
        data = {"history": [entry.model_dump(mode="json", by_alias=True) | {"id": 9}]}
        session = SimulatorSession.model_validate(data)
        assert session.next_id == 10
        assert self._run(session).id == 10

    def test_restore(self):
        session = SimulatorSession()
        entry = self._run(session)
        session.update_config({"osVersion": "Mojave"})
        restored = session.restore(entry.id)
        assert restored.os_version == "Sonoma"
        assert session.config.os_version == "Sonoma"

    def test_restore_unknown(self):
        session = SimulatorSession()
        assert session.restore(42) is None
        assert session.get_entry(42) is None

    def test_round_trip_through_json(self):
        session = SimulatorSession()
        self._run(session)
        data = session.model_dump(mode="json", by_alias=True)
        assert "historyLimit" in data
        assert "stepsCount" in data["history"][0]
        assert SimulatorSession.model_validate(data).history == session.history


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.port == 3001
        assert settings.expose_errors is False

    def test_development_exposes_errors(self):
        assert Settings(environment="development").expose_errors is True

    def test_negative_history_limit_rejected(self):
        with pytest.raises(ValidationError):
            Settings(history_limit=-1)
