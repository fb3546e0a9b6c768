"""
Tests for the configuration advisor: preflight, status, analysis.
"""

from src.core.services.advisor import analyze_result, preflight, system_status


class TestPreflight:
    def test_clean_configuration(self, make_config):
        assert preflight(make_config()) == []

    def test_high_security_without_identity(self, make_config):
        warnings = preflight(
            make_config(options={"identity_linked": False}, advanced={"security_level": "high"})
        )
        assert [w.level for w in warnings] == ["error"]
        assert "Apple ID" in warnings[0].message

    def test_recovery_key_only(self, make_config):
        warnings = preflight(
            make_config(options={"identity_linked": False}, advanced={"auth_method": "recovery_key"})
        )
        assert [w.message for w in warnings] == ["FileVault enabled with recovery key only"]

    def test_order_is_fixed(self, make_config):
        config = make_config(
            scenario="lost_admin",
            options={"identity_linked": False, "recovery_boot_available": False},
            advanced={"security_level": "high"},
        )
        messages = [w.message for w in preflight(config)]
        assert messages == [
            "High security level requires Apple ID authentication",
            "Recovery Mode is disabled",
            "Cannot recover admin access from standard user",
        ]

    def test_corruption_without_backup(self, make_config):
        warnings = preflight(make_config(scenario="account_corruption"))
        assert warnings[-1].level == "warning"
        assert warnings[-1].to_dict()["suggestion"] == "Consider enabling Time Machine backup"


class TestSystemStatus:
    def test_high(self, make_config):
        status = system_status(make_config(advanced={"security_level": "high"}))
        assert status.security_status == "high"

    def test_low(self, make_config):
        status = system_status(
            make_config(options={"disk_encryption": False}, advanced={"security_level": "low"})
        )
        assert status.security_status == "low"

    def test_medium_when_mixed(self, make_config):
        status = system_status(make_config(advanced={"security_level": "low"}))
        assert status.security_status == "medium"

    def test_ready_with_local_account(self, make_config):
        status = system_status(
            make_config(options={"identity_linked": False}, advanced={"auth_method": "local_account"})
        )
        assert status.is_ready is True
        assert status.auth_configured is True

    def test_not_ready_without_recovery_boot(self, make_config):
        status = system_status(make_config(options={"recovery_boot_available": False}))
        assert status.is_ready is False

    def test_to_dict_keys(self, make_config):
        assert set(system_status(make_config()).to_dict()) == {
            "securityStatus",
            "isReady",
            "hasBackup",
            "isEncrypted",
            "authConfigured",
        }


class TestAnalyzeResult:
    def test_success_suggestions(self, make_config):
        analysis = analyze_result(make_config(), "success")
        assert analysis.suggestions == [
            "Configuration was optimal for this scenario",
            "Try different scenarios to explore other recovery paths",
        ]
        kinds = [f.kind for f in analysis.factors]
        assert kinds.count("positive") == 2
        assert "negative" not in kinds

    def test_error_with_high_security(self, make_config):
        config = make_config(
            options={"recovery_boot_available": False},
            advanced={"security_level": "high"},
        )
        analysis = analyze_result(config, "error")
        texts = [f.text for f in analysis.factors]
        assert "Recovery Mode was disabled" in texts
        assert "High security level required additional authentication" in texts
        assert "Enable Time Machine backup for additional recovery options" in analysis.suggestions

    def test_low_security_hint_only_for_non_error(self, make_config):
        config = make_config(advanced={"security_level": "low"})
        assert "Increase security level to see more authentication steps" in (
            analyze_result(config, "warning").suggestions
        )
        assert "Increase security level to see more authentication steps" not in (
            analyze_result(config, "error").suggestions
        )

    def test_to_dict(self, make_config):
        data = analyze_result(make_config(options={"backup_available": True}), "success").to_dict()
        assert data["result"] == "success"
        assert {"type": "neutral", "text": "Time Machine backup was available"} in data["factors"]
