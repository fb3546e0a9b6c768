"""
Tests for observability — health checks and logging setup.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from src.core.engine.pipeline import Rule
from src.core.observability.health import (
    ComponentHealth,
    SystemHealth,
    check_engine,
    check_rule_table,
    check_system_health,
)
from src.core.observability.logging_config import resolve_level, setup_logging
from src.main import cli

# ── Health Check Tests ───────────────────────────────────────────────


class TestComponentHealth:
    def test_defaults(self):
        c = ComponentHealth(name="test")
        assert c.status == "unknown"

    def test_to_dict(self):
        c = ComponentHealth(name="test", status="healthy", message="ok")
        d = c.to_dict()
        assert d["name"] == "test"
        assert d["status"] == "healthy"


class TestSystemHealth:
    def test_all_healthy(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="healthy"))
        h.add(ComponentHealth(name="b", status="healthy"))
        assert h.status == "healthy"

    def test_degraded_if_any_degraded(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="healthy"))
        h.add(ComponentHealth(name="b", status="degraded"))
        assert h.status == "degraded"

    def test_unhealthy_wins(self):
        h = SystemHealth()
        h.add(ComponentHealth(name="a", status="degraded"))
        h.add(ComponentHealth(name="b", status="unhealthy"))
        assert h.status == "unhealthy"

    def test_to_dict_carries_banner(self):
        d = SystemHealth().to_dict()
        assert d["message"] == "macOS Recovery Simulator API"
        assert d["warning"] == "SIMULATION ONLY - NO REAL SYSTEM ACCESS"
        assert d["timestamp"]


class TestChecks:
    def test_rule_table_healthy(self):
        c = check_rule_table()
        assert c.status == "healthy"
        assert c.details["rules"][0] == "architecture"

    def test_rule_table_empty(self):
        assert check_rule_table(()).status == "unhealthy"

    def test_rule_table_duplicates(self):
        rule = Rule("same", lambda config: None)
        c = check_rule_table((rule, rule))
        assert c.status == "degraded"
        assert "same" in c.message

    def test_engine(self):
        c = check_engine()
        assert c.status == "healthy"
        assert c.details["totalSteps"] == 28
        assert c.details["estimatedTimeMs"] == 25500

    def test_system(self):
        h = check_system_health()
        assert h.status == "healthy"
        assert [c.name for c in h.components] == ["rule_table", "engine"]


class TestHealthCommand:
    def test_json(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["health", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["status"] == "healthy"

    def test_text(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["health"])
        assert result.exit_code == 0
        assert "HEALTHY" in result.output
        assert "rule_table" in result.output


# ── Logging ──────────────────────────────────────────────────────────


class TestResolveLevel:
    def test_flags_first(self):
        env = {"RSIM_LOG_LEVEL": "ERROR"}
        assert resolve_level(debug=True, verbose=True, env=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, env=env) == "INFO"
        assert resolve_level(quiet=True, env=env) == "ERROR"

    def test_env_then_fallback(self):
        assert resolve_level(env={"RSIM_LOG_LEVEL": "INFO"}, fallback="DEBUG") == "INFO"
        assert resolve_level(env={}, fallback="DEBUG") == "DEBUG"
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_console_level(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_werkzeug_quieted(self):
        setup_logging("INFO")
        assert logging.getLogger("werkzeug").level == logging.WARNING

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "sim.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("recoverysim.test").debug("to file only")
        for handler in root.handlers:
            handler.flush()
        assert "to file only" in log_file.read_text()
