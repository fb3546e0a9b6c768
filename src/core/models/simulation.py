"""
Simulation models — configuration in, scripted steps out.

Everything the engine reads or produces is declared here. The wire
format is camelCase JSON; Python code uses snake_case attributes.

    SimulationConfig → engine → SimulationResult (ordered Steps)
    SimulationConfig + result → instructions → Instructions
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# ── Enumerations ────────────────────────────────────────────────

OsVersion = Literal["Mojave", "Catalina", "Big Sur", "Monterey", "Ventura", "Sonoma"]
Scenario = Literal["forgotten_password", "lost_admin", "account_corruption", "post_update"]
SecurityLevel = Literal["low", "medium", "high"]
UserRole = Literal["standard", "administrator"]
AuthMethod = Literal["identity", "recovery_key", "local_account"]
CpuArchitecture = Literal["intel", "apple_silicon"]
StepCategory = Literal["info", "success", "warning", "error"]
ResultKind = Literal["success", "partial", "warning", "error"]

# Oldest first. previous_version() depends on this order.
OS_VERSIONS: tuple[str, ...] = (
    "Mojave",
    "Catalina",
    "Big Sur",
    "Monterey",
    "Ventura",
    "Sonoma",
)
PASSKEY_VERSIONS: frozenset[str] = frozenset({"Ventura", "Sonoma"})

SCENARIOS: tuple[str, ...] = (
    "forgotten_password",
    "lost_admin",
    "account_corruption",
    "post_update",
)
SECURITY_LEVELS: tuple[str, ...] = ("low", "medium", "high")
USER_ROLES: tuple[str, ...] = ("standard", "administrator")
AUTH_METHODS: tuple[str, ...] = ("identity", "recovery_key", "local_account")
CPU_ARCHITECTURES: tuple[str, ...] = ("intel", "apple_silicon")

# Key names sent by the original browser client
_LEGACY_OPTION_KEYS = {
    "appleId": "identityLinked",
    "fileVault": "diskEncryption",
    "recoveryMode": "recoveryBootAvailable",
    "timeMachine": "backupAvailable",
}

_ENUM_SPELLINGS = {
    "apple_id": "identity",
    "appleId": "identity",
    "recoveryKey": "recovery_key",
    "localAccount": "local_account",
    "appleSilicon": "apple_silicon",
}


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


# ── Configuration ───────────────────────────────────────────────


class Options(_WireModel):
    """The four capability flags chosen on the setup screen."""

    identity_linked: bool = False
    disk_encryption: bool = False
    recovery_boot_available: bool = False
    backup_available: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for legacy, current in _LEGACY_OPTION_KEYS.items():
            if legacy in data:
                value = data.pop(legacy)
                data.setdefault(current, value)
        return data


class AdvancedOptions(_WireModel):
    """Secondary axes that change step content, never the pipeline shape."""

    security_level: SecurityLevel = "medium"
    user_role: UserRole = "standard"
    auth_method: AuthMethod = "identity"
    cpu_architecture: CpuArchitecture = "apple_silicon"

    @field_validator("auth_method", "cpu_architecture", mode="before")
    @classmethod
    def _normalize_spelling(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _ENUM_SPELLINGS.get(value, value)
        return value


class SimulationConfig(_WireModel):
    """Complete input to the step generator."""

    os_version: OsVersion
    scenario: Scenario
    options: Options = Field(default_factory=Options)
    advanced_options: AdvancedOptions = Field(default_factory=AdvancedOptions)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_layout(cls, data: Any) -> Any:
        """Accept ``macosVersion`` and advanced options nested in ``options``."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "macosVersion" in data:
            data.setdefault("osVersion", data.pop("macosVersion"))
        options = data.get("options")
        if isinstance(options, dict) and "advanced" in options:
            options = dict(options)
            advanced = options.pop("advanced")
            data["options"] = options
            if "advancedOptions" not in data and "advanced_options" not in data:
                data["advancedOptions"] = advanced
        if data.get("options") is None:
            data.pop("options", None)
        for key in ("advancedOptions", "advanced_options"):
            if key in data and data[key] is None:
                del data[key]
        return data


# ── Output ──────────────────────────────────────────────────────


class Step(_WireModel):
    """One line of simulated terminal output."""

    id: int
    command: str
    output: str
    category: StepCategory = "info"
    display_delay_ms: int = 800
    explanation: str = ""


class SimulationMetadata(_WireModel):
    os_version: str
    scenario: str
    total_steps: int = 0
    estimated_time_ms: int = 0


class SimulationResult(_WireModel):
    """Ordered steps plus the overall classification."""

    steps: list[Step] = Field(default_factory=list)
    result: ResultKind = "success"
    message: str = ""
    metadata: SimulationMetadata

    @property
    def is_early_exit(self) -> bool:
        """Whether generation stopped before the closing steps."""
        return not self.steps or self.steps[-1].command != "session_close"


class Instructions(_WireModel):
    """Follow-up guidance shown after a simulation."""

    title: str = ""
    steps: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
