"""
Configuration advisor — pre-flight checks and post-run analysis.

Three read-only views over a SimulationConfig:

    preflight()       → warnings to show before running
    system_status()   → derived readiness / security summary
    analyze_result()  → factors that explain a result, plus suggestions

None of these influence the generator; they only describe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.core.models.simulation import SimulationConfig


@dataclass
class ConfigWarning:
    """A problem spotted before running."""

    level: str  # error, warning
    message: str
    suggestion: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass
class SystemStatus:
    """Readiness summary derived from the configuration."""

    security_status: str = "medium"  # low, medium, high
    is_ready: bool = False
    has_backup: bool = False
    is_encrypted: bool = False
    auth_configured: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "securityStatus": self.security_status,
            "isReady": self.is_ready,
            "hasBackup": self.has_backup,
            "isEncrypted": self.is_encrypted,
            "authConfigured": self.auth_configured,
        }


@dataclass
class Factor:
    kind: str  # positive, negative, neutral
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "text": self.text}


@dataclass
class ResultAnalysis:
    """Why a run ended the way it did."""

    result: str
    factors: list[Factor] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result,
            "factors": [f.to_dict() for f in self.factors],
            "suggestions": list(self.suggestions),
        }


# ── Pre-flight ──────────────────────────────────────────────────


def preflight(config: SimulationConfig) -> list[ConfigWarning]:
    """List configuration conflicts in a fixed order."""
    opts = config.options
    adv = config.advanced_options
    warnings: list[ConfigWarning] = []

    if adv.security_level == "high" and adv.auth_method == "identity" and not opts.identity_linked:
        warnings.append(ConfigWarning(
            level="error",
            message="High security level requires Apple ID authentication",
            suggestion="Enable Apple ID or change authentication method",
        ))

    if opts.disk_encryption and adv.auth_method == "recovery_key" and not opts.identity_linked:
        warnings.append(ConfigWarning(
            level="warning",
            message="FileVault enabled with recovery key only",
            suggestion="Ensure recovery key is available",
        ))

    if not opts.recovery_boot_available:
        warnings.append(ConfigWarning(
            level="error",
            message="Recovery Mode is disabled",
            suggestion="Enable Recovery Mode to proceed",
        ))

    if adv.user_role == "standard" and config.scenario == "lost_admin":
        warnings.append(ConfigWarning(
            level="error",
            message="Cannot recover admin access from standard user",
            suggestion="Change scenario or user role",
        ))

    if config.scenario == "account_corruption" and not opts.backup_available:
        warnings.append(ConfigWarning(
            level="warning",
            message="No Time Machine backup available for account corruption",
            suggestion="Consider enabling Time Machine backup",
        ))

    return warnings


def system_status(config: SimulationConfig) -> SystemStatus:
    """Summarize readiness and security posture."""
    opts = config.options
    adv = config.advanced_options

    security = "medium"
    if adv.security_level == "high" and opts.disk_encryption:
        security = "high"
    elif adv.security_level == "low" and not opts.disk_encryption:
        security = "low"

    return SystemStatus(
        security_status=security,
        is_ready=opts.recovery_boot_available and (
            opts.identity_linked or adv.auth_method == "local_account"
        ),
        has_backup=opts.backup_available,
        is_encrypted=opts.disk_encryption,
        auth_configured=opts.identity_linked or adv.auth_method != "identity",
    )


# ── Post-run analysis ───────────────────────────────────────────


def analyze_result(config: SimulationConfig, result: str) -> ResultAnalysis:
    """Explain a result in terms of the configuration that produced it."""
    opts = config.options
    adv = config.advanced_options
    analysis = ResultAnalysis(result=result)
    factors = analysis.factors
    suggestions = analysis.suggestions

    # Positive
    if opts.recovery_boot_available:
        factors.append(Factor("positive", "Recovery Mode was available"))
    if opts.identity_linked and adv.auth_method == "identity":
        factors.append(Factor("positive", "Apple ID authentication was configured"))
    if adv.user_role == "administrator":
        factors.append(Factor("positive", "Administrator privileges were available"))

    # Negative
    if not opts.recovery_boot_available and result != "success":
        factors.append(Factor("negative", "Recovery Mode was disabled"))
        suggestions.append("Enable Recovery Mode for better recovery options")
    if adv.security_level == "high" and result != "success":
        factors.append(Factor("negative", "High security level required additional authentication"))
        suggestions.append("Consider using medium security level for easier recovery")
    if not opts.identity_linked and adv.auth_method == "identity":
        factors.append(Factor("negative", "Apple ID was required but not configured"))
        suggestions.append("Link an Apple ID or change authentication method")
    if adv.user_role == "standard" and config.scenario == "lost_admin":
        factors.append(Factor("negative", "Standard user cannot recover admin access directly"))
        suggestions.append("Use an administrator account for admin recovery")

    # Neutral
    if opts.backup_available:
        factors.append(Factor("neutral", "Time Machine backup was available"))
    if opts.disk_encryption:
        factors.append(Factor("neutral", "FileVault encryption added security complexity"))

    if result == "success":
        suggestions.append("Configuration was optimal for this scenario")
        suggestions.append("Try different scenarios to explore other recovery paths")
    else:
        if not opts.backup_available:
            suggestions.append("Enable Time Machine backup for additional recovery options")
        if adv.security_level == "low" and result != "error":
            suggestions.append("Increase security level to see more authentication steps")

    return analysis
