"""
Recovery rule table — the scripted narrative, stage by stage.

``RULES`` is evaluated top to bottom by the pipeline. Stages that
can stop a run return a ``halt`` message; the first one reached wins.

    architecture → security level → user role → recovery boot (halt)
    → disk encryption → authentication (halt) → backups
    → scenario (lost_admin may halt) → passkeys → closing
"""

from __future__ import annotations

from src.core.engine.pipeline import Rule, RuleOutcome, StepDraft
from src.core.models.simulation import OS_VERSIONS, PASSKEY_VERSIONS, SimulationConfig

HALT_RECOVERY_REQUIRED = "Recovery Mode is disabled - cannot proceed with this configuration"
HALT_IDENTITY_REQUIRED = (
    "High security requires Apple ID authentication, but Apple ID is not configured"
)
HALT_ADMIN_ESCALATION = (
    "Standard user cannot recover administrator access with current security settings"
)

_AUTH_LABELS = {
    "identity": "APPLE ID",
    "recovery_key": "RECOVERY KEY",
    "local_account": "LOCAL ACCOUNT",
}


def previous_version(current: str) -> str:
    """The release before ``current``, or a placeholder for the oldest."""
    try:
        index = OS_VERSIONS.index(current)
    except ValueError:
        return "Previous Version"
    return OS_VERSIONS[index - 1] if index > 0 else "Previous Version"


def _emit(*drafts: StepDraft, halt: str | None = None) -> RuleOutcome:
    return RuleOutcome(drafts=tuple(drafts), halt=halt)


# ── System detection ────────────────────────────────────────────


def architecture_steps(config: SimulationConfig) -> RuleOutcome:
    version = config.os_version
    detect = StepDraft("detect_os", f"macOS {version} detected", "info", 1000)

    if config.advanced_options.cpu_architecture == "apple_silicon":
        return _emit(
            detect,
            StepDraft("system_info", "Architecture: arm64 (Apple Silicon)", "info", 600),
            StepDraft("firmware_version", "Firmware: iBoot-8422.141.2", "info", 600),
            StepDraft("secure_enclave", "Secure Enclave: Available", "success", 700),
        )

    t2 = "Available" if version != "Mojave" else "Not Available"
    return _emit(
        detect,
        StepDraft("system_info", "Architecture: x86_64 (Intel)", "info", 600),
        StepDraft("firmware_version", "Firmware: EFI v2.9.1", "info", 600),
        StepDraft("t2_chip_check", f"T2 Security Chip: {t2}", "info", 700),
    )


def security_level_steps(config: SimulationConfig) -> RuleOutcome:
    level = config.advanced_options.security_level
    drafts = [StepDraft("security_level_check", f"Security Level: {level.upper()}", "info", 800)]
    if level == "high":
        drafts.append(StepDraft("enhanced_security", "Enhanced security protocols active", "info", 900))
        drafts.append(
            StepDraft("auth_requirements", "Multiple authentication factors required", "warning", 800)
        )
    return _emit(*drafts)


def user_role_steps(config: SimulationConfig) -> RuleOutcome:
    if config.advanced_options.user_role == "administrator":
        return _emit(
            StepDraft("user_role_scan", "User Role: Administrator", "info", 700),
            StepDraft("admin_privileges", "Administrative privileges detected ✓", "success", 700),
        )
    return _emit(
        StepDraft("user_role_scan", "User Role: Standard User", "info", 700),
        StepDraft("privilege_level", "Standard user privileges (limited access)", "warning", 700),
    )


# ── Capabilities ────────────────────────────────────────────────


def recovery_boot_steps(config: SimulationConfig) -> RuleOutcome:
    if config.options.recovery_boot_available:
        return _emit(StepDraft("check_recovery", "Recovery Mode: Available ✓", "success", 800))

    missing = StepDraft("check_recovery", "Recovery Mode: Not Available", "error", 800)
    if config.scenario == "lost_admin" or config.advanced_options.security_level == "high":
        return _emit(
            missing,
            StepDraft(
                "recovery_required",
                "ERROR: Recovery Mode required for this scenario",
                "error",
                1000,
            ),
            halt=HALT_RECOVERY_REQUIRED,
        )
    return _emit(missing)


def disk_encryption_steps(config: SimulationConfig) -> RuleOutcome:
    drafts = [
        StepDraft("security_scan", "FileVault Encryption: Enabled ✓", "info", 700),
        StepDraft("keychain_check", "Secure storage detected", "info", 600),
    ]
    if config.advanced_options.security_level == "high":
        drafts.append(
            StepDraft("encryption_verify", "Strong encryption verification required", "warning", 900)
        )
    return _emit(*drafts)


def authentication_steps(config: SimulationConfig) -> RuleOutcome:
    method = config.advanced_options.auth_method
    announce = StepDraft("auth_method_detect", f"Authentication: {_AUTH_LABELS[method]}", "info", 800)

    if method == "identity":
        if config.options.identity_linked:
            return _emit(
                announce,
                StepDraft("apple_id_check", "Apple ID linked to system ✓", "success", 800),
                StepDraft("icloud_connectivity", "iCloud services reachable", "success", 700),
            )
        missing = StepDraft("apple_id_missing", "ERROR: Apple ID not configured", "error", 1000)
        if config.advanced_options.security_level == "high":
            return _emit(announce, missing, halt=HALT_IDENTITY_REQUIRED)
        return _emit(announce, missing)

    if method == "recovery_key":
        if config.options.disk_encryption:
            return _emit(
                announce,
                StepDraft("recovery_key_check", "FileVault recovery key authentication selected", "info", 800),
            )
        return _emit(
            announce,
            StepDraft("recovery_key_error", "WARNING: Recovery key requires FileVault", "warning", 1000),
        )

    return _emit(announce, StepDraft("local_auth", "Local account password authentication", "info", 700))


def backup_steps(config: SimulationConfig) -> RuleOutcome:
    return _emit(StepDraft("backup_scan", "Time Machine backups found (3 available)", "success", 900))


# ── Scenarios ───────────────────────────────────────────────────


def _forgotten_password(config: SimulationConfig) -> RuleOutcome:
    opts = config.options
    drafts = [StepDraft("scenario_init", "Initiating forgotten password recovery", "info", 1000)]

    if config.advanced_options.security_level == "high":
        drafts.append(StepDraft("multi_factor_init", "Initiating multi-factor authentication...", "info", 1200))
        drafts.append(StepDraft("biometric_check", "Checking for biometric data...", "info", 1000))

    if opts.identity_linked:
        drafts.append(StepDraft("apple_id_auth", "Attempting Apple ID authentication...", "info", 1500))
        drafts.append(StepDraft("icloud_verify", "iCloud credentials verified ✓", "success", 1200))
        drafts.append(StepDraft("unlock_method", "Apple ID unlock method available", "success", 800))

    if opts.recovery_boot_available:
        drafts.append(StepDraft("boot_recovery", "Booting into Recovery Mode...", "info", 1800))
        drafts.append(StepDraft("recovery_tools", "Recovery utilities loaded", "success", 1000))

    drafts += [
        StepDraft("user_list", "Scanning user accounts...", "info", 1000),
        StepDraft("user_found", 'Found: User "johnappleseed"', "info", 800),
        StepDraft("password_reset", "Generating password reset token...", "info", 1500),
        StepDraft("reset_confirm", "Password reset simulation successful ✓", "success", 1000),
    ]
    return _emit(*drafts)


def _lost_admin(config: SimulationConfig) -> RuleOutcome:
    advanced = config.advanced_options
    drafts = [
        StepDraft("scenario_init", "Initiating admin access recovery", "info", 1000),
        StepDraft("admin_check", "Scanning for administrator accounts...", "info", 1200),
        StepDraft("admin_found", "Found 0 accessible admin accounts", "warning", 1000),
    ]

    if advanced.user_role == "standard" and advanced.security_level != "low":
        drafts.append(
            StepDraft(
                "privilege_error",
                "ERROR: Standard user cannot escalate to admin without Recovery Mode",
                "error",
                1200,
            )
        )
        return _emit(*drafts, halt=HALT_ADMIN_ESCALATION)

    if config.options.recovery_boot_available:
        drafts += [
            StepDraft("recovery_boot", "Entering Recovery Mode...", "info", 1800),
            StepDraft("resetpassword_util", "Loading Reset Password utility", "info", 1200),
            StepDraft("account_scan", "Detecting all user accounts", "info", 1000),
            StepDraft("promote_user", "Simulating admin privilege grant", "success", 1500),
        ]

    drafts.append(StepDraft("verify_admin", "Admin access restored ✓", "success", 1000))
    return _emit(*drafts)


def _account_corruption(config: SimulationConfig) -> RuleOutcome:
    drafts = [
        StepDraft("scenario_init", "Analyzing account corruption", "info", 1000),
        StepDraft("directory_check", "Checking Directory Services...", "info", 1200),
        StepDraft("corruption_found", "User database inconsistency detected", "warning", 1000),
    ]

    if config.options.backup_available:
        drafts += [
            StepDraft("backup_restore", "Preparing Time Machine restoration...", "info", 1500),
            StepDraft("restore_progress", "Restoring user data (simulated)", "info", 2000),
            StepDraft("restore_complete", "Account data restored ✓", "success", 1200),
        ]
    else:
        drafts += [
            StepDraft("rebuild_account", "Rebuilding account structure...", "info", 1800),
            StepDraft("permissions_fix", "Repairing permissions database", "info", 1500),
            StepDraft("rebuild_complete", "Account rebuilt successfully ✓", "success", 1200),
        ]
    return _emit(*drafts)


def _post_update(config: SimulationConfig) -> RuleOutcome:
    version = config.os_version
    drafts = [
        StepDraft("scenario_init", "Post-update login failure analysis", "info", 1000),
        StepDraft("update_check", f"Previous: macOS {previous_version(version)}", "info", 800),
        StepDraft("update_current", f"Current: macOS {version}", "info", 800),
        StepDraft("cache_check", "Checking system caches...", "info", 1000),
        StepDraft("cache_issue", "Login keychain cache corruption detected", "warning", 1000),
        StepDraft("cache_clear", "Clearing authentication caches...", "info", 1500),
    ]

    if config.options.disk_encryption:
        drafts.append(StepDraft("filevault_repair", "Resyncing FileVault authentication", "info", 1800))

    drafts += [
        StepDraft("login_reset", "Resetting login subsystem...", "info", 1500),
        StepDraft("verification", "Login system restored ✓", "success", 1000),
    ]
    return _emit(*drafts)


SCENARIO_BRANCHES = {
    "forgotten_password": _forgotten_password,
    "lost_admin": _lost_admin,
    "account_corruption": _account_corruption,
    "post_update": _post_update,
}


def scenario_steps(config: SimulationConfig) -> RuleOutcome:
    branch = SCENARIO_BRANCHES.get(config.scenario)
    if branch is None:
        return _emit(StepDraft("scenario_init", "Starting generic recovery process", "info", 1000))
    return branch(config)


# ── Wrap-up ─────────────────────────────────────────────────────


def passkey_steps(config: SimulationConfig) -> RuleOutcome:
    return _emit(
        StepDraft("passkey_check", "Checking for Passkey support...", "info", 800),
        StepDraft("passkey_status", "Passkeys not configured", "info", 600),
    )


def closing_steps(config: SimulationConfig) -> RuleOutcome:
    return _emit(
        StepDraft("security_verify", "Running security verification...", "info", 1200),
        StepDraft("integrity_check", "System integrity: OK ✓", "success", 1000),
        StepDraft("session_close", "Recovery session completed", "success", 800),
    )


RULES: tuple[Rule, ...] = (
    Rule("architecture", architecture_steps),
    Rule("security_level", security_level_steps),
    Rule("user_role", user_role_steps),
    Rule("recovery_boot", recovery_boot_steps),
    Rule("disk_encryption", disk_encryption_steps, when=lambda c: c.options.disk_encryption),
    Rule("authentication", authentication_steps),
    Rule("backup", backup_steps, when=lambda c: c.options.backup_available),
    Rule("scenario", scenario_steps),
    Rule("passkeys", passkey_steps, when=lambda c: c.os_version in PASSKEY_VERSIONS),
    Rule("closing", closing_steps),
)


def get_rule(name: str) -> Rule | None:
    """Look up a rule by name."""
    for rule in RULES:
        if rule.name == name:
            return rule
    return None
