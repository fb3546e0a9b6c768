"""
Step explanations — the "why" shown next to each simulated line.

Keyed on the step command. Commands without an entry get a
generic ``Executes: <command>`` line.
"""

from __future__ import annotations

STEP_EXPLANATIONS: dict[str, str] = {
    "detect_os": "Identifies the installed macOS version to determine compatible recovery procedures.",
    "system_info": "Detects CPU architecture (Intel or Apple Silicon) which affects boot and recovery processes.",
    "firmware_version": "Checks firmware version for compatibility and security validation.",
    "secure_enclave": "Verifies the Secure Enclave on Apple Silicon for cryptographic operations.",
    "security_level_check": "Assesses configured security level (low/medium/high) to determine authentication requirements.",
    "user_role_scan": "Identifies user privilege level (Standard/Administrator) for permission validation.",
    "check_recovery": "Verifies if Recovery Mode is accessible - essential for most recovery operations.",
    "security_scan": "Checks FileVault encryption status which affects how passwords and keys are stored.",
    "auth_method_detect": "Determines which authentication method will be used for recovery.",
    "apple_id_check": "Confirms Apple ID linkage for cloud-based authentication options.",
    "backup_scan": "Searches for Time Machine backups which can restore corrupted accounts.",
    "scenario_init": "Initializes the recovery process specific to the selected scenario.",
    "boot_recovery": "Simulates booting into Recovery Mode (Command+R at startup).",
    "recovery_tools": "Loads Recovery Mode utilities including Terminal, Disk Utility, and Reset Password.",
    "password_reset": "Generates a secure token for password reset without requiring the old password.",
    "reset_confirm": "Validates that the password change was successful and updates system keychain.",
    "admin_privileges": "Confirms administrative access level for system modifications.",
    "privilege_error": "Standard users cannot escalate to admin without proper authentication.",
    "multi_factor_init": "High security requires additional authentication factors beyond just password.",
    "session_close": "Completes recovery process and prepares system for normal boot.",
    "security_verify": "Final security check to ensure no system integrity issues remain.",
    "integrity_check": "Validates system files and permissions are correct before restart.",
}


def explain(command: str) -> str:
    """Return the explanation for a step command."""
    return STEP_EXPLANATIONS.get(command, f"Executes: {command}")
