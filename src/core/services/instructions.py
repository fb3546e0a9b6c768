"""
Post-recovery instructions — what to do after a simulated run.

Derived only from the scenario, the result kind, the OS version and
the capability flags. Never looks at the generated steps.
"""

from __future__ import annotations

from src.core.models.simulation import PASSKEY_VERSIONS, Instructions, Options

_TITLES = {
    "success": "Recovery Completed Successfully",
    "partial": "Partial Recovery Completed",
}
_TITLE_FALLBACK = "Recovery Completed with Warnings"

_OPENING_STEPS = (
    "Restart your Mac by clicking Apple menu > Restart",
    "Wait for the system to boot normally",
)

_CLOSING_STEPS = (
    "Create a new backup (Time Machine recommended)",
    "Document your new password securely",
)

_SCENARIO_STEPS: dict[str, tuple[str, ...]] = {
    "forgotten_password": (
        "At the login screen, enter your NEW password",
        "Once logged in, open System Settings",
        "Navigate to Users & Groups",
        "Verify your account settings are correct",
        "Consider enabling Touch ID or creating a Passkey",
    ),
    "lost_admin": (
        "Log in with the restored administrator account",
        "Open System Settings > Users & Groups",
        'Verify admin privileges are active (you should see "Admin" under your name)',
        "Create a backup admin account for future emergencies",
        "Update all user account passwords",
    ),
    "account_corruption": (
        "Log in to your restored account",
        "Open System Settings and verify all settings",
        "Check Applications folder to ensure all apps are accessible",
        "Open a few apps to verify functionality",
        "Check Documents folder for file integrity",
    ),
    "post_update": (
        "Log in with your existing password (should now work)",
        "Allow any pending system updates to complete",
        "Check System Settings > General > Software Update",
        "Verify all applications work correctly on new macOS version",
    ),
}

WARNING_NO_BACKUP = "⚠️ No Time Machine backup detected - strongly recommend setting up backups"
WARNING_NO_IDENTITY = "⚠️ Link your Apple ID for easier recovery in the future"
WARNING_NO_ENCRYPTION = "⚠️ Consider enabling FileVault encryption for enhanced security"

_TIPS = (
    "💡 Use a password manager to securely store passwords",
    "💡 Enable two-factor authentication on your Apple ID",
    "💡 Keep macOS updated to the latest version",
    "💡 Regularly test your backup and recovery processes",
)
TIP_PASSKEYS = "💡 Consider using Passkeys instead of passwords for supported services"


def build_instructions(
    scenario: str,
    result: str,
    os_version: str | None,
    options: Options,
) -> Instructions:
    """Build the follow-up instructions for a finished run.

    Unknown scenarios get the opening and closing steps only.
    """
    steps = list(_OPENING_STEPS)
    steps += _SCENARIO_STEPS.get(scenario, ())

    if scenario == "forgotten_password" and options.identity_linked:
        steps.append("Verify your Apple ID is still properly linked")
    if scenario == "account_corruption" and options.backup_available:
        steps.append("Consider setting up automatic Time Machine backups")

    steps += _CLOSING_STEPS

    warnings: list[str] = []
    if not options.backup_available:
        warnings.append(WARNING_NO_BACKUP)
    if not options.identity_linked:
        warnings.append(WARNING_NO_IDENTITY)
    if not options.disk_encryption:
        warnings.append(WARNING_NO_ENCRYPTION)

    tips = list(_TIPS)
    if os_version in PASSKEY_VERSIONS:
        tips.append(TIP_PASSKEYS)

    return Instructions(
        title=_TITLES.get(result, _TITLE_FALLBACK),
        steps=steps,
        warnings=warnings,
        tips=tips,
    )
