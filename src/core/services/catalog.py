"""
Option catalog — the closed sets a client may choose from.

Served by ``GET /api/catalog`` and ``recoverysim catalog`` so setup
screens never hard-code the lists.
"""

from __future__ import annotations

from typing import Any

from src.core.models.simulation import (
    AUTH_METHODS,
    CPU_ARCHITECTURES,
    OS_VERSIONS,
    PASSKEY_VERSIONS,
    SCENARIOS,
    SECURITY_LEVELS,
    USER_ROLES,
    AdvancedOptions,
    Options,
)

SCENARIO_LABELS = {
    "forgotten_password": "Forgotten password",
    "lost_admin": "Lost administrator access",
    "account_corruption": "Corrupted user account",
    "post_update": "Login failure after update",
}


def simulation_catalog() -> dict[str, Any]:
    """Valid values and defaults for every configuration field."""
    return {
        "osVersions": list(OS_VERSIONS),
        "passkeyVersions": [v for v in OS_VERSIONS if v in PASSKEY_VERSIONS],
        "scenarios": [
            {"id": s, "label": SCENARIO_LABELS[s]} for s in SCENARIOS
        ],
        "options": sorted(Options().to_dict()),
        "advancedOptions": {
            "securityLevel": list(SECURITY_LEVELS),
            "userRole": list(USER_ROLES),
            "authMethod": list(AUTH_METHODS),
            "cpuArchitecture": list(CPU_ARCHITECTURES),
        },
        "defaults": {
            "options": Options().to_dict(),
            "advancedOptions": AdvancedOptions().to_dict(),
        },
    }
