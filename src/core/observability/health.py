"""
Health checker — liveness plus a self-test of the step engine.

The engine has no external dependencies, so "healthy" means the rule
table is well-formed and a reference configuration still produces a
consistent run. Used by ``GET /api/health`` and ``recoverysim health``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.core.engine.explanations import STEP_EXPLANATIONS
from src.core.engine.generator import generate_simulation
from src.core.engine.pipeline import Rule
from src.core.engine.rules import RULES
from src.core.models.simulation import Options, SimulationConfig

logger = logging.getLogger(__name__)

SERVICE_MESSAGE = "macOS Recovery Simulator API"
SIMULATION_WARNING = "SIMULATION ONLY - NO REAL SYSTEM ACCESS"


@dataclass
class ComponentHealth:
    """Health of a single component."""

    name: str
    status: str = "unknown"  # healthy, degraded, unhealthy, unknown
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class SystemHealth:
    """Aggregate health of the service."""

    status: str = "healthy"
    timestamp: str = ""
    components: list[ComponentHealth] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now(UTC).isoformat()

    def add(self, component: ComponentHealth) -> None:
        self.components.append(component)
        self._recalculate()

    def _recalculate(self) -> None:
        statuses = [c.status for c in self.components]
        if any(s == "unhealthy" for s in statuses):
            self.status = "unhealthy"
        elif any(s == "degraded" for s in statuses):
            self.status = "degraded"
        elif all(s == "healthy" for s in statuses):
            self.status = "healthy"
        else:
            self.status = "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "message": SERVICE_MESSAGE,
            "warning": SIMULATION_WARNING,
            "timestamp": self.timestamp,
            "components": [c.to_dict() for c in self.components],
        }


def check_rule_table(rules: tuple[Rule, ...] = RULES) -> ComponentHealth:
    """Rules must exist and have unique names."""
    names = [r.name for r in rules]
    duplicates = sorted({n for n in names if names.count(n) > 1})

    if not rules:
        status, message = "unhealthy", "Rule table is empty"
    elif duplicates:
        status, message = "degraded", f"Duplicate rule names: {', '.join(duplicates)}"
    else:
        status, message = "healthy", f"{len(rules)} rules loaded"

    return ComponentHealth(
        name="rule_table",
        status=status,
        message=message,
        details={"rules": names, "explanations": len(STEP_EXPLANATIONS)},
    )


def check_engine() -> ComponentHealth:
    """Generate a reference run and verify its bookkeeping."""
    reference = SimulationConfig(
        os_version="Sonoma",
        scenario="forgotten_password",
        options=Options(
            identity_linked=True,
            disk_encryption=True,
            recovery_boot_available=True,
        ),
    )
    try:
        run = generate_simulation(reference)
    except Exception as e:
        logger.exception("Engine self-test failed")
        return ComponentHealth(name="engine", status="unhealthy", message=str(e))

    ids_ok = [s.id for s in run.steps] == list(range(1, len(run.steps) + 1))
    total_ok = run.metadata.estimated_time_ms == sum(s.display_delay_ms for s in run.steps)

    if run.result == "success" and ids_ok and total_ok:
        status, message = "healthy", f"Reference run produced {len(run.steps)} steps"
    else:
        status, message = "degraded", "Reference run is inconsistent"

    return ComponentHealth(
        name="engine",
        status=status,
        message=message,
        details={
            "result": run.result,
            "totalSteps": run.metadata.total_steps,
            "estimatedTimeMs": run.metadata.estimated_time_ms,
        },
    )


def check_system_health() -> SystemHealth:
    """Run all health checks and return aggregate status."""
    health = SystemHealth()
    health.add(check_rule_table())
    health.add(check_engine())
    return health
