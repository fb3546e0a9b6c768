"""
Domain models — Pydantic types for the recovery simulator.

All models are re-exported here for convenient access:

    from src.core.models import SimulationConfig, SimulationResult, Step
"""

from src.core.models.session import HistoryEntry, SimulatorSession
from src.core.models.simulation import (
    AdvancedOptions,
    Instructions,
    Options,
    SimulationConfig,
    SimulationMetadata,
    SimulationResult,
    Step,
)

__all__ = [
    # simulation.py
    "AdvancedOptions",
    "Instructions",
    "Options",
    "SimulationConfig",
    "SimulationMetadata",
    "SimulationResult",
    "Step",
    # session.py
    "HistoryEntry",
    "SimulatorSession",
]
