"""
SimulatorSession — the application state owned by one client.

Holds the configuration currently being edited and a short,
newest-first history of past runs. All changes go through the
methods below; history entries are frozen snapshots.

Serialized to .state/session.json by the persistence layer.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.core.models.simulation import (
    AdvancedOptions,
    Options,
    ResultKind,
    SimulationConfig,
    SimulationResult,
)

DEFAULT_HISTORY_LIMIT = 5


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def _default_config() -> SimulationConfig:
    return SimulationConfig(
        os_version="Sonoma",
        scenario="forgotten_password",
        options=Options(
            identity_linked=True,
            disk_encryption=True,
            recovery_boot_available=True,
            backup_available=False,
        ),
    )


class HistoryEntry(BaseModel):
    """Snapshot of one completed run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    timestamp: str = Field(default_factory=_now_iso)
    config: SimulationConfig
    result: ResultKind
    steps_count: int = 0
    success: bool = False


class SimulatorSession(BaseModel):
    """Current configuration plus bounded run history."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    schema_version: int = 1
    config: SimulationConfig = Field(default_factory=_default_config)
    history: list[HistoryEntry] = Field(default_factory=list)
    history_limit: int = DEFAULT_HISTORY_LIMIT
    next_id: int = 1  # never reused, survives clear_history
    updated_at: str = Field(default_factory=_now_iso)

    @model_validator(mode="after")
    def _next_id_past_history(self) -> SimulatorSession:
        # Files written before the counter existed only carry entry ids
        newest = max((e.id for e in self.history), default=0)
        if self.next_id <= newest:
            self.next_id = newest + 1
        return self

    def touch(self) -> None:
        """Update the timestamp."""
        self.updated_at = _now_iso()

    def update_config(self, updates: dict[str, Any]) -> SimulationConfig:
        """Merge a partial update into the current configuration.

        ``options`` and ``advancedOptions`` are merged field by field,
        so ``{"options": {"backupAvailable": True}}`` leaves the other
        flags untouched.
        """
        current = self.config.model_dump(by_alias=True)
        merged = {**current, **{k: v for k, v in updates.items()
                                if k not in ("options", "advancedOptions")}}

        option_updates = Options.model_validate(
            {**current["options"], **(updates.get("options") or {})}
        )
        advanced_updates = AdvancedOptions.model_validate(
            {**current["advancedOptions"], **(updates.get("advancedOptions") or {})}
        )
        merged["options"] = option_updates.model_dump(by_alias=True)
        merged["advancedOptions"] = advanced_updates.model_dump(by_alias=True)

        self.config = SimulationConfig.model_validate(merged)
        self.touch()
        return self.config

    def record(self, simulation: SimulationResult, config: SimulationConfig | None = None) -> HistoryEntry:
        """Prepend a run to the history, dropping the oldest past the limit."""
        entry = HistoryEntry(
            id=self.next_id,
            config=config or self.config,
            result=simulation.result,
            steps_count=len(simulation.steps),
            success=simulation.result == "success",
        )
        self.next_id += 1
        self.history = [entry, *self.history][: max(self.history_limit, 0)]
        self.touch()
        return entry

    def clear_history(self) -> None:
        self.history = []
        self.touch()

    def get_entry(self, entry_id: int) -> HistoryEntry | None:
        """Look up a history entry by id."""
        for entry in self.history:
            if entry.id == entry_id:
                return entry
        return None

    def restore(self, entry_id: int) -> SimulationConfig | None:
        """Make a past run's configuration current again."""
        entry = self.get_entry(entry_id)
        if entry is None:
            return None
        self.config = entry.config
        self.touch()
        return self.config
