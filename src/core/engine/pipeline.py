"""
Rule pipeline — thread an explicit state through an ordered rule table.

Each rule looks at the configuration and emits step drafts. A rule
may also halt the run, which turns the state into a terminal result.

    Continue(steps) ──rule──▶ Continue(steps + new)
                    ──rule──▶ Terminate(result)   (no further rules run)

Drafts become Steps here: ids are assigned in emission order starting
at 1 and explanations are resolved from the command.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from src.core.engine.explanations import explain
from src.core.models.simulation import (
    SimulationConfig,
    SimulationMetadata,
    SimulationResult,
    Step,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepDraft:
    """A step before it is numbered."""

    command: str
    output: str
    category: str = "info"
    delay_ms: int = 800


@dataclass(frozen=True)
class RuleOutcome:
    """What a rule emitted, and whether it stops the run."""

    drafts: tuple[StepDraft, ...] = ()
    halt: str | None = None  # terminal message when set

    @property
    def halts(self) -> bool:
        return self.halt is not None


def _always(config: SimulationConfig) -> bool:
    return True


@dataclass(frozen=True)
class Rule:
    """One row of the rule table: a predicate and the steps it emits."""

    name: str
    emit: Callable[[SimulationConfig], RuleOutcome]
    when: Callable[[SimulationConfig], bool] = _always


@dataclass(frozen=True)
class Continue:
    """Steps accumulated so far; evaluation goes on."""

    steps: tuple[Step, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Terminate:
    """A finished run. Later rules leave it untouched."""

    result: SimulationResult


PipelineState = Continue | Terminate


def make_result(
    config: SimulationConfig,
    steps: Iterable[Step],
    result: str,
    message: str,
) -> SimulationResult:
    """Assemble a SimulationResult with metadata derived from the steps."""
    steps = list(steps)
    return SimulationResult(
        steps=steps,
        result=result,
        message=message,
        metadata=SimulationMetadata(
            os_version=config.os_version,
            scenario=config.scenario,
            total_steps=len(steps),
            estimated_time_ms=sum(s.display_delay_ms for s in steps),
        ),
    )


def _number(drafts: Iterable[StepDraft], start: int) -> list[Step]:
    return [
        Step(
            id=start + offset,
            command=draft.command,
            output=draft.output,
            category=draft.category,
            display_delay_ms=draft.delay_ms,
            explanation=explain(draft.command),
        )
        for offset, draft in enumerate(drafts)
    ]


def evaluate_rule(
    rule: Rule,
    config: SimulationConfig,
    state: PipelineState,
) -> PipelineState:
    """Apply one rule to the current state.

    A Terminate state passes through unchanged, as does a Continue
    state whose rule predicate is false.
    """
    if isinstance(state, Terminate):
        return state
    if not rule.when(config):
        return state

    outcome = rule.emit(config)
    steps = state.steps + tuple(_number(outcome.drafts, len(state.steps) + 1))

    if outcome.halts:
        logger.debug("Rule '%s' halted the run after %d steps", rule.name, len(steps))
        return Terminate(make_result(config, steps, "error", outcome.halt or ""))

    return Continue(steps)


def run_rules(
    rules: Iterable[Rule],
    config: SimulationConfig,
    state: PipelineState | None = None,
) -> PipelineState:
    """Evaluate rules in order, stopping at the first terminal outcome."""
    state = state if state is not None else Continue()
    for rule in rules:
        state = evaluate_rule(rule, config, state)
        if isinstance(state, Terminate):
            break
    return state
