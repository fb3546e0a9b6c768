"""
Step generator — run the rule table and classify the outcome.

Pure and stateless: the same configuration always yields the same
steps, result and message.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.core.engine.pipeline import Rule, Terminate, make_result, run_rules
from src.core.engine.rules import RULES
from src.core.models.simulation import SimulationConfig, SimulationResult

logger = logging.getLogger(__name__)

MESSAGE_SUCCESS = "Password recovery simulation completed successfully"
MESSAGE_PARTIAL = "Recovery possible but requires Recovery Mode for full access"
MESSAGE_WARNING = "Limited recovery options - Apple ID or Recovery Mode recommended"


def classify_result(config: SimulationConfig) -> tuple[str, str]:
    """Result kind and message for a run that reached the closing steps.

    The forgotten-password check is applied last and wins if both match
    (they cannot, since they require different scenarios).
    """
    opts = config.options
    result, message = "success", MESSAGE_SUCCESS

    if config.scenario == "lost_admin" and not opts.recovery_boot_available:
        result, message = "partial", MESSAGE_PARTIAL

    if (
        config.scenario == "forgotten_password"
        and not opts.identity_linked
        and not opts.recovery_boot_available
    ):
        result, message = "warning", MESSAGE_WARNING

    return result, message


def generate_simulation(
    config: SimulationConfig,
    rules: Sequence[Rule] = RULES,
) -> SimulationResult:
    """Generate the scripted recovery run for a configuration.

    Args:
        config: Validated simulation configuration.
        rules: Rule table to evaluate (defaults to the full pipeline).

    Returns:
        SimulationResult. Early exits carry result ``error`` and only
        the steps emitted up to the halting rule.
    """
    state = run_rules(rules, config)

    if isinstance(state, Terminate):
        simulation = state.result
    else:
        result, message = classify_result(config)
        simulation = make_result(config, state.steps, result, message)

    logger.debug(
        "Generated %d steps for %s/%s → %s",
        len(simulation.steps),
        config.os_version,
        config.scenario,
        simulation.result,
    )
    return simulation
