"""
API routes — REST endpoints for the simulator.

All endpoints return JSON. Grouped under /api/ prefix.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from src.core.models.simulation import OS_VERSIONS, SCENARIOS, Options, SimulationConfig

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

SIMULATION_DISCLAIMER = "This is a simulated process. No real system modifications were made."
INSTRUCTIONS_DISCLAIMER = "These instructions are for educational simulation purposes only."

_RESULT_KINDS = ("success", "partial", "warning", "error")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _failure(error: str, exc: Exception):  # type: ignore[no-untyped-def]
    """500 response; the exception text is only shown outside production."""
    message = str(exc) if current_app.config.get("EXPOSE_ERRORS") else "An error occurred"
    return jsonify({"error": error, "message": message}), 500


def _os_version(data: dict):  # type: ignore[no-untyped-def]
    """OS version under any accepted key: camelCase, legacy or snake_case."""
    for key in ("osVersion", "macosVersion", "os_version"):
        if key in data:
            return data[key]
    return None


def _parse_config(data: dict):  # type: ignore[no-untyped-def]
    """Validate a configuration payload.

    Returns (config, None) on success or (None, error_response).
    """
    os_version = _os_version(data)
    if os_version not in OS_VERSIONS:
        return None, (jsonify({
            "error": "Invalid macOS version",
            "validVersions": list(OS_VERSIONS),
        }), 400)

    if data.get("scenario") not in SCENARIOS:
        return None, (jsonify({
            "error": "Invalid scenario",
            "validScenarios": list(SCENARIOS),
        }), 400)

    try:
        return SimulationConfig.model_validate(data), None
    except ValidationError as e:
        return None, (jsonify({
            "error": "Invalid options",
            "details": e.errors(include_url=False, include_context=False, include_input=False),
        }), 400)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ── Health ───────────────────────────────────────────────────────────


@api_bp.route("/health")
def api_health():  # type: ignore[no-untyped-def]
    """Liveness probe."""
    from src.core.observability.health import check_system_health

    return jsonify(check_system_health().to_dict())


# ── Catalog ──────────────────────────────────────────────────────────


@api_bp.route("/catalog")
def api_catalog():  # type: ignore[no-untyped-def]
    """Valid configuration values and defaults."""
    from src.core.services.catalog import simulation_catalog

    return jsonify(simulation_catalog())


# ── Simulate ─────────────────────────────────────────────────────────


@api_bp.route("/simulate", methods=["POST"])
def api_simulate():  # type: ignore[no-untyped-def]
    """Generate the scripted recovery steps for a configuration."""
    from src.core.engine.generator import generate_simulation

    config, error = _parse_config(_json_body())
    if error is not None:
        return error

    try:
        simulation = generate_simulation(config)
    except Exception as e:
        logger.exception("Simulation generation failed")
        return _failure("Simulation generation failed", e)

    logger.info("Simulation generated for %s — %s", config.os_version, config.scenario)

    return jsonify({
        **simulation.to_dict(),
        "disclaimer": SIMULATION_DISCLAIMER,
        "timestamp": _now_iso(),
    })


# ── Instructions ─────────────────────────────────────────────────────


@api_bp.route("/instructions", methods=["POST"])
def api_instructions():  # type: ignore[no-untyped-def]
    """Follow-up instructions for a finished run."""
    from src.core.services.instructions import build_instructions

    try:
        data = request.get_json(silent=True) or {}
        options = Options.model_validate(data.get("options") or {})
        instructions = build_instructions(
            scenario=data.get("scenario"),
            result=data.get("result"),
            os_version=_os_version(data),
            options=options,
        )
    except Exception as e:
        logger.exception("Instructions generation failed")
        return _failure("Instructions generation failed", e)

    return jsonify({
        **instructions.to_dict(),
        "disclaimer": INSTRUCTIONS_DISCLAIMER,
        "timestamp": _now_iso(),
    })


# ── Advisor ──────────────────────────────────────────────────────────


@api_bp.route("/preflight", methods=["POST"])
def api_preflight():  # type: ignore[no-untyped-def]
    """Configuration warnings and derived status, before running."""
    from src.core.services.advisor import preflight, system_status

    config, error = _parse_config(_json_body())
    if error is not None:
        return error

    return jsonify({
        "warnings": [w.to_dict() for w in preflight(config)],
        "status": system_status(config).to_dict(),
    })


@api_bp.route("/analyze", methods=["POST"])
def api_analyze():  # type: ignore[no-untyped-def]
    """Explain a result in terms of its configuration."""
    from src.core.services.advisor import analyze_result

    data = _json_body()
    result = data.get("result")
    if result not in _RESULT_KINDS:
        return jsonify({
            "error": "Invalid result",
            "validResults": list(_RESULT_KINDS),
        }), 400

    config, error = _parse_config(data)
    if error is not None:
        return error

    return jsonify(analyze_result(config, result).to_dict())
