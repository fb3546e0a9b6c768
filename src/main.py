"""
Recovery Simulator — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main simulate --os-version Sonoma --scenario lost_admin
    python -m src.main web --port 3001
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from src import __version__
from src.core.models.simulation import (
    AUTH_METHODS,
    CPU_ARCHITECTURES,
    OS_VERSIONS,
    SCENARIOS,
    SECURITY_LEVELS,
    USER_ROLES,
)
from src.core.observability.logging_config import resolve_level, setup_logging

_CATEGORY_STYLE = {
    "info": ("•", "white"),
    "success": ("✓", "green"),
    "warning": ("!", "yellow"),
    "error": ("✗", "red"),
}

_RESULT_COLORS = {"success": "green", "partial": "yellow", "warning": "yellow", "error": "red"}


def config_options(func: Callable) -> Callable:
    """Attach the configuration flags shared by simulate/preflight/instructions."""
    decorators = [
        click.option("--os-version", type=click.Choice(OS_VERSIONS), default=None, help="macOS version."),
        click.option("--scenario", type=click.Choice(SCENARIOS), default=None, help="Recovery scenario."),
        click.option("--identity/--no-identity", "identity_linked", default=None, help="Apple ID linked."),
        click.option("--encryption/--no-encryption", "disk_encryption", default=None, help="FileVault enabled."),
        click.option("--recovery-boot/--no-recovery-boot", "recovery_boot", default=None,
                     help="Recovery Mode available."),
        click.option("--backup/--no-backup", "backup_available", default=None, help="Time Machine backup."),
        click.option("--security-level", type=click.Choice(SECURITY_LEVELS), default=None),
        click.option("--user-role", type=click.Choice(USER_ROLES), default=None),
        click.option("--auth-method", type=click.Choice(AUTH_METHODS), default=None),
        click.option("--cpu", "cpu_architecture", type=click.Choice(CPU_ARCHITECTURES), default=None),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_updates(params: dict[str, Any]) -> dict[str, Any]:
    """Turn CLI flag values into a partial configuration update (unset flags skipped)."""
    updates: dict[str, Any] = {}
    if params.get("os_version"):
        updates["osVersion"] = params["os_version"]
    if params.get("scenario"):
        updates["scenario"] = params["scenario"]

    option_keys = {
        "identity_linked": "identityLinked",
        "disk_encryption": "diskEncryption",
        "recovery_boot": "recoveryBootAvailable",
        "backup_available": "backupAvailable",
    }
    options = {wire: params[key] for key, wire in option_keys.items() if params.get(key) is not None}
    if options:
        updates["options"] = options

    advanced_keys = {
        "security_level": "securityLevel",
        "user_role": "userRole",
        "auth_method": "authMethod",
        "cpu_architecture": "cpuArchitecture",
    }
    advanced = {wire: params[key] for key, wire in advanced_keys.items() if params.get(key)}
    if advanced:
        updates["advancedOptions"] = advanced
    return updates


def session_path(ctx: click.Context) -> Path:
    from src.core.persistence.state_file import default_session_path

    return default_session_path(ctx.obj["root"])


def open_session(ctx: click.Context):  # type: ignore[no-untyped-def]
    from src.core.persistence.state_file import load_session

    return load_session(session_path(ctx), history_limit=ctx.obj["settings"].history_limit)


@click.group()
@click.version_option(version=__version__, prog_name="recoverysim")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to recoverysim.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Recovery Simulator — scripted, educational macOS recovery walkthroughs."""
    from src.core.config.loader import ConfigError, find_settings_file, load_settings

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    explicit = Path(config_path) if config_path else None
    try:
        settings = load_settings(explicit)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    found = explicit or find_settings_file()
    ctx.obj["settings"] = settings
    ctx.obj["config_path"] = found
    ctx.obj["root"] = found.parent.resolve() if found else Path.cwd()

    # ── Logging setup (once, at process start) ──────────────────
    level = resolve_level(
        debug=debug,
        verbose=verbose,
        quiet=quiet,
        env=os.environ,
        fallback=settings.log_level,
    )
    setup_logging(
        level=level,
        log_file=os.environ.get("RSIM_LOG_FILE"),
        log_file_level=os.environ.get("RSIM_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


@cli.command()
@config_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--no-record", is_flag=True, help="Don't add this run to the history.")
@click.pass_context
def simulate(ctx: click.Context, as_json: bool, no_record: bool, **params: Any) -> None:
    """Run a simulation. Unset flags keep the session's current values.

    Examples:

        recoverysim simulate --os-version Sonoma --scenario forgotten_password

        recoverysim simulate --scenario lost_admin --no-recovery-boot
    """
    from pydantic import ValidationError

    from src.core.engine.generator import generate_simulation
    from src.core.persistence.state_file import save_session

    session = open_session(ctx)
    try:
        config = session.update_config(build_updates(params))
    except ValidationError as e:
        click.secho(f"❌ Invalid configuration: {e}", fg="red")
        sys.exit(1)

    simulation = generate_simulation(config)
    if not no_record:
        session.record(simulation)
    save_session(session, session_path(ctx))

    if as_json:
        click.echo(json.dumps(simulation.to_dict(), indent=2, ensure_ascii=False))
        return

    if not ctx.obj.get("quiet"):
        click.secho(f"\n🖥  macOS {config.os_version} — {config.scenario}", fg="cyan", bold=True)
        click.secho("   SIMULATION ONLY — no real system access", fg="yellow")
        click.echo()

    for step in simulation.steps:
        icon, color = _CATEGORY_STYLE.get(step.category, ("•", "white"))
        click.secho(f"   {icon} ", fg=color, nl=False)
        click.echo(f"[{step.command}] {step.output}")
        if ctx.obj.get("verbose"):
            click.echo(f"     │ {step.explanation}")

    click.echo()
    click.secho(
        f"   Result: {simulation.result.upper()} — {simulation.message}",
        fg=_RESULT_COLORS.get(simulation.result, "white"),
        bold=True,
    )
    meta = simulation.metadata
    click.echo(f"   {meta.total_steps} steps, ~{meta.estimated_time_ms / 1000:.1f}s playback")
    click.echo()


@cli.command()
@config_options
@click.option("--result", type=click.Choice(["success", "partial", "warning", "error"]), default=None,
              help="Result to write instructions for (default: last run).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def instructions(ctx: click.Context, result: str | None, as_json: bool, **params: Any) -> None:
    """Show follow-up instructions for a run."""
    from src.core.services.instructions import build_instructions

    session = open_session(ctx)
    config = session.update_config(build_updates(params))
    if result is None:
        result = session.history[0].result if session.history else "success"

    guide = build_instructions(
        scenario=config.scenario,
        result=result,
        os_version=config.os_version,
        options=config.options,
    )

    if as_json:
        click.echo(json.dumps(guide.to_dict(), indent=2, ensure_ascii=False))
        return

    click.secho(f"\n📋 {guide.title}", fg="cyan", bold=True)
    click.echo()
    for i, line in enumerate(guide.steps, 1):
        click.echo(f"   {i}. {line}")

    if guide.warnings:
        click.echo()
        for line in guide.warnings:
            click.secho(f"   {line}", fg="yellow")

    click.echo()
    for line in guide.tips:
        click.echo(f"   {line}")
    click.echo()


@cli.command()
@config_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def preflight(ctx: click.Context, as_json: bool, **params: Any) -> None:
    """Check a configuration for conflicts before running it."""
    from src.core.services.advisor import preflight as run_preflight
    from src.core.services.advisor import system_status

    session = open_session(ctx)
    config = session.update_config(build_updates(params))
    warnings = run_preflight(config)
    status = system_status(config)

    if as_json:
        click.echo(json.dumps({
            "warnings": [w.to_dict() for w in warnings],
            "status": status.to_dict(),
        }, indent=2))
        return

    ready = "ready" if status.is_ready else "not ready"
    click.secho(
        f"\n🔍 {config.scenario} on macOS {config.os_version} — {ready}",
        fg="green" if status.is_ready else "yellow",
        bold=True,
    )
    click.echo(f"   Security: {status.security_status}")
    click.echo()

    if not warnings:
        click.secho("   ✅ No conflicts found", fg="green")
    for w in warnings:
        color = "red" if w.level == "error" else "yellow"
        click.secho(f"   • {w.message}", fg=color)
        if w.suggestion:
            click.echo(f"     → {w.suggestion}")
    click.echo()


@cli.command()
@click.pass_context
def catalog(ctx: click.Context) -> None:
    """Print valid configuration values and defaults as JSON."""
    from src.core.services.catalog import simulation_catalog

    click.echo(json.dumps(simulation_catalog(), indent=2))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def health(ctx: click.Context, as_json: bool) -> None:
    "Show engine health — rule table and reference run."
    from src.core.observability.health import check_system_health

    system_health = check_system_health()

    if as_json:
        click.echo(json.dumps(system_health.to_dict(), indent=2))
        return

    status_icons = {
        "healthy": ("💚", "green"),
        "degraded": ("🟡", "yellow"),
        "unhealthy": ("🔴", "red"),
        "unknown": ("❔", "white"),
    }
    icon, color = status_icons.get(system_health.status, ("❔", "white"))

    click.echo()
    click.secho(f"{icon} System Health: {system_health.status.upper()}", fg=color, bold=True)
    click.echo(f"   {system_health.timestamp}")
    click.echo()

    for component in system_health.components:
        c_icon, c_color = status_icons.get(component.status, ("❔", "white"))
        click.secho(f"   {c_icon} {component.name}", fg=c_color, bold=True)
        click.echo(f"      {component.message}")

        if ctx.obj.get("verbose") and component.details:
            for key, val in component.details.items():
                click.echo(f"      {key}: {val}")

    if system_health.status == "unhealthy":
        sys.exit(1)
    click.echo()


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings).")
@click.option("--port", "-p", default=None, type=int, help="Port number (default: settings).")
@click.pass_context
def web(ctx: click.Context, host: str | None, port: int | None) -> None:
    "Start the simulator API server."
    from src.ui.web.server import create_app, run_server

    settings = ctx.obj["settings"]
    overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    app = create_app(settings)
    debug = ctx.obj.get("debug", False)

    click.echo()
    click.secho("⚡ macOS Recovery Simulator — API", bold=True)
    click.echo(f"   Listening:   http://{settings.host}:{settings.port}")
    click.echo(f"   Environment: {settings.environment}")
    click.secho("   EDUCATIONAL SIMULATION ONLY", fg="yellow")
    click.echo()

    run_server(app, host=settings.host, port=settings.port, debug=debug)


# ── Register sub-command groups from src/ui/cli/ ──────────────────

from src.ui.cli.history import history

cli.add_command(history)


if __name__ == "__main__":
    cli()
