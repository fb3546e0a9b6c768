"""
CLI commands for the run history.

Thin wrappers over ``src.core.models.session`` and the session file.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


def _session_path(ctx: click.Context) -> Path:
    """Resolve the session file from the context root or CWD."""
    from src.core.persistence.state_file import default_session_path

    root: Path | None = ctx.obj.get("root")
    return default_session_path(root or Path.cwd())


def _load(ctx: click.Context):  # type: ignore[no-untyped-def]
    from src.core.persistence.state_file import load_session

    settings = ctx.obj.get("settings")
    limit = settings.history_limit if settings is not None else None
    return load_session(_session_path(ctx), history_limit=limit)


@click.group()
def history() -> None:
    """History — the last few simulation runs."""


@history.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_entries(ctx: click.Context, as_json: bool) -> None:
    """List recent runs, newest first."""
    session = _load(ctx)

    if as_json:
        click.echo(json.dumps(
            [e.model_dump(mode="json", by_alias=True) for e in session.history],
            indent=2,
        ))
        return

    if not session.history:
        click.secho("No runs recorded yet.", fg="yellow")
        return

    colors = {"success": "green", "partial": "yellow", "warning": "yellow", "error": "red"}
    click.echo()
    for entry in session.history:
        cfg = entry.config
        click.secho(f"   #{entry.id} ", bold=True, nl=False)
        click.secho(f"{entry.result:<8}", fg=colors.get(entry.result, "white"), nl=False)
        click.echo(f" {cfg.scenario} on {cfg.os_version} ({entry.steps_count} steps)  {entry.timestamp}")
    click.echo()


@history.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show(ctx: click.Context, entry_id: int) -> None:
    """Print one run's configuration snapshot as JSON."""
    entry = _load(ctx).get_entry(entry_id)
    if entry is None:
        click.secho(f"❌ No history entry #{entry_id}", fg="red")
        sys.exit(1)
    click.echo(json.dumps(entry.model_dump(mode="json", by_alias=True), indent=2))


@history.command("restore")
@click.argument("entry_id", type=int)
@click.pass_context
def restore(ctx: click.Context, entry_id: int) -> None:
    """Make a past run's configuration the current one."""
    from src.core.persistence.state_file import save_session

    session = _load(ctx)
    config = session.restore(entry_id)
    if config is None:
        click.secho(f"❌ No history entry #{entry_id}", fg="red")
        sys.exit(1)

    save_session(session, _session_path(ctx))
    click.secho(f"✅ Restored #{entry_id}: {config.scenario} on {config.os_version}", fg="green")


@history.command("clear")
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Forget all recorded runs."""
    from src.core.persistence.state_file import save_session

    session = _load(ctx)
    count = len(session.history)
    session.clear_history()
    save_session(session, _session_path(ctx))
    click.secho(f"🗑  Cleared {count} run(s)", fg="cyan")
