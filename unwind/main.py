"""
Unwind — CLI entrypoint.

Usage:
    python -m unwind.main --help
    python -m unwind.main plan
    python -m unwind.main install
    python -m unwind.main revert
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from unwind import __version__
from unwind.core.actions.errors import ActionError, DiscoveryError, TaskCrashedError
from unwind.core.config.loader import ConfigError, load_settings
from unwind.core.engine.plan import InstallPlan
from unwind.core.models.action import ActionDescription
from unwind.core.observability.logging_config import resolve_level, setup_logging
from unwind.core.persistence.plan_file import PlanFileError, load_plan, save_plan


@click.group()
@click.version_option(version=__version__, prog_name="unwind")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to unwind.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Unwind — apply and revert a Nix installation, step by step."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Helpers ──────────────────────────────────────────────────────


def _settings(ctx: click.Context):
    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _receipt_path(ctx: click.Context, receipt: str | None) -> Path:
    if receipt:
        return Path(receipt)
    return Path(_settings(ctx).receipt_path)


def _load_receipt(path: Path) -> InstallPlan | None:
    try:
        return load_plan(path)
    except PlanFileError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _echo_descriptions(header: str, descriptions: list[ActionDescription]) -> None:
    if not descriptions:
        click.secho(f"   {header}: nothing to do", fg="green")
        return
    click.secho(f"   {header}:", fg="white", bold=True)
    for description in descriptions:
        click.echo(f"     • {description.title}")
        for line in description.explanation:
            click.echo(f"         {line}")


def _fail(error: ActionError | TaskCrashedError, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps({"ok": False, "error": error.to_dict()}, indent=2))
    else:
        click.secho(f"❌ {error}", fg="red")
        if isinstance(error, TaskCrashedError):
            click.echo("   The engine failed to run an action. This is a bug, not a host problem.")
        elif isinstance(error, DiscoveryError):
            click.echo("   Nothing on this host was changed.")
        else:
            click.echo("   Fix the cause above and run the same command again to resume.")
    sys.exit(1)


# ── Commands ─────────────────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--out", "out_path", type=click.Path(), default=None, help="Write the plan to a file.")
@click.pass_context
def plan(ctx: click.Context, as_json: bool, out_path: str | None) -> None:
    """Discover the host and show what install would do (no changes)."""
    settings = _settings(ctx)
    try:
        install_plan = InstallPlan.plan(settings)
    except ActionError as e:
        _fail(e, as_json)
        return

    if out_path:
        save_plan(install_plan, Path(out_path))

    if as_json:
        click.echo(json.dumps(install_plan.to_dict(), indent=2))
        return

    click.secho(f"\n📋 Install plan (unwind {install_plan.version})", fg="cyan", bold=True)
    _echo_descriptions("Will execute", install_plan.describe_execute())
    if out_path:
        click.echo(f"\n   Saved to {out_path}")
    click.echo()


@cli.command()
@click.option("--receipt", default=None, help="Receipt path (default: from settings).")
@click.option("--dry-run", is_flag=True, help="Show pending steps without executing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, receipt: str | None, dry_run: bool, as_json: bool) -> None:
    """Execute the install, resuming a previous receipt if there is one."""
    path = _receipt_path(ctx, receipt)
    install_plan = _load_receipt(path)

    if install_plan is None:
        try:
            install_plan = InstallPlan.plan(_settings(ctx))
        except ActionError as e:
            _fail(e, as_json)
            return
    elif not ctx.obj.get("quiet"):
        click.echo(f"Resuming receipt {path}")

    if dry_run:
        _echo_descriptions("Would execute", install_plan.describe_execute())
        return

    try:
        install_plan.execute(on_progress=lambda p: save_plan(p, path))
    except (ActionError, TaskCrashedError) as e:
        save_plan(install_plan, path)
        _fail(e, as_json)
        return

    save_plan(install_plan, path)
    if as_json:
        click.echo(json.dumps({"ok": True, "receipt": str(path)}, indent=2))
    else:
        click.secho("✅ Install complete", fg="green", bold=True)
        click.echo(f"   Receipt: {path}")


@cli.command()
@click.option("--receipt", default=None, help="Receipt path (default: from settings).")
@click.option("--dry-run", is_flag=True, help="Show pending steps without reverting.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def revert(ctx: click.Context, receipt: str | None, dry_run: bool, as_json: bool) -> None:
    """Revert everything a receipt records as applied."""
    path = _receipt_path(ctx, receipt)
    install_plan = _load_receipt(path)
    if install_plan is None:
        click.secho(f"❌ No receipt at {path}", fg="red")
        sys.exit(1)

    if dry_run:
        _echo_descriptions("Would revert", install_plan.describe_revert())
        return

    try:
        install_plan.revert(on_progress=lambda p: save_plan(p, path))
    except (ActionError, TaskCrashedError) as e:
        save_plan(install_plan, path)
        _fail(e, as_json)
        return

    save_plan(install_plan, path)
    if as_json:
        click.echo(json.dumps({"ok": True, "receipt": str(path)}, indent=2))
    else:
        click.secho("✅ Revert complete", fg="green", bold=True)


@cli.command()
@click.option("--receipt", default=None, help="Receipt path (default: from settings).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, receipt: str | None, as_json: bool) -> None:
    """Show what a saved receipt still has to execute or could revert."""
    path = _receipt_path(ctx, receipt)
    install_plan = _load_receipt(path)
    if install_plan is None:
        click.secho(f"❌ No receipt at {path}", fg="red")
        sys.exit(1)

    pending = install_plan.describe_execute()
    revertible = install_plan.describe_revert()

    if as_json:
        click.echo(json.dumps({
            "receipt": str(path),
            "completed": install_plan.completed,
            "execute": [d.to_dict() for d in pending],
            "revert": [d.to_dict() for d in revertible],
        }, indent=2))
        return

    click.secho(f"\n📋 Receipt {path}", fg="cyan", bold=True)
    click.echo(f"   Planned at {install_plan.planned_at}")
    _echo_descriptions("Pending", pending)
    _echo_descriptions("Revertible", revertible)
    click.echo()


if __name__ == "__main__":
    cli()
