#!/usr/bin/env python3
"""
CLI tool for teamctl
Plans and applies GitHub team configuration from YAML/JSON files
"""

import asyncio
import json
import logging
import sys

import click
import yaml
from tabulate import tabulate

from config import get_config
from controller import Controller
from plugins.base import UNKNOWN, PlanAction
from plugins.provider import Provider
from plugins.registry import get_registry, register_builtin_resources
from state import StateStore, load_desired_resources

ACTION_SYMBOLS = {
    PlanAction.CREATE: "+",
    PlanAction.UPDATE: "~",
    PlanAction.DELETE: "-",
    PlanAction.NOOP: " ",
}


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def build_controller(state: StateStore) -> Controller:
    """Register resources, resolve the owner and wire up a controller."""
    cfg = get_config()
    register_builtin_resources()
    provider = Provider.from_config(cfg)
    await provider.configure()
    return Controller(provider, state, parallelism=cfg.cli.parallelism)


def _load_state(ctx) -> StateStore:
    state = StateStore(ctx.obj["state_file"])
    state.load()
    return state


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _echo_results(results) -> bool:
    """Print a results table and return whether everything succeeded."""
    rows = [
        [
            ACTION_SYMBOLS[r.action],
            r.name,
            r.resource_id or "-",
            "✓" if r.success else "✗",
            r.message,
        ]
        for r in results
    ]
    if rows:
        headers = ["", "Name", "ID", "OK", "Message"]
        click.echo(tabulate(rows, headers=headers, tablefmt="grid"))
    else:
        click.echo("Nothing to do")
    return all(r.success for r in results)


@click.group()
@click.option(
    "--state",
    "state_file",
    default=None,
    help="Path to the state file (default: TEAMCTL_STATE_FILE or teamctl.state.json)",
)
@click.option("--log-level", default=None, help="Logging level (default: LOG_LEVEL)")
@click.pass_context
def cli(ctx, state_file, log_level):
    """teamctl - declarative GitHub team management"""
    cfg = get_config()
    setup_logging(log_level or cfg.cli.log_level)
    ctx.ensure_object(dict)
    ctx.obj["state_file"] = state_file or cfg.cli.state_file


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def plan(ctx, filename):
    """Show what apply would change"""
    try:
        desired = load_desired_resources(filename)
        state = _load_state(ctx)

        async def run():
            controller = await build_controller(state)
            return await controller.plan(desired)

        plans = asyncio.run(run())
    except Exception as e:
        _fail(str(e))
        return

    changed = 0
    for name, result in sorted(plans.items()):
        if not result.has_changes:
            continue
        changed += 1
        click.echo(f"{ACTION_SYMBOLS[result.action]} {name} ({result.action.value})")
        for key, (old, new) in sorted(result.changes.items()):
            click.echo(f"    {key}: {json.dumps(old)} => {json.dumps(new)}")
        for key in result.unknown:
            click.echo(f"    {key}: {UNKNOWN}")

    if not changed:
        click.echo("No changes. GitHub matches the configuration.")
    else:
        click.echo(f"\nPlan: {changed} resource(s) to change.")


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def apply(ctx, filename):
    """Apply a configuration file"""
    try:
        desired = load_desired_resources(filename)
        state = _load_state(ctx)

        async def run():
            controller = await build_controller(state)
            return await controller.apply(desired)

        results = asyncio.run(run())
    except Exception as e:
        _fail(str(e))
        return

    state.save()
    if not _echo_results(results):
        sys.exit(1)


@cli.command()
@click.pass_context
def refresh(ctx):
    """Re-read every managed resource from GitHub"""
    try:
        state = _load_state(ctx)

        async def run():
            controller = await build_controller(state)
            return await controller.refresh()

        results = asyncio.run(run())
    except Exception as e:
        _fail(str(e))
        return

    state.save()
    if not _echo_results(results):
        sys.exit(1)


@cli.command()
@click.option("--name", "-n", "names", multiple=True, help="Only destroy these")
@click.confirmation_option(prompt="Are you sure you want to destroy these resources?")
@click.pass_context
def destroy(ctx, names):
    """Delete managed resources from GitHub"""
    try:
        state = _load_state(ctx)

        async def run():
            controller = await build_controller(state)
            return await controller.destroy(list(names) or None)

        results = asyncio.run(run())
    except Exception as e:
        _fail(str(e))
        return

    state.save()
    if not _echo_results(results):
        sys.exit(1)


@cli.command("import")
@click.argument("name")
@click.argument("resource_id")
@click.option("--type", "type_name", default="github_team", show_default=True)
@click.pass_context
def import_(ctx, name, resource_id, type_name):
    """Adopt an existing GitHub object into state"""
    try:
        state = _load_state(ctx)

        async def run():
            controller = await build_controller(state)
            return await controller.import_resource(name, type_name, resource_id)

        d = asyncio.run(run())
    except Exception as e:
        _fail(str(e))
        return

    state.save()
    click.echo(f"Imported {type_name} '{name}' (id {d.id})")


@cli.command()
@click.option(
    "--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table"
)
@click.pass_context
def show(ctx, output):
    """Show managed resources from the state file"""
    state = _load_state(ctx)
    resources = state.list()

    if output == "json":
        click.echo(json.dumps({r.name: r.to_dict() for r in resources}, indent=2))
    elif output == "yaml":
        click.echo(
            yaml.dump(
                {r.name: r.to_dict() for r in resources}, default_flow_style=False
            )
        )
    else:
        rows = [
            [
                r.name,
                r.type_name,
                r.resource_id,
                r.attributes.get("slug", ""),
                r.attributes.get("privacy", ""),
            ]
            for r in resources
        ]
        headers = ["Name", "Type", "ID", "Slug", "Privacy"]
        click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


@cli.command("types")
def list_types():
    """List available resource types"""
    register_builtin_resources()
    registry = get_registry()

    rows = []
    for type_name in registry.list_resource_plugins():
        info = registry.get_resource_plugin_info(type_name)
        rows.append(
            [type_name, ", ".join(info["fields"]), ", ".join(info["computed"])]
        )
    headers = ["Type", "Fields", "Computed"]
    click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


if __name__ == "__main__":
    cli()
