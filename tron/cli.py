"""Tron CLI: keep dotfiles in sync between the repository and the system."""

import json
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from tron import __version__
from tron.sync_engine.diff import DiffTag
from tron.sync_engine.executor import BatchResult, Direction, SyncAction
from tron.utils.logger import get_logger, setup_logging

console = Console()
logger = get_logger(__name__)

OUTCOME_ICONS = {
    SyncAction.COPIED: "[green]✓[/]",
    SyncAction.ALREADY_SYNCED: "[white]·[/]",
    SyncAction.SOURCE_MISSING: "[red]✗[/]",
    SyncAction.DESTINATION_NEWER: "[yellow]![/]",
    SyncAction.FAILED: "[red]✗[/]",
}

DIFF_STYLES = {
    DiffTag.DELETE: "red",
    DiffTag.INSERT: "green",
    DiffTag.EQUAL: "white",
}


def _fail(ctx: click.Context, message: str):
    console.print(f"[red]Error:[/] {escape(message)}")
    ctx.exit(1)


def _orchestrator(ctx: click.Context):
    """Load the configuration and build the orchestrator, exiting on failure."""
    from tron.config.config_loader import ConfigLoader
    from tron.core.orchestrator import Orchestrator

    options = ctx.obj
    try:
        config = ConfigLoader(options["config"]).load()
    except (FileNotFoundError, ValueError) as e:
        _fail(ctx, str(e))

    setup_logging(
        log_level="DEBUG" if options["verbose"] else config.logging.level,
        log_file=options["log_file"] or config.logging.file,
        json_format=options["log_json"] or config.logging.json_format,
        log_rotation_size=config.logging.rotation_size,
        log_retention_count=config.logging.retention_count,
    )
    return Orchestrator(config)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Path to tron.yaml config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--log-file", default=None, help="Also write logs to this file")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool, log_file: Optional[str], log_json: bool):
    """Tron: dotfiles and config manager.

    Tracks config files that live both in a dotfiles repository and on
    the system, and copies them in either direction.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(config=config_path, verbose=verbose, log_file=log_file, log_json=log_json)
    setup_logging(log_level="DEBUG" if verbose else "WARNING", log_file=log_file, json_format=log_json)


# ── Status ───────────────────────────────────────────────────────────


@main.command()
@click.option("--category", "-c", default=None, help="Filter by category")
@click.option("--outdated", "-o", is_flag=True, help="Show only out-of-sync configs")
@click.pass_context
def status(ctx: click.Context, category: Optional[str], outdated: bool):
    """Show sync status of all configs."""
    report = _orchestrator(ctx).status_report(category=category, outdated=outdated)

    if not report.rows:
        if outdated and report.total:
            console.print("[green]All configs are in sync![/]")
        else:
            console.print("[yellow]No configs found.[/]")
        return

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Status")

    for config, sync_status in report.rows:
        table.add_row(
            escape(config.name),
            escape(config.category),
            Text(sync_status.label, style=sync_status.style),
        )

    console.print(table)
    console.print(f"\n[green]{report.synced}[/]/{report.total} configs in sync")


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
@click.option("--category", "-c", default=None, help="Filter by category")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_configs(ctx: click.Context, category: Optional[str], as_json: bool):
    """List all managed configs."""
    orchestrator = _orchestrator(ctx)
    entries = orchestrator.list_entries(category)

    if as_json:
        click.echo(json.dumps(orchestrator.as_json(entries), indent=2))
        return

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Repo Path")
    table.add_column("System Path")

    for entry in entries:
        table.add_row(
            escape(entry.name),
            escape(entry.category),
            escape(str(entry.repo_path)[:40]),
            escape(str(entry.system_path)[:40]),
        )

    console.print(table)
    console.print(f"\n[cyan]{len(entries)}[/] configs")


# ── Deploy / Backup ──────────────────────────────────────────────────


def _print_batch(ctx: click.Context, result: BatchResult):
    if not result.outcomes:
        console.print("[yellow]No configs matched.[/]")
        return

    for outcome in result.outcomes:
        if outcome.action == SyncAction.WOULD_COPY:
            arrow = "→" if outcome.direction == Direction.DEPLOY else "←"
            icon = f"[cyan]{arrow}[/]"
        else:
            icon = OUTCOME_ICONS[outcome.action]
        console.print(f"{icon} {escape(outcome.message)}")

    if result.dry_run:
        console.print("\n[yellow](dry run - no files changed)[/]")

    if result.has_failures:
        console.print(f"\n[red]{result.summary()}[/]")
        ctx.exit(1)


@main.command()
@click.argument("names", nargs=-1)
@click.option("--category", "-c", default=None, help="Deploy entire category")
@click.option("--dry-run", "-d", is_flag=True, help="Show what would be deployed")
@click.option("--force", "-f", is_flag=True, help="Overwrite even if the system file is newer")
@click.pass_context
def deploy(ctx: click.Context, names: tuple, category: Optional[str], dry_run: bool, force: bool):
    """Deploy configs from repo to system.

    NAMES are the configs to deploy; omit them to deploy everything
    (or the whole --category).
    """
    result = _orchestrator(ctx).deploy(list(names), category, dry_run=dry_run, force=force)
    _print_batch(ctx, result)


@main.command()
@click.argument("names", nargs=-1)
@click.option("--category", "-c", default=None, help="Back up entire category")
@click.option("--dry-run", "-d", is_flag=True, help="Show what would be backed up")
@click.option("--force", "-f", is_flag=True, help="Overwrite even if the repo file is newer")
@click.pass_context
def backup(ctx: click.Context, names: tuple, category: Optional[str], dry_run: bool, force: bool):
    """Back up configs from system to repo.

    NAMES are the configs to back up; omit them to back up everything
    (or the whole --category).
    """
    result = _orchestrator(ctx).backup(list(names), category, dry_run=dry_run, force=force)
    _print_batch(ctx, result)


# ── Diff ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option("--reverse", "-r", is_flag=True, help="Show repo -> system instead of system -> repo")
@click.pass_context
def diff(ctx: click.Context, name: str, reverse: bool):
    """Show diff between the system and repo copies of a config."""
    orchestrator = _orchestrator(ctx)
    try:
        result = orchestrator.diff(name, reverse=reverse)
    except ValueError as e:
        _fail(ctx, str(e))

    if result.identical:
        console.print("[green]Files are identical.[/]")
        return

    header = Text()
    header.append("Diff: ", style="bold cyan")
    header.append(f"{result.left_path} ({result.left_label})", style="red")
    header.append(" vs ")
    header.append(f"{result.right_path} ({result.right_label})", style="green")
    console.print(header)
    console.print()

    for line in result.lines():
        console.print(Text(line.rendered, style=DIFF_STYLES[line.tag]))


# ── Show / Edit ──────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str):
    """Show config paths, status and sizes."""
    orchestrator = _orchestrator(ctx)
    try:
        details = orchestrator.show(name)
    except ValueError as e:
        _fail(ctx, str(e))

    config = details.config
    console.print(f"[cyan]Name[/]: {escape(config.name)}")
    console.print(f"[cyan]Category[/]: {escape(config.category)}")
    console.print(f"[cyan]Repo[/]: {escape(str(config.repo_path))}")
    console.print(f"[cyan]System[/]: {escape(str(config.system_path))}")
    console.print(
        Text.assemble(("Status", "cyan"), ": ", (details.status.label, details.status.style))
    )
    if details.repo_size is not None:
        console.print(f"[cyan]Repo Size[/]: {details.repo_size} bytes")
    if details.system_size is not None:
        console.print(f"[cyan]System Size[/]: {details.system_size} bytes")


@main.command()
@click.argument("name")
@click.option("--system", "-s", is_flag=True, help="Edit the system file instead of the repo file")
@click.pass_context
def edit(ctx: click.Context, name: str, system: bool):
    """Open a config file in $EDITOR."""
    orchestrator = _orchestrator(ctx)
    try:
        config = orchestrator.find(name)
    except ValueError as e:
        _fail(ctx, str(e))

    path = config.system_path if system else config.repo_path
    if not orchestrator.fs.exists(path):
        _fail(ctx, f"File does not exist: {path}")

    logger.debug(f"Opening {path} in editor")
    click.edit(filename=str(path))


# ── Categories ───────────────────────────────────────────────────────


@main.command()
@click.pass_context
def categories(ctx: click.Context):
    """Show categories."""
    orchestrator = _orchestrator(ctx)

    console.print("[bold cyan]Categories:[/]")
    for category, count in orchestrator.categories():
        console.print(f"  {escape(category)} ({count})")


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--repo", "-r", default=None, type=click.Path(file_okay=False),
              help="Path to dotfiles repo")
def init(repo: Optional[str]):
    """Initialize tron.yaml in the dotfiles repo."""
    from tron.config.config_loader import ConfigLoader

    created, config_path = ConfigLoader.init_repo(repo)
    if created:
        console.print(f"[green]✓[/] Created {escape(str(config_path))}")
    else:
        console.print(f"[yellow]![/] {escape(str(config_path))} already exists")


if __name__ == "__main__":
    main()
