# src/cachet_gating/cli/commands/resources.py
# Implementation of `cachet-gate resources` commands.
"""
Commands for inspecting resource statuses:
- list: Refresh from all sources and show every known resource
- show: Show the status of specific resources (unknown names are UNKNOWN)
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cachet_gating.core.config import resolve_config
from cachet_gating.models import Resource, ResourceStatus
from cachet_gating.registry import ResourceRegistry

app = typer.Typer(help="Inspect resource statuses")
console = Console()

STATUS_STYLES = {
    ResourceStatus.OPERATIONAL: "green",
    ResourceStatus.PERFORMANCE_ISSUES: "yellow",
    ResourceStatus.PARTIAL_OUTAGE: "dark_orange",
    ResourceStatus.MAJOR_OUTAGE: "red bold",
    ResourceStatus.UNKNOWN: "dim",
}


def status_markup(status: ResourceStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def refreshed_registry(
    config_path: Optional[Path],
    sources: Optional[list[str]],
    token: str,
    insecure: bool,
) -> ResourceRegistry:
    """Build a registry from config/options and refresh it once."""
    config = resolve_config(config_path, sources, token, insecure)
    if not config.sources:
        console.print("[red]Error: no sources configured. Use --source or run 'cachet-gate init'.[/red]")
        raise typer.Exit(1)

    registry = config.build_registry()
    registry.refresh()
    for url, error in registry.source_errors.items():
        console.print(f"[yellow]Warning: {url}: {error.message}[/yellow]")
    return registry


def _print_resources(resources: list[Resource], title: str) -> None:
    table = Table(title=title)
    table.add_column("Resource", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Description")

    for resource in resources:
        table.add_row(
            resource.name,
            status_markup(resource.status_id),
            resource.description[:60] + "..." if len(resource.description) > 60 else resource.description,
        )

    console.print(table)


@app.command("list")
def list_resources(
    source: Optional[list[str]] = typer.Option(
        None, "--source", "-s", help="Cachet base URL (repeatable, overrides config)"
    ),
    token: str = typer.Option("", "--token", help="X-Cachet-Token for --source"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS verification for --source"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List every resource known to the configured sources."""
    registry = refreshed_registry(config_path, source, token, insecure)
    resources = list(registry)

    if json_output:
        print(json.dumps({r.name: r.status_id.name for r in resources}, indent=2))
        return

    if not resources:
        console.print("[yellow]No resources reported by any source.[/yellow]")
        return

    _print_resources(resources, "Resources")
    console.print(f"\n[dim]Total: {len(resources)} resources[/dim]")


@app.command("show")
def show_resources(
    names: list[str] = typer.Argument(..., help="Resource names"),
    source: Optional[list[str]] = typer.Option(
        None, "--source", "-s", help="Cachet base URL (repeatable, overrides config)"
    ),
    token: str = typer.Option("", "--token", help="X-Cachet-Token for --source"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS verification for --source"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the status of specific resources."""
    registry = refreshed_registry(config_path, source, token, insecure)
    resources = registry.get_resources(names)

    if json_output:
        print(json.dumps({n: r.status_id.name for n, r in resources.items()}, indent=2))
        return

    _print_resources(list(resources.values()), "Requested Resources")
