# src/cachet_gating/cli/commands/init.py
# Implementation of `cachet-gate init` command.
"""
Creates a local configuration file (.cachet-gate.yaml).

The config file stores:
- Cachet sources
- Registry refresh cadence and failure policy
- Default gating policy
- Report directory
"""

from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel

from cachet_gating.core.config import CONFIG_FILENAME, GatingConfig
from cachet_gating.models import SourceConfig

console = Console()


def init_command(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
    path: Path = typer.Option(
        Path(CONFIG_FILENAME), "--path", "-p", help="Config file path"
    ),
    source: Optional[list[str]] = typer.Option(
        None, "--source", "-s", help="Cachet base URL (repeatable)"
    ),
    token: str = typer.Option("", "--token", help="X-Cachet-Token for the sources"),
    max_wait: Optional[float] = typer.Option(
        None, "--max-wait", "-w", help="Default maximum gating wait in seconds"
    ),
) -> None:
    """Write a cachet-gating configuration file."""

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        console.print("Use --force to overwrite")
        raise typer.Exit(1)

    urls = source or ["https://status.example.com"]
    config = GatingConfig(
        sources=[SourceConfig(base_url=url, auth_token=token) for url in urls],
        max_wait=max_wait,
    )

    config_dict = config.model_dump(mode="json")
    with open(path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    console.print(Panel(
        "\n".join(f"[bold]Source:[/bold] {s.base_url}" for s in config.sources)
        + f"\n[bold]Refresh:[/bold] every {config.refresh_interval:.0f}s"
        + f"\n[bold]Max wait:[/bold] {'forever' if config.max_wait is None else f'{config.max_wait:.0f}s'}",
        title="Configuration",
    ))
    console.print(f"\n[green]✓ Created config at {path}[/green]")

    console.print("\n[bold]Next steps:[/bold]")
    console.print("  1. Run [cyan]cachet-gate resources list[/cyan] to check the sources")
    console.print("  2. Run [cyan]cachet-gate gate run <name>[/cyan] to gate on a resource")
