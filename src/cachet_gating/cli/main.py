# src/cachet_gating/cli/main.py
# Main CLI entrypoint for cachet-gating.
"""
Main Typer application with all sub-commands.

Usage:
    cachet-gate init                         # Write a config file
    cachet-gate resources list               # List resource statuses
    cachet-gate resources show brew errata   # Show specific resources
    cachet-gate gate run brew                # Block until brew is operational
    cachet-gate gate report                  # Show latest gating report
"""

import logging

import typer
from rich.console import Console

from cachet_gating import __version__
from cachet_gating.cli.commands import gate, init, resources

app = typer.Typer(
    name="cachet-gate",
    help="cachet-gate - hold pipelines until Cachet resources are operational",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

app.add_typer(resources.app, name="resources", help="Inspect resource statuses")
app.add_typer(gate.app, name="gate", help="Gate on resource status and inspect reports")
app.command("init")(init.init_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """cachet-gate CLI."""
    if version:
        console.print(f"[bold]cachet-gate[/bold] version {__version__}")
        raise typer.Exit()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


if __name__ == "__main__":
    app()
