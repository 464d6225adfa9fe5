# src/cachet_gating/cli/commands/gate.py
"""
Commands for gating on resource status.

Usage:
    cachet-gate gate run brew errata             # Wait until both are operational
    cachet-gate gate run brew --max-wait 600     # Give up after 10 minutes
    cachet-gate gate report                      # Show latest report
"""

import json
import signal
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cachet_gating.cli.commands.resources import status_markup
from cachet_gating.core.config import resolve_config
from cachet_gating.gates.engine import GateOptions, GatingEngine
from cachet_gating.gates.models import GatingReport, GatingStatus
from cachet_gating.gates.reporter import ReportGenerator

app = typer.Typer(help="Gate on resource status and inspect reports")
console = Console()

EXIT_CANCELLED = 130


def _status_style(status: GatingStatus) -> str:
    """Get rich style for status."""
    return {
        GatingStatus.SATISFIED: "green",
        GatingStatus.NOT_GATED: "dim",
        GatingStatus.TIMED_OUT: "red",
        GatingStatus.CANCELLED: "yellow",
        GatingStatus.PENDING: "red bold",
    }.get(status, "white")


def _status_icon(status: GatingStatus) -> str:
    """Get icon for status."""
    return {
        GatingStatus.SATISFIED: "✓",
        GatingStatus.NOT_GATED: "−",
        GatingStatus.TIMED_OUT: "✗",
        GatingStatus.CANCELLED: "⚠",
    }.get(status, "?")


def _exit_code(report: GatingReport) -> int:
    if report.succeeded:
        return 0
    if report.status == GatingStatus.CANCELLED:
        return EXIT_CANCELLED
    return 1


def _print_report(report: GatingReport) -> None:
    table = Table(title="Gating Metrics")
    table.add_column("Resource", style="cyan", no_wrap=True)
    table.add_column("Gate")
    table.add_column("Initial")
    table.add_column("Final")
    table.add_column("Gated", justify="right")

    for name, metric in report.gating_metrics_map.items():
        style = _status_style(metric.gating_status)
        table.add_row(
            name,
            f"[{style}]{_status_icon(metric.gating_status)} {metric.gating_status.value}[/{style}]",
            status_markup(metric.initial_status) if metric.initial_status else "-",
            status_markup(metric.final_status) if metric.final_status else "-",
            f"{metric.gated_time_elapsed.total_seconds():.1f}s",
        )
    console.print(table)


@app.command("run")
def run_gate(
    names: list[str] = typer.Argument(..., help="Resources that must be operational"),
    max_wait: Optional[float] = typer.Option(
        None, "--max-wait", "-w", help="Give up after this many seconds (default: config, else forever)"
    ),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", "-i", help="Seconds between status checks"
    ),
    no_gating: bool = typer.Option(
        False, "--no-gating", help="Record statuses without waiting"
    ),
    source: Optional[list[str]] = typer.Option(
        None, "--source", "-s", help="Cachet base URL (repeatable, overrides config)"
    ),
    token: str = typer.Option("", "--token", help="X-Cachet-Token for --source"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS verification for --source"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory for reports"
    ),
    json_only: bool = typer.Option(
        False, "--json", help="Output JSON only, no console"
    ),
) -> None:
    """
    Block until every named resource is operational.

    Exit code is 0 when satisfied, 1 on timeout and 130 when interrupted.
    """
    config = resolve_config(config_path, source, token, insecure)
    if not config.sources:
        console.print("[red]Error: no sources configured. Use --source or run 'cachet-gate init'.[/red]")
        raise typer.Exit(1)

    options = config.gate_options(require_resources=not no_gating)
    updates = {}
    if max_wait is not None:
        updates["max_wait"] = max_wait
    if poll_interval is not None:
        updates["poll_interval"] = poll_interval
    if updates:
        options = GateOptions.model_validate({**options.model_dump(), **updates})

    if not json_only:
        console.print(Panel(
            f"[bold]Gating on {', '.join(names)}[/bold]\n"
            f"Sources: {', '.join(str(s) for s in config.sources)}\n"
            f"Poll interval: {options.poll_interval:.0f}s, "
            f"max wait: {'forever' if options.max_wait is None else f'{options.max_wait:.0f}s'}",
            title="Cachet Gating",
        ))

    def progress(line: str) -> None:
        if not json_only:
            console.print(line, markup=False, highlight=False)

    cancel = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    registry = config.build_registry()
    try:
        registry.start()
        report = GatingEngine(registry).gate(names, options, cancel_event=cancel, log=progress)
    finally:
        registry.stop()
        signal.signal(signal.SIGINT, previous_handler)

    reporter = ReportGenerator(output_dir=output_dir or config.report_dir)
    json_path, html_path = reporter.save_all(report)

    if json_only:
        print(json.dumps(report.to_dict(), indent=2))
        raise typer.Exit(_exit_code(report))

    console.print()
    _print_report(report)

    style = _status_style(report.status)
    console.print(Panel(
        f"[{style} bold]{_status_icon(report.status)} {report.status.value.upper()}[/{style} bold]\n\n"
        f"Duration: {report.total_duration_ms / 1000:.1f}s\n\n"
        f"Reports saved:\n"
        f"  JSON: {json_path}\n"
        f"  HTML: {html_path}",
        title="Gating Result",
    ))

    raise typer.Exit(_exit_code(report))


@app.command("report")
def show_report(
    output_dir: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Reports directory"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output as JSON"
    ),
) -> None:
    """Show the latest gating report."""
    reporter = ReportGenerator(output_dir=output_dir)
    data = reporter.load_latest()

    if data is None:
        console.print("[yellow]No reports found. Run 'cachet-gate gate run <name>' first.[/yellow]")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(data, indent=2))
        return

    status = data.get("status", "unknown")
    summary = data.get("summary", {})
    try:
        style = _status_style(GatingStatus(status))
    except ValueError:
        style = "white"

    console.print(Panel(
        f"[{style} bold]{status.upper()}[/{style} bold]\n\n"
        f"Timestamp: {data.get('timestamp', 'unknown')}\n"
        f"Resources: {summary.get('satisfied', 0)} satisfied, {summary.get('timed_out', 0)} timed out\n"
        f"Duration: {summary.get('total_duration_ms', 0) / 1000:.1f}s\n\n"
        f"HTML Report: {reporter.output_dir / 'latest.html'}",
        title="Latest Gating Report",
    ))

    for name, metric in data.get("resources", {}).items():
        console.print(
            f"  ● {name}: {metric.get('gating_status')} "
            f"({metric.get('initial_status')} → {metric.get('final_status')}, "
            f"{metric.get('gated_time_elapsed_ms', 0) / 1000:.1f}s)",
            markup=False,
        )
