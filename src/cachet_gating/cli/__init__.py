# src/cachet_gating/cli/__init__.py
# CLI package for cachet-gating.
"""
CLI module providing the `cachet-gate` command-line interface.

Commands:
- cachet-gate init: Write a local config file
- cachet-gate resources list/show: Inspect resource statuses
- cachet-gate gate run/report: Gate on resources and inspect reports
"""

from cachet_gating.cli.main import app

__all__ = ["app"]
