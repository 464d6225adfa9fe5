# src/cachet_gating/__init__.py
# Main package init - exports public API for cachet-gating.

"""
cachet-gating: hold build pipelines until the external services they depend on
(build systems, code-review hosts, clouds) report OPERATIONAL on a Cachet
status page.

Library usage:
    registry = ResourceRegistry(sources=[SourceConfig(base_url="https://status.example.com")])
    registry.start()
    report = GatingEngine(registry).gate(["brew"], GateOptions(max_wait=600))
    report.raise_for_status()

CLI Usage:
    cachet-gate init                         # Write a sample config
    cachet-gate resources list               # Show current statuses
    cachet-gate gate run brew errata         # Block until both are operational
    cachet-gate gate report                  # Show the latest gating report
"""

from cachet_gating.models import Resource, ResourceStatus, SourceConfig, parse_status
from cachet_gating.errors import (
    CachetGatingError,
    FetchError,
    GateCancelledError,
    GateFailedError,
    GateTimeoutError,
)
from cachet_gating.source import fetch_snapshot
from cachet_gating.registry import ResourceRegistry, ResourceSnapshot, SourceFailurePolicy
from cachet_gating.gates import (
    GateOptions,
    GatingEngine,
    GatingMetrics,
    GatingReport,
    GatingStatus,
    ReportGenerator,
)
from cachet_gating.core.config import GatingConfig, load_config

__version__ = "0.1.0"
__all__ = [
    # Models
    "Resource",
    "ResourceStatus",
    "SourceConfig",
    "parse_status",
    # Errors
    "CachetGatingError",
    "FetchError",
    "GateCancelledError",
    "GateFailedError",
    "GateTimeoutError",
    # Sources and registry
    "fetch_snapshot",
    "ResourceRegistry",
    "ResourceSnapshot",
    "SourceFailurePolicy",
    # Gating
    "GateOptions",
    "GatingEngine",
    "GatingMetrics",
    "GatingReport",
    "GatingStatus",
    "ReportGenerator",
    # Configuration
    "GatingConfig",
    "load_config",
]
