# src/cachet_gating/gates/__init__.py
"""
Gating Module.

Blocks a build until the Cachet resources it depends on are operational:
- GatingEngine polls a ResourceRegistry until every resource is satisfied,
  the deadline passes, or the caller cancels
- GatingReport records per-resource wait metrics
- ReportGenerator writes the report as JSON/HTML artifacts
"""

from cachet_gating.gates.models import (
    GatingMetrics,
    GatingReport,
    GatingStatus,
)
from cachet_gating.gates.engine import GateOptions, GatingEngine
from cachet_gating.gates.reporter import ReportGenerator

__all__ = [
    "GateOptions",
    "GatingEngine",
    "GatingMetrics",
    "GatingReport",
    "GatingStatus",
    "ReportGenerator",
]
