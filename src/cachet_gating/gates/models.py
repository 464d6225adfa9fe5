# src/cachet_gating/gates/models.py
"""
Data models for gating results.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from cachet_gating.errors import GateCancelledError, GateTimeoutError
from cachet_gating.models import ResourceStatus


class GatingStatus(str, Enum):
    """State of a gate, per resource or overall."""
    PENDING = "pending"
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    NOT_GATED = "not_gated"

    @property
    def is_final(self) -> bool:
        return self is not GatingStatus.PENDING

    @property
    def is_success(self) -> bool:
        return self in (GatingStatus.SATISFIED, GatingStatus.NOT_GATED)


@dataclass(frozen=True)
class GatingMetrics:
    """Wait outcome for one required resource."""
    name: str
    gate_start: datetime
    initial_status: Optional[ResourceStatus] = None
    final_status: Optional[ResourceStatus] = None
    gating_status: GatingStatus = GatingStatus.PENDING
    gate_end: Optional[datetime] = None
    gated_time_elapsed_ms: int = 0

    @property
    def timed_out(self) -> bool:
        return self.gating_status == GatingStatus.TIMED_OUT

    @property
    def gated_time_elapsed(self) -> timedelta:
        return timedelta(milliseconds=self.gated_time_elapsed_ms)

    def finalize(
        self,
        status: GatingStatus,
        resource_status: ResourceStatus,
        elapsed_ms: int,
        at: datetime,
    ) -> "GatingMetrics":
        """Return a copy in a terminal state. Already final metrics are returned as-is."""
        if self.gating_status.is_final:
            return self
        return replace(
            self,
            gating_status=status,
            final_status=resource_status,
            gated_time_elapsed_ms=max(0, elapsed_ms),
            gate_end=at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "gating_status": self.gating_status.value,
            "initial_status": self.initial_status.name if self.initial_status else None,
            "final_status": self.final_status.name if self.final_status else None,
            "gate_start": self.gate_start.isoformat(),
            "gate_end": self.gate_end.isoformat() if self.gate_end else None,
            "gated_time_elapsed_ms": self.gated_time_elapsed_ms,
            "timed_out": self.timed_out,
        }


@dataclass(frozen=True)
class GatingReport:
    """Outcome of one gate() call. Read-only once returned."""
    timestamp: datetime
    status: GatingStatus
    metrics: Mapping[str, GatingMetrics] = field(
        default_factory=lambda: MappingProxyType({})
    )
    total_duration_ms: float = 0.0
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def gating_metrics_map(self) -> Mapping[str, GatingMetrics]:
        return self.metrics

    @property
    def succeeded(self) -> bool:
        return self.status.is_success

    @property
    def satisfied_names(self) -> list[str]:
        return [n for n, m in self.metrics.items() if m.gating_status == GatingStatus.SATISFIED]

    @property
    def timed_out_names(self) -> list[str]:
        return [n for n, m in self.metrics.items() if m.timed_out]

    def raise_for_status(self) -> None:
        """Raise GateTimeoutError or GateCancelledError if the gate failed."""
        if self.status == GatingStatus.TIMED_OUT:
            raise GateTimeoutError(self)
        if self.status == GatingStatus.CANCELLED:
            raise GateCancelledError(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "summary": {
                "total_resources": len(self.metrics),
                "satisfied": len(self.satisfied_names),
                "timed_out": len(self.timed_out_names),
                "total_duration_ms": self.total_duration_ms,
            },
            "resources": {n: m.to_dict() for n, m in self.metrics.items()},
            "metadata": dict(self.metadata),
        }
