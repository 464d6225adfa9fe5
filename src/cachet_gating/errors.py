# src/cachet_gating/errors.py
# Exception hierarchy for cachet-gating.

"""
Errors raised by the source client and by failed gating reports.

Unknown resource names are never an error; they resolve to UNKNOWN.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cachet_gating.gates.models import GatingReport


class CachetGatingError(Exception):
    """Base class for all cachet-gating errors."""


class FetchError(CachetGatingError):
    """A single source could not be fetched or parsed."""

    def __init__(self, source_url: str, message: str) -> None:
        super().__init__(f"{source_url}: {message}")
        self.source_url = source_url
        self.message = message


class GateFailedError(CachetGatingError):
    """A gate finished without every required resource being operational."""

    def __init__(self, report: "GatingReport", message: str) -> None:
        super().__init__(message)
        self.report = report


class GateTimeoutError(GateFailedError):
    """At least one required resource did not recover before the deadline."""

    def __init__(self, report: "GatingReport") -> None:
        names = ", ".join(report.timed_out_names) or "none"
        super().__init__(report, f"Gating timed out waiting for: {names}")


class GateCancelledError(GateFailedError):
    """The caller aborted the gate before it resolved."""

    def __init__(self, report: "GatingReport") -> None:
        super().__init__(report, "Gating was cancelled")
