# src/cachet_gating/gates/engine.py
"""
Gating engine - blocks the caller until required resources are operational.
"""

import logging
import threading
import time
from dataclasses import replace
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from cachet_gating.gates.models import GatingMetrics, GatingReport, GatingStatus
from cachet_gating.models import ResourceStatus
from cachet_gating.registry import ResourceRegistry

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0

LogFn = Callable[[str], None]


class GateOptions(BaseModel):
    """Per-call gating policy."""

    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL, gt=0, description="Seconds between poll cycles"
    )
    max_wait: Optional[float] = Field(
        default=None, ge=0, description="Give up after this many seconds; None waits forever"
    )
    require_resources: bool = Field(
        default=True, description="When false, record statuses without waiting"
    )


def _log_to_logger(line: str) -> None:
    logger.info("%s", line)


class GatingEngine:
    """
    Runs gates against a shared ResourceRegistry.

    gate() runs on the caller's thread and blocks it. The registry is only
    read, so any number of gates may run at once.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        log: Optional[LogFn] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.log = log or _log_to_logger
        self._clock = clock

    def gate(
        self,
        required_names: Iterable[str],
        options: Optional[GateOptions] = None,
        cancel_event: Optional[threading.Event] = None,
        log: Optional[LogFn] = None,
    ) -> GatingReport:
        """
        Wait until every required resource is OPERATIONAL.

        All pending resources are checked together each cycle against one
        registry snapshot, then the engine waits poll_interval seconds (or
        until cancel_event is set). Timeouts and cancellation are reported in
        the returned GatingReport, never raised; call raise_for_status() to
        turn a failed report into an exception.

        Args:
            required_names: Resource names to wait for. Duplicates are ignored.
            options: Gating policy; defaults to GateOptions().
            cancel_event: Set from another thread to abort the gate promptly.
            log: Receives one progress line per pending resource per cycle.

        Returns:
            GatingReport with metrics for every required resource.
        """
        options = options or GateOptions()
        cancel = cancel_event or threading.Event()
        emit = log or self.log
        names = list(dict.fromkeys(required_names))

        started = self._clock()
        timestamp = datetime.now()
        metrics = {name: GatingMetrics(name=name, gate_start=timestamp) for name in names}

        def elapsed_ms() -> int:
            return int((self._clock() - started) * 1000)

        if not options.require_resources:
            for name, resource in self.registry.get_resources(names).items():
                status = resource.status_id
                metrics[name] = replace(metrics[name], initial_status=status).finalize(
                    GatingStatus.NOT_GATED, status, 0, datetime.now()
                )
                emit(f"Gating disabled, {name} is {status}")
            return self._build_report(timestamp, GatingStatus.NOT_GATED, metrics, options, started)

        pending = list(names)
        last_status: dict[str, ResourceStatus] = {}
        outcome = GatingStatus.SATISFIED
        first_cycle = True

        while True:
            current = self.registry.get_resources(pending)
            still_pending = []
            for name in pending:
                status = current[name].status_id
                last_status[name] = status
                if metrics[name].initial_status is None:
                    metrics[name] = replace(metrics[name], initial_status=status)

                if status.is_operational:
                    waited = 0 if first_cycle else max(1, elapsed_ms())
                    metrics[name] = metrics[name].finalize(
                        GatingStatus.SATISFIED, status, waited, datetime.now()
                    )
                    emit(f"Resource {name} is {status}")
                else:
                    still_pending.append(name)
                    emit(
                        f"Waiting for {name}: status is {status} "
                        f"(gated for {elapsed_ms() / 1000:.0f}s)"
                    )
            pending = still_pending
            first_cycle = False

            if not pending:
                break
            if cancel.is_set():
                outcome = GatingStatus.CANCELLED
                break

            wait = options.poll_interval
            if options.max_wait is not None:
                remaining = options.max_wait - (self._clock() - started)
                if remaining <= 0:
                    outcome = GatingStatus.TIMED_OUT
                    break
                wait = min(wait, remaining)

            if cancel.wait(wait):
                outcome = GatingStatus.CANCELLED
                break

        for name in pending:
            status = last_status[name]
            metrics[name] = metrics[name].finalize(
                outcome, status, max(1, elapsed_ms()), datetime.now()
            )
            if outcome == GatingStatus.TIMED_OUT:
                emit(f"Timed out waiting for {name}, last status {status}")
            else:
                emit(f"Gating cancelled while waiting for {name}, last status {status}")

        return self._build_report(timestamp, outcome, metrics, options, started)

    def _build_report(
        self,
        timestamp: datetime,
        status: GatingStatus,
        metrics: dict[str, GatingMetrics],
        options: GateOptions,
        started: float,
    ) -> GatingReport:
        return GatingReport(
            timestamp=timestamp,
            status=status,
            metrics=MappingProxyType(dict(metrics)),
            total_duration_ms=(self._clock() - started) * 1000,
            metadata=MappingProxyType(
                {
                    "required": list(metrics),
                    "poll_interval": options.poll_interval,
                    "max_wait": options.max_wait,
                    "require_resources": options.require_resources,
                }
            ),
        )
