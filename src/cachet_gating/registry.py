# src/cachet_gating/registry.py
# Resource registry - caches the merged status snapshot of all sources.

"""
ResourceRegistry holds the current name -> Resource snapshot.

The snapshot is rebuilt from every configured source on refresh() and
published with a single reference swap, so readers always see one complete
snapshot. A background thread can call refresh() on a fixed cadence; tests
bypass both network and timer with set_resources_for_tests().
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Mapping, Optional, Sequence

from cachet_gating.errors import FetchError
from cachet_gating.models import Resource, ResourceStatus, SourceConfig
from cachet_gating.source import DEFAULT_TIMEOUT, fetch_snapshot

logger = logging.getLogger(__name__)

MIN_REFRESH_INTERVAL = 5.0
DEFAULT_REFRESH_INTERVAL = 60.0

Fetcher = Callable[[SourceConfig, float], Iterable[Resource]]


class SourceFailurePolicy(str, Enum):
    """What a failed source contributes to the next snapshot."""

    KEEP_STALE = "keep_stale"  # keep that source's last known resources
    MARK_UNKNOWN = "mark_unknown"  # report its last known resources as UNKNOWN


@dataclass(frozen=True)
class ResourceSnapshot:
    """One immutable, internally consistent view of all known resources."""

    resources: Mapping[str, Resource] = field(
        default_factory=lambda: MappingProxyType({})
    )
    refreshed_at: Optional[datetime] = None

    def get(self, name: str) -> Resource:
        resource = self.resources.get(name)
        return resource if resource is not None else Resource.unknown(name)

    def __len__(self) -> int:
        return len(self.resources)

    def __contains__(self, name: object) -> bool:
        return name in self.resources


def _freeze(resources: Iterable[Resource]) -> Mapping[str, Resource]:
    return MappingProxyType({r.name: r for r in resources})


class ResourceRegistry:
    """
    Merged, cached view of every source's resource statuses.

    Owned by the host application and passed to whoever needs it. Queries
    never fail: names no source reports resolve to UNKNOWN.
    """

    def __init__(
        self,
        sources: Optional[Sequence[SourceConfig]] = None,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        request_timeout: float = DEFAULT_TIMEOUT,
        on_source_failure: SourceFailurePolicy = SourceFailurePolicy.KEEP_STALE,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.sources: list[SourceConfig] = list(sources or [])
        if refresh_interval < MIN_REFRESH_INTERVAL:
            logger.warning(
                "Refresh interval %.1fs is below the %.1fs floor, using the floor",
                refresh_interval,
                MIN_REFRESH_INTERVAL,
            )
            refresh_interval = MIN_REFRESH_INTERVAL
        self.refresh_interval = refresh_interval
        self.request_timeout = request_timeout
        self.on_source_failure = SourceFailurePolicy(on_source_failure)
        self._fetcher: Fetcher = fetcher or fetch_snapshot

        self._snapshot = ResourceSnapshot()
        self._swap_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        # Last successful result per source, by position in self.sources
        self._by_source: dict[int, tuple[Resource, ...]] = {}
        self._source_errors: dict[str, FetchError] = {}

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # -- snapshot access ---------------------------------------------------

    @property
    def snapshot(self) -> ResourceSnapshot:
        """The currently published snapshot."""
        return self._snapshot

    @property
    def last_refresh(self) -> Optional[datetime]:
        return self._snapshot.refreshed_at

    @property
    def source_errors(self) -> dict[str, FetchError]:
        """Errors from the most recent refresh, keyed by source URL."""
        return dict(self._source_errors)

    def _publish(self, resources: Iterable[Resource]) -> None:
        snapshot = ResourceSnapshot(
            resources=_freeze(resources),
            refreshed_at=datetime.now(timezone.utc),
        )
        with self._swap_lock:
            self._snapshot = snapshot

    def get_resource(self, name: str) -> Resource:
        """Look up one resource; UNKNOWN if no source reports it."""
        return self._snapshot.get(name)

    def get_resources(self, names: Iterable[str]) -> dict[str, Resource]:
        """
        Look up several resources against a single snapshot.

        The result has each requested name exactly once, in first-seen order.
        """
        snapshot = self._snapshot
        return {name: snapshot.get(name) for name in dict.fromkeys(names)}

    def get_resource_names(self) -> list[str]:
        """All known resource names, sorted alphabetically."""
        return sorted(self._snapshot.resources)

    def set_resources_for_tests(self, resources: Iterable[Resource]) -> None:
        """Publish a snapshot directly, bypassing sources and the timer."""
        self._publish(resources)

    # -- refresh -----------------------------------------------------------

    def _fetch_one(self, source: SourceConfig) -> tuple[Resource, ...]:
        return tuple(self._fetcher(source, self.request_timeout))

    def refresh(self) -> ResourceSnapshot:
        """
        Fetch every source concurrently and publish the merged snapshot.

        A failing source never aborts the refresh: its error is logged and its
        previously known resources are kept or marked UNKNOWN according to
        on_source_failure. Later sources win on name collisions.
        """
        with self._refresh_lock:
            if not self.sources:
                self._publish([])
                return self._snapshot

            errors: dict[str, FetchError] = {}
            with ThreadPoolExecutor(
                max_workers=len(self.sources), thread_name_prefix="cachet-fetch"
            ) as pool:
                futures = [pool.submit(self._fetch_one, s) for s in self.sources]
                for index, (source, future) in enumerate(zip(self.sources, futures)):
                    try:
                        self._by_source[index] = future.result()
                    except FetchError as e:
                        logger.warning("Failed to refresh %s: %s", source, e.message)
                        errors[source.base_url] = e
                    except Exception as e:
                        logger.warning("Failed to refresh %s: %r", source, e)
                        errors[source.base_url] = FetchError(source.base_url, repr(e))

            merged: dict[str, Resource] = {}
            for index, source in enumerate(self.sources):
                known = self._by_source.get(index, ())
                failed = source.base_url in errors
                for resource in known:
                    if failed and self.on_source_failure is SourceFailurePolicy.MARK_UNKNOWN:
                        resource = Resource.unknown(resource.name)
                    merged[resource.name] = resource

            self._source_errors = errors
            self._publish(merged.values())
            logger.debug(
                "Refreshed %d resources from %d sources (%d failed)",
                len(merged),
                len(self.sources),
                len(errors),
            )
            return self._snapshot

    # -- background refresh ------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, refresh_now: bool = True) -> None:
        """Start refreshing on a background thread every refresh_interval."""
        if self.running:
            return
        if refresh_now:
            self.refresh()
        self._stop_event.clear()

        def loop() -> None:
            while not self._stop_event.wait(self.refresh_interval):
                try:
                    self.refresh()
                except Exception:
                    logger.exception("Unexpected error during registry refresh")

        self._thread = threading.Thread(target=loop, name="cachet-refresh", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the background refresh thread."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None

    def __enter__(self) -> "ResourceRegistry":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()

    def __iter__(self) -> Iterator[Resource]:
        snapshot = self._snapshot
        return iter([snapshot.resources[n] for n in sorted(snapshot.resources)])

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot
