"""
Refresh orchestration: fan out one fetch per source, merge, publish.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from shared.errors import DecodeFailedError, FetchFailedError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..jwks.fetcher import JWKSFetcher
from ..models import JWK, KeySet
from ..snapshot.store import Snapshot, SnapshotStore
from ..sources.registry import SourceDescriptor, SourceRegistry


class SourceStatus(str, Enum):
    """Outcome of one source's fetch within a tick."""
    OK = "ok"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"
    ERROR = "error"


@dataclass(frozen=True)
class SourceOutcome:
    """What one source contributed to a tick."""
    source_id: str
    status: SourceStatus
    keys_count: int
    finished_at: float
    error: Optional[str] = None


@dataclass
class RefreshResult:
    """Summary of a completed tick."""
    snapshot: Snapshot
    outcomes: Dict[str, SourceOutcome] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def failed_sources(self) -> List[str]:
        return [
            source_id
            for source_id, outcome in self.outcomes.items()
            if outcome.status is not SourceStatus.OK
        ]


class RefreshOrchestrator:
    """Runs refresh ticks against every registered source.

    Each source owns one state cell, written only by that source's task.
    A failed fetch leaves the cell empty for the tick: keys from earlier
    ticks are not carried forward. The merged aggregate is published only
    after every task has finished, so readers never see a partial merge.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        fetcher: JWKSFetcher,
        store: SnapshotStore,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.registry = registry
        self.fetcher = fetcher
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("jwks.refresh")

        self._states: Dict[str, KeySet] = {source_id: () for source_id, _ in registry.all()}
        self._outcomes: Dict[str, SourceOutcome] = {}
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    @property
    def last_outcomes(self) -> Dict[str, SourceOutcome]:
        """Per-source outcome of the most recent completed tick."""
        return dict(self._outcomes)

    async def refresh(self) -> Optional[RefreshResult]:
        """Run one tick. Returns None when a tick is already in flight."""
        if self._lock.locked():
            self.logger.warning("JWKS refresh already running, skipping tick")
            if self.metrics:
                self.metrics.increment_counter("jwks_refresh_skipped_total")
            return None

        async with self._lock:
            started = time.perf_counter()
            sources = self.registry.all()

            outcomes = await asyncio.gather(
                *(self._refresh_source(source_id, descriptor) for source_id, descriptor in sources)
            )

            aggregate: List[JWK] = []
            for source_id, _ in sources:
                aggregate.extend(self._states[source_id])

            snapshot = self.store.set(aggregate)
            duration = time.perf_counter() - started

            self._outcomes = {outcome.source_id: outcome for outcome in outcomes}
            result = RefreshResult(
                snapshot=snapshot,
                outcomes=dict(self._outcomes),
                duration_seconds=duration,
            )

            if self.metrics:
                self.metrics.observe_histogram("jwks_refresh_duration_seconds", duration)
                self.metrics.set_gauge("jwks_aggregate_keys", len(snapshot.keys))
                self.metrics.set_gauge("jwks_last_refresh_timestamp_seconds", snapshot.published_at)

            self.logger.info(
                "JWKS snapshot published",
                generation=snapshot.generation,
                keys_count=len(snapshot.keys),
                failed_sources=result.failed_sources,
                duration_ms=round(duration * 1000, 2),
            )
            return result

    async def _refresh_source(self, source_id: str, descriptor: SourceDescriptor) -> SourceOutcome:
        try:
            keys = await self.fetcher.fetch(descriptor)
        except (FetchFailedError, DecodeFailedError) as exc:
            status = (
                SourceStatus.FETCH_FAILED
                if isinstance(exc, FetchFailedError)
                else SourceStatus.DECODE_FAILED
            )
            self.logger.error(
                "JWKS fetch failed",
                source=source_id,
                code=exc.code,
                error=exc.message,
            )
            return self._record(source_id, (), status, error=exc.message)
        except Exception as exc:
            self.logger.error(
                "Unexpected error refreshing JWKS source",
                source=source_id,
                error=str(exc),
                exc_info=True,
            )
            return self._record(source_id, (), SourceStatus.ERROR, error=str(exc))

        return self._record(source_id, keys, SourceStatus.OK)

    def _record(
        self,
        source_id: str,
        keys: KeySet,
        status: SourceStatus,
        error: Optional[str] = None,
    ) -> SourceOutcome:
        self._states[source_id] = keys
        if self.metrics:
            self.metrics.increment_counter(
                "jwks_source_fetch_total", source=source_id, status=status.value
            )
        return SourceOutcome(
            source_id=source_id,
            status=status,
            keys_count=len(keys),
            finished_at=time.time(),
            error=error,
        )
