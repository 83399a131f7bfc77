"""
JWKS aggregator service.

Polls every configured key-set publisher on a cron schedule, merges the
results and serves the merged set on `/jwks` straight from memory.
"""

from typing import Any, Dict, Optional

import httpx
from fastapi import Response

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .jwks.fetcher import JWKSFetcher
from .refresh.orchestrator import RefreshOrchestrator
from .refresh.scheduler import RefreshScheduler
from .snapshot.store import SnapshotStore
from .sources.registry import SourceRegistry


class JWKSService(BaseService):
    """JWKS aggregator service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__("jwks", 8020, config)

        # Initialize components
        self.registry = SourceRegistry.from_settings(self.config.sources)
        self.store = SnapshotStore()
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.config.http_timeout,
            follow_redirects=True,
        )
        self.fetcher = JWKSFetcher(self.http_client)
        self.orchestrator = RefreshOrchestrator(
            self.registry,
            self.fetcher,
            self.store,
            metrics=self.metrics,
        )
        self.scheduler = RefreshScheduler(
            self.orchestrator,
            self.config.refresh_schedule,
            run_on_startup=self.config.refresh_on_startup,
        )

        self._setup_jwks_routes()

    def _setup_jwks_routes(self):
        """Set up JWKS-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "jwks",
                "message": "JWKS Aggregator",
                "version": "1.0.0",
                "sources": [descriptor.source_id for descriptor in self.registry],
            }

        @self.app.get("/jwks")
        async def get_jwks():
            """Serve the merged key set exactly as last published."""
            return Response(content=self.store.get().body, media_type="application/json")

        @self.app.get("/jwks/status")
        async def get_jwks_status():
            """Per-source outcome of the last refresh tick."""
            return self._status()

    def _status(self) -> Dict[str, Any]:
        snapshot = self.store.get()
        outcomes = self.orchestrator.last_outcomes

        sources = []
        for source_id, descriptor in self.registry.all():
            outcome = outcomes.get(source_id)
            sources.append({
                "source_id": source_id,
                "name": descriptor.name,
                "url": descriptor.url,
                "status": outcome.status.value if outcome else "pending",
                "keys_count": outcome.keys_count if outcome else 0,
                "error": outcome.error if outcome else None,
                "finished_at": outcome.finished_at if outcome else None,
            })

        return {
            "generation": snapshot.generation,
            "published_at": snapshot.published_at,
            "keys_count": len(snapshot.keys),
            "refresh_running": self.orchestrator.running,
            "schedule": self.config.refresh_schedule,
            "sources": sources,
        }

    async def _check_dependencies(self):
        """Check JWKS service dependencies."""
        return {
            "scheduler": "ok" if self.scheduler.running else "stopped",
            "snapshot": "ok" if self.store.get().generation > 0 else "empty",
        }

    async def start(self):
        """Start the refresh scheduler."""
        self.scheduler.start()
        self.logger.info("JWKS service components started", sources=len(self.registry))

    async def stop(self):
        """Stop the scheduler and release the HTTP client."""
        self.scheduler.stop()
        await self.http_client.aclose()
        self.logger.info("JWKS service components stopped")


def create_app():
    """Create JWKS service application."""
    service = JWKSService()
    return service.app


def main():
    service = JWKSService()
    service.run()


if __name__ == "__main__":
    main()
