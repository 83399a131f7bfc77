"""
Refresh cycle: orchestration of one tick and the cron trigger driving it.
"""

from .orchestrator import RefreshOrchestrator, RefreshResult, SourceOutcome, SourceStatus
from .scheduler import RefreshScheduler

__all__ = [
    "RefreshOrchestrator",
    "RefreshResult",
    "RefreshScheduler",
    "SourceOutcome",
    "SourceStatus",
]
