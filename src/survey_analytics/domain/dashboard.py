"""
Survey Analytics - Public Dashboards.

Per-survey statistics for the public dashboards. A failed fetch renders
as zeroed statistics flagged `degraded` rather than failing the view.

Architecture Layer: Domain
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
import structlog

from ..exceptions import StoreError
from ..infrastructure.repository import RecordStore
from ..schemas import MENTAL_HEALTH_TABLE, PhobiaType
from .aggregations import (
    AggregateStats, PhobiaStats, TimeWindow, Trend, aggregate, phobia_overview, trend,
)
from .questionnaires import phobia_descriptor
from .summary import fetch_with_timeout

logger = structlog.get_logger(__name__)


class MentalHealthDashboard(BaseModel):
    """Mental-wellness dashboard view."""
    window: TimeWindow
    stats: AggregateStats
    trend: Trend
    degraded: bool = False
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    model_config = ConfigDict(frozen=True)


class PhobiaDashboard(BaseModel):
    """Dashboard view for a single phobia variant."""
    window: TimeWindow
    phobia: PhobiaStats
    degraded: bool = False
    model_config = ConfigDict(frozen=True)


class PhobiaOverviewDashboard(BaseModel):
    """All phobia variants with responses, most-answered first."""
    window: TimeWindow
    phobias: list[PhobiaStats] = Field(default_factory=list)
    total_responses: int = 0
    failed_sources: list[str] = Field(default_factory=list)
    degraded: bool = False
    model_config = ConfigDict(frozen=True)


class DashboardService:
    """Builds the public dashboard views from store queries."""

    def __init__(self, store: RecordStore, fetch_timeout: float = 15.0,
                 trend_up_threshold: float = 60.0, trend_down_threshold: float = 40.0) -> None:
        self._store = store
        self._fetch_timeout = fetch_timeout
        self._trend_up = trend_up_threshold
        self._trend_down = trend_down_threshold

    async def _stats(self, table_key: str, since: datetime | None) -> AggregateStats | None:
        try:
            records = await fetch_with_timeout(self._store, table_key, since, self._fetch_timeout)
        except StoreError:
            logger.warning("dashboard_fetch_degraded", table=table_key)
            return None
        return aggregate(records)

    async def mental_health(self, window: TimeWindow = TimeWindow.ALL,
                            now: datetime | None = None) -> MentalHealthDashboard:
        window = TimeWindow(window)
        stats = await self._stats(MENTAL_HEALTH_TABLE, window.since(now))
        degraded = stats is None
        stats = stats or AggregateStats()
        return MentalHealthDashboard(
            window=window,
            stats=stats,
            trend=trend(stats.average_score, self._trend_up, self._trend_down),
            degraded=degraded,
        )

    async def phobia(self, phobia_type: PhobiaType, window: TimeWindow = TimeWindow.ALL,
                     now: datetime | None = None) -> PhobiaDashboard:
        phobia_type = PhobiaType(phobia_type)
        window = TimeWindow(window)
        descriptor = phobia_descriptor(phobia_type)
        stats = await self._stats(phobia_type.table_key, window.since(now))
        return PhobiaDashboard(
            window=window,
            phobia=PhobiaStats(
                phobia_id=descriptor.id,
                display_name=descriptor.display_name,
                medical_term=descriptor.medical_term,
                stats=stats or AggregateStats(),
            ),
            degraded=stats is None,
        )

    async def phobia_overview(self, window: TimeWindow = TimeWindow.ALL,
                              now: datetime | None = None) -> PhobiaOverviewDashboard:
        window = TimeWindow(window)
        since = window.since(now)
        phobias = list(PhobiaType)
        results = await asyncio.gather(*(self._stats(p.table_key, since) for p in phobias))

        failed = [p.table_key for p, stats in zip(phobias, results) if stats is None]
        overview = phobia_overview([
            (phobia_descriptor(p), stats) for p, stats in zip(phobias, results) if stats is not None
        ])
        return PhobiaOverviewDashboard(
            window=window,
            phobias=overview,
            total_responses=sum(p.stats.count for p in overview),
            failed_sources=failed,
            degraded=bool(failed),
        )
