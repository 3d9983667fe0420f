"""
Survey Analytics - Admin Summary Composer.

Combines per-collection aggregates of the mental-health table and all ten
phobia tables into the admin dashboard view. Fetches run concurrently and
all of them finish (or fail) before the summary is produced.

Architecture Layer: Domain
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
import structlog

from ..exceptions import StoreError, StoreTimeoutError
from ..infrastructure.repository import RecordStore
from ..schemas import MENTAL_HEALTH_TABLE, MentalHealthRecord, PhobiaType, SeverityCategory
from ..security import AdminCapability, require_capability
from .aggregations import aggregate, distinct_regions

logger = structlog.get_logger(__name__)


async def fetch_with_timeout(
    store: RecordStore, table_key: str, since: datetime | None, timeout: float,
) -> list[Any]:
    """Query a table. Any failure, including a timeout, surfaces as a StoreError."""
    try:
        return await asyncio.wait_for(store.query(table_key, since=since), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise StoreTimeoutError(f"Query on {table_key} exceeded {timeout}s", table_key=table_key, cause=e)
    except StoreError:
        raise
    except Exception as e:
        logger.error("store_query_unexpected_error", table=table_key, error=str(e))
        raise StoreError(f"Query on {table_key} failed: {e}", table_key=table_key, cause=e)


class AdminSummary(BaseModel):
    """Admin dashboard view model."""
    total_mental_health: int = 0
    total_phobia: int = 0
    critical_cases: int = 0
    active_regions: int = 0
    phobia_counts: dict[str, int] = Field(default_factory=dict)
    recent_activity: list[MentalHealthRecord] = Field(default_factory=list)
    failed_sources: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    model_config = ConfigDict(frozen=True)

    @property
    def total_responses(self) -> int:
        return self.total_mental_health + self.total_phobia


class AdminSummaryComposer:
    """Fan-out/fan-in composition over the eleven survey collections."""

    def __init__(self, store: RecordStore, fetch_timeout: float = 15.0,
                 recent_activity_limit: int = 10) -> None:
        self._store = store
        self._fetch_timeout = fetch_timeout
        self._recent_limit = recent_activity_limit

    async def _fetch(self, table_key: str, since: datetime | None) -> list[Any] | None:
        try:
            return await fetch_with_timeout(self._store, table_key, since, self._fetch_timeout)
        except StoreError:
            logger.warning("summary_source_failed", table=table_key)
            return None

    async def compose(self, capability: AdminCapability | None,
                      since: datetime | None = None) -> AdminSummary:
        require_capability(capability)
        table_keys = [MENTAL_HEALTH_TABLE, *(p.table_key for p in PhobiaType)]
        results = await asyncio.gather(*(self._fetch(key, since) for key in table_keys))
        fetched = dict(zip(table_keys, results))

        failed = [key for key, records in fetched.items() if records is None]
        mental_records = fetched[MENTAL_HEALTH_TABLE] or []
        mental_stats = aggregate(mental_records)

        phobia_counts: dict[str, int] = {}
        for phobia in PhobiaType:
            phobia_counts[phobia.value] = aggregate(fetched[phobia.table_key] or []).count

        summary = AdminSummary(
            total_mental_health=mental_stats.count,
            total_phobia=sum(phobia_counts.values()),
            critical_cases=mental_stats.bucket_counts.get(SeverityCategory.SEVERE.value, 0),
            active_regions=len(distinct_regions(mental_records)),
            phobia_counts=phobia_counts,
            recent_activity=list(reversed(mental_records[-self._recent_limit:])),
            failed_sources=failed,
        )
        logger.info("admin_summary_composed", total=summary.total_responses,
                    critical=summary.critical_cases, failed_sources=len(failed))
        return summary
