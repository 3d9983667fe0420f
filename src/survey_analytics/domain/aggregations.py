"""
Survey Analytics - Aggregation Engine.

Reduces a pre-filtered slice of survey records to summary statistics:
count, mean score, category bucket tallies and a regional rollup.
Time-window filtering happens at query time in the record store; this
module only computes the `since` boundary for each window.

Architecture Layer: Domain
Principles: Pure Reductions, Immutable Results, Deterministic Ordering
"""
from __future__ import annotations

import calendar
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
import structlog

from .questionnaires import PhobiaTypeDescriptor

logger = structlog.get_logger(__name__)

UNKNOWN_REGION = "Unknown"


def _subtract_month(dt: datetime) -> datetime:
    """
    Same wall-clock time one calendar month earlier, clamped to the month's last day.

    Mar 31 maps to Feb 28 (or 29), not to an overflowed early-March date.
    """
    year, month = (dt.year, dt.month - 1) if dt.month > 1 else (dt.year - 1, 12)
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


class TimeWindow(str, Enum):
    """Dashboard time windows."""
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    def since(self, now: datetime | None = None) -> datetime | None:
        """Lower submitted_at bound for this window; None means unbounded."""
        now = now or datetime.now(timezone.utc)
        if self == TimeWindow.WEEK:
            return now - timedelta(days=7)
        if self == TimeWindow.MONTH:
            return _subtract_month(now)
        return None


class Trend(str, Enum):
    """Recent-trend indicator derived from the average score."""
    UP = "up"
    STABLE = "stable"
    DOWN = "down"


class RegionalStat(BaseModel):
    """Mean score and response count for one region."""
    region: str
    average_score: float
    count: int = Field(ge=0)
    model_config = ConfigDict(frozen=True)


class AggregateStats(BaseModel):
    """Summary statistics over a record slice. Never persisted."""
    count: int = Field(default=0, ge=0)
    average_score: float = 0.0
    bucket_counts: dict[str, int] = Field(default_factory=dict)
    regional_breakdown: list[RegionalStat] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)


BucketKeyFn = Callable[[Any], str]
ScoreFieldFn = Callable[[Any], float]


def _default_bucket(record: Any) -> str:
    return record.bucket


def _default_score(record: Any) -> float:
    return record.score


def _region_of(record: Any) -> str | None:
    """Region key, or None for a blank region."""
    region = getattr(record, "region", None)
    if region is None or not str(region).strip():
        return None
    return str(region)


def aggregate(
    records: Sequence[Any],
    bucket_key: BucketKeyFn | None = None,
    score_field: ScoreFieldFn | None = None,
    bucket_labels: Sequence[str] | None = None,
) -> AggregateStats:
    """
    Aggregate a homogeneous record slice.

    Bucket labels are matched case-insensitively and reported under their
    canonical spelling. Values outside the known labels still count towards
    `count` and the mean but are left out of `bucket_counts`.
    """
    if not records:
        return AggregateStats()

    bucket_key = bucket_key or _default_bucket
    score_field = score_field or _default_score
    if bucket_labels is None:
        bucket_labels = getattr(type(records[0]), "bucket_labels", ())

    canonical = {label.lower(): label for label in bucket_labels}
    bucket_counts = {label: 0 for label in bucket_labels}
    unrecognized: dict[str, int] = {}
    total = 0.0
    regions: dict[str | None, list[float]] = {}

    for record in records:
        score = float(score_field(record))
        total += score

        raw = bucket_key(record)
        label = canonical.get(str(raw).lower()) if raw is not None else None
        if label is None:
            unrecognized[str(raw)] = unrecognized.get(str(raw), 0) + 1
        else:
            bucket_counts[label] += 1

        acc = regions.setdefault(_region_of(record), [0.0, 0])
        acc[0] += score
        acc[1] += 1

    if unrecognized:
        logger.warning("unrecognized_bucket_label", labels=unrecognized)

    breakdown = [
        RegionalStat(region=region if region is not None else UNKNOWN_REGION,
                     average_score=acc[0] / acc[1], count=int(acc[1]))
        for region, acc in regions.items()
    ]
    # ties keep first-encountered order
    breakdown = sorted(breakdown, key=lambda s: s.average_score, reverse=True)

    return AggregateStats(
        count=len(records),
        average_score=total / len(records),
        bucket_counts=bucket_counts,
        regional_breakdown=breakdown,
    )


def trend(average_score: float, up_threshold: float = 60.0, down_threshold: float = 40.0) -> Trend:
    if average_score > up_threshold:
        return Trend.UP
    if average_score < down_threshold:
        return Trend.DOWN
    return Trend.STABLE


def distinct_regions(records: Sequence[Any]) -> set[str]:
    """Distinct non-empty region values."""
    return {str(r.region) for r in records if getattr(r, "region", None) and str(r.region).strip()}


class PhobiaStats(BaseModel):
    """Aggregate statistics for one phobia variant."""
    phobia_id: str
    display_name: str
    medical_term: str
    stats: AggregateStats
    model_config = ConfigDict(frozen=True)


def phobia_overview(results: Sequence[tuple[PhobiaTypeDescriptor, AggregateStats]]) -> list[PhobiaStats]:
    """Phobia variants with at least one response, most-answered first."""
    overview = [
        PhobiaStats(
            phobia_id=descriptor.id,
            display_name=descriptor.display_name,
            medical_term=descriptor.medical_term,
            stats=stats,
        )
        for descriptor, stats in results
        if stats.count > 0
    ]
    return sorted(overview, key=lambda p: p.stats.count, reverse=True)
