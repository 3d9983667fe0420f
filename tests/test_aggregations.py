"""
Unit tests for the aggregation engine.
"""
import random
from datetime import datetime, timedelta, timezone

import pytest

from survey_analytics.domain.aggregations import (
    AggregateStats,
    TimeWindow,
    Trend,
    aggregate,
    distinct_regions,
    phobia_overview,
    trend,
)
from survey_analytics.domain.questionnaires import phobia_descriptor
from survey_analytics.schemas import PhobiaType


class TestAggregateEmpty:
    """Tests for empty input."""

    def test_empty_records(self):
        """Test empty input yields zeroed stats."""
        stats = aggregate([])

        assert stats == AggregateStats()
        assert stats.count == 0
        assert stats.average_score == 0.0
        assert stats.bucket_counts == {}
        assert stats.regional_breakdown == []


class TestAggregateBuckets:
    """Tests for counts, means and bucket tallies."""

    def test_mixed_categories(self, mental_health_record):
        """Test three records across three categories."""
        records = [
            mental_health_record(score=80, category="Stable"),
            mental_health_record(score=60, category="Mild"),
            mental_health_record(score=20, category="Severe"),
        ]

        stats = aggregate(records)

        assert stats.count == 3
        assert stats.average_score == pytest.approx(53.333, abs=0.01)
        assert stats.bucket_counts == {"Stable": 1, "Mild": 1, "Moderate": 0, "Severe": 1}

    def test_bucket_counts_sum_to_count(self, phobia_record):
        """Test recognized buckets cover every record."""
        records = [phobia_record(intensity=i) for i in (10, 30, 30, 60, 90, 95)]

        stats = aggregate(records)

        assert sum(stats.bucket_counts.values()) == stats.count
        assert stats.bucket_counts == {"Low": 1, "Medium": 2, "High": 1, "Severe": 2}

    def test_case_insensitive_custom_labels(self, mental_health_record):
        """Test custom bucket keys match labels regardless of case."""
        records = [mental_health_record(score=s) for s in (90, 90, 10)]
        buckets = iter(["STABLE", "stable", "Severe"])

        stats = aggregate(records, bucket_key=lambda r: next(buckets))

        assert stats.bucket_counts["Stable"] == 2
        assert stats.bucket_counts["Severe"] == 1

    def test_unrecognized_labels_excluded(self, mental_health_record):
        """Test unknown labels count toward totals but not buckets."""
        records = [mental_health_record(score=s) for s in (90, 50)]
        labels = {90: "Stable", 50: "Borderline"}

        stats = aggregate(records, bucket_key=lambda r: labels[r.score])

        assert stats.count == 2
        assert stats.average_score == 70.0
        assert sum(stats.bucket_counts.values()) == 1
        assert "Borderline" not in stats.bucket_counts

    def test_custom_score_field(self, phobia_record):
        """Test an alternative score accessor."""
        records = [phobia_record(duration_months=m) for m in (6, 18)]

        stats = aggregate(records, score_field=lambda r: r.duration_months)

        assert stats.average_score == 12.0

    def test_order_independent(self, mental_health_record):
        """Test permuting records leaves count and mean unchanged."""
        records = [mental_health_record(score=s, region=r)
                   for s, r in [(10, "A"), (55, "B"), (70, "A"), (95, "C"), (40, "B")]]
        baseline = aggregate(records)

        shuffled = list(records)
        random.Random(7).shuffle(shuffled)
        stats = aggregate(shuffled)

        assert stats.count == baseline.count
        assert stats.average_score == pytest.approx(baseline.average_score)
        assert stats.bucket_counts == baseline.bucket_counts


class TestRegionalBreakdown:
    """Tests for the regional rollup."""

    def test_sorted_by_mean_descending(self, mental_health_record):
        """Test regions ordered by average score."""
        records = [
            mental_health_record(score=50, region="B"),
            mental_health_record(score=90, region="A"),
            mental_health_record(score=70, region="A"),
        ]

        breakdown = aggregate(records).regional_breakdown

        assert [(r.region, r.average_score, r.count) for r in breakdown] == [("A", 80.0, 2), ("B", 50.0, 1)]

    def test_ties_keep_first_seen_order(self, mental_health_record):
        """Test equal means keep encounter order."""
        records = [
            mental_health_record(score=60, region="West"),
            mental_health_record(score=60, region="East"),
            mental_health_record(score=60, region="North"),
        ]

        breakdown = aggregate(records).regional_breakdown

        assert [r.region for r in breakdown] == ["West", "East", "North"]

    def test_blank_region_is_unknown(self, mental_health_record):
        """Test blank regions group under Unknown."""
        records = [mental_health_record(score=40, region=""), mental_health_record(score=60, region="  ")]

        breakdown = aggregate(records).regional_breakdown

        assert len(breakdown) == 1
        assert breakdown[0].region == "Unknown"
        assert breakdown[0].count == 2

    def test_literal_unknown_region_kept_apart(self, mental_health_record):
        """Test a region named Unknown is not merged with blank regions."""
        records = [
            mental_health_record(score=80, region="Unknown"),
            mental_health_record(score=20, region=""),
            mental_health_record(score=40, region=""),
        ]

        breakdown = aggregate(records).regional_breakdown

        assert [(r.region, r.average_score, r.count) for r in breakdown] == [
            ("Unknown", 80.0, 1), ("Unknown", 30.0, 2),
        ]

    def test_distinct_regions_skip_blank(self, mental_health_record):
        """Test distinct region counting."""
        records = [mental_health_record(region=r) for r in ("A", "B", "A", "")]

        assert distinct_regions(records) == {"A", "B"}


class TestTimeWindow:
    """Tests for window boundaries."""

    def test_week(self, fixed_now):
        """Test week window."""
        assert TimeWindow.WEEK.since(fixed_now) == fixed_now - timedelta(days=7)

    def test_all(self, fixed_now):
        """Test unbounded window."""
        assert TimeWindow.ALL.since(fixed_now) is None

    def test_month_clamps_to_month_end(self, fixed_now):
        """Test March 31 steps back to the last day of February."""
        assert TimeWindow.MONTH.since(fixed_now) == datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc)

    def test_month_leap_year(self):
        """Test leap-year February."""
        now = datetime(2024, 3, 30, tzinfo=timezone.utc)
        assert TimeWindow.MONTH.since(now) == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_month_crosses_year(self):
        """Test January steps back into December."""
        now = datetime(2026, 1, 15, 8, 30, tzinfo=timezone.utc)
        assert TimeWindow.MONTH.since(now) == datetime(2025, 12, 15, 8, 30, tzinfo=timezone.utc)

    def test_from_string(self):
        """Test windows parse from query values."""
        assert TimeWindow("month") == TimeWindow.MONTH


class TestTrend:
    """Tests for the trend indicator."""

    @pytest.mark.parametrize("average,expected", [
        (75.0, Trend.UP),
        (60.0, Trend.STABLE),
        (40.0, Trend.STABLE),
        (39.9, Trend.DOWN),
        (0.0, Trend.DOWN),
    ])
    def test_thresholds(self, average, expected):
        """Test trend thresholds."""
        assert trend(average) == expected


class TestPhobiaOverview:
    """Tests for the phobia overview ordering."""

    def test_filters_and_sorts_by_count(self):
        """Test empty variants are dropped and the rest ordered by volume."""
        results = [
            (phobia_descriptor(PhobiaType.ACROPHOBIA), AggregateStats(count=2, average_score=40.0)),
            (phobia_descriptor(PhobiaType.AQUAPHOBIA), AggregateStats()),
            (phobia_descriptor(PhobiaType.CYNOPHOBIA), AggregateStats(count=5, average_score=70.0)),
            (phobia_descriptor(PhobiaType.HEMOPHOBIA), AggregateStats(count=2, average_score=10.0)),
        ]

        overview = phobia_overview(results)

        assert [p.phobia_id for p in overview] == ["cynophobia", "acrophobia", "hemophobia"]
        assert overview[0].display_name == "Fear of Dogs"
