"""
Survey Analytics - Domain Layer.
Questionnaires, scoring, response collection and aggregate views.
"""
from .aggregations import (
    AggregateStats,
    PhobiaStats,
    RegionalStat,
    TimeWindow,
    Trend,
    aggregate,
    distinct_regions,
    phobia_overview,
    trend,
)
from .collector import CollectorState, ResponseCollector
from .dashboard import DashboardService, MentalHealthDashboard, PhobiaDashboard, PhobiaOverviewDashboard
from .questionnaires import (
    MENTAL_HEALTH_QUESTIONS,
    PHOBIA_CATALOG,
    PHOBIA_QUESTIONS,
    PhobiaTypeDescriptor,
    QuestionDescriptor,
    phobia_descriptor,
    questions_for,
    table_key_for,
)
from .scoring import (
    ScoringResult,
    categorize_phobia,
    categorize_wellness,
    phobia_guidance,
    score_mental_health,
    score_phobia,
    score_responses,
    wellness_recommendations,
)
from .summary import AdminSummary, AdminSummaryComposer
