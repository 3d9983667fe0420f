"""
Survey Analytics - Scoring Engine.

Normalizes ordinal responses to a 0-100 score and maps the score onto the
four-bucket category scale of each survey family. All functions are pure.

Scores are rounded half-up for both survey families.

Architecture Layer: Domain
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from ..schemas import RiskLevel, SeverityCategory
from .questionnaires import MENTAL_HEALTH_QUESTIONS, PHOBIA_QUESTIONS

MAX_RESPONSE = 5


@dataclass(frozen=True)
class ScoringResult:
    """Normalized score with its category label."""
    score: int
    category: SeverityCategory | RiskLevel

    @property
    def label(self) -> str:
        return self.category.value


def score_responses(responses: Mapping[str, int], question_count: int) -> int:
    """
    Normalize a complete response set to an integer in [0, 100].

    Completeness and the [1, 5] range are the caller's responsibility.
    """
    total = sum(responses.values())
    ratio = Decimal(100 * total) / Decimal(MAX_RESPONSE * question_count)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def categorize_wellness(score: int) -> SeverityCategory:
    """Higher wellness means a better category."""
    if score >= 75:
        return SeverityCategory.STABLE
    if score >= 50:
        return SeverityCategory.MILD
    if score >= 25:
        return SeverityCategory.MODERATE
    return SeverityCategory.SEVERE


def categorize_phobia(intensity: int) -> RiskLevel:
    """Higher intensity means a higher risk level."""
    if intensity < 25:
        return RiskLevel.LOW
    if intensity < 50:
        return RiskLevel.MEDIUM
    if intensity < 75:
        return RiskLevel.HIGH
    return RiskLevel.SEVERE


def score_mental_health(responses: Mapping[str, int]) -> ScoringResult:
    score = score_responses(responses, len(MENTAL_HEALTH_QUESTIONS))
    return ScoringResult(score=score, category=categorize_wellness(score))


def score_phobia(responses: Mapping[str, int]) -> ScoringResult:
    intensity = score_responses(responses, len(PHOBIA_QUESTIONS))
    return ScoringResult(score=intensity, category=categorize_phobia(intensity))


def wellness_recommendations(score: int) -> list[str]:
    """Advisory text shown after a mental-wellness submission."""
    if score < 50:
        return [
            "Consider speaking with a mental health professional",
            "Practice daily mindfulness or meditation",
            "Maintain a regular sleep schedule",
        ]
    if score < 75:
        return [
            "Continue healthy habits that support your wellbeing",
            "Stay connected with supportive friends and family",
            "Engage in regular physical activity",
        ]
    return [
        "Keep up your excellent self-care practices",
        "Share your wellness strategies with others",
        "Continue monitoring your mental health",
    ]


def phobia_guidance(risk: RiskLevel) -> list[str]:
    """Educational guidance shown after a phobia submission."""
    if risk in (RiskLevel.SEVERE, RiskLevel.HIGH):
        return [
            "Consider consulting with a mental health professional",
            "Cognitive Behavioral Therapy (CBT) has shown effectiveness",
            "Exposure therapy may be beneficial under professional guidance",
            "Join support groups for individuals with similar experiences",
        ]
    if risk == RiskLevel.MEDIUM:
        return [
            "Practice relaxation techniques when confronting your fear",
            "Gradual exposure to the fear source can help build tolerance",
            "Consider speaking with a therapist if symptoms worsen",
            "Learn about your phobia to better understand it",
        ]
    return [
        "Your fear level is relatively manageable",
        "Continue healthy coping strategies",
        "Stay informed about your fear triggers",
        "Monitor for any changes in intensity",
    ]
