"""
Survey Analytics - Questionnaire Definitions.
Static question sets for both survey families and the phobia type catalog.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..schemas import MENTAL_HEALTH_TABLE, PhobiaType, SurveyType


@dataclass(frozen=True)
class QuestionDescriptor:
    """Single questionnaire item answered on a five-point ordinal scale."""
    id: str
    prompt: str
    response_labels: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.response_labels) != 5:
            raise ValueError(f"Question {self.id} must define exactly 5 response labels")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "prompt": self.prompt, "response_labels": list(self.response_labels)}


@dataclass(frozen=True)
class PhobiaTypeDescriptor:
    """Catalog entry for a phobia variant."""
    id: str
    display_name: str
    medical_term: str
    description: str
    table_key: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "medical_term": self.medical_term,
            "description": self.description,
        }


MENTAL_HEALTH_QUESTIONS: tuple[QuestionDescriptor, ...] = (
    QuestionDescriptor("stress_level", "How would you rate your overall stress level in the past week?",
                       ("Very Low", "Low", "Moderate", "High", "Very High")),
    QuestionDescriptor("anxiety_level", "How often have you felt anxious or worried?",
                       ("Never", "Rarely", "Sometimes", "Often", "Always")),
    QuestionDescriptor("mood_level", "How would you describe your general mood?",
                       ("Very Poor", "Poor", "Neutral", "Good", "Excellent")),
    QuestionDescriptor("sleep_quality", "How would you rate your sleep quality?",
                       ("Very Poor", "Poor", "Fair", "Good", "Excellent")),
    QuestionDescriptor("focus_ability", "How easily can you concentrate and focus on tasks?",
                       ("Very Difficult", "Difficult", "Moderate", "Easy", "Very Easy")),
    QuestionDescriptor("emotional_regulation", "How well can you manage and control your emotions?",
                       ("Very Poorly", "Poorly", "Moderately", "Well", "Very Well")),
    QuestionDescriptor("social_connection", "How connected do you feel to friends, family, or community?",
                       ("Very Isolated", "Isolated", "Neutral", "Connected", "Very Connected")),
    QuestionDescriptor("physical_energy", "How would you rate your physical energy levels?",
                       ("Exhausted", "Low", "Moderate", "High", "Very High")),
    QuestionDescriptor("motivation_level", "How motivated do you feel to accomplish daily tasks?",
                       ("Not at all", "Slightly", "Moderately", "Very", "Extremely")),
    QuestionDescriptor("appetite_changes", "Have you noticed any changes in your appetite?",
                       ("Significant Loss", "Some Loss", "No Change", "Some Increase", "Significant Increase")),
    QuestionDescriptor("intrusive_thoughts", "How often do you experience unwanted or intrusive thoughts?",
                       ("Never", "Rarely", "Sometimes", "Often", "Constantly")),
    QuestionDescriptor("hopelessness_feeling", "How often do you feel hopeless about the future?",
                       ("Never", "Rarely", "Sometimes", "Often", "Always")),
)

PHOBIA_QUESTIONS: tuple[QuestionDescriptor, ...] = (
    QuestionDescriptor("frequency_of_fear", "How often do you experience fear related to this phobia?",
                       ("Never", "Rarely", "Sometimes", "Often", "Always")),
    QuestionDescriptor("avoidance_level", "How much do you avoid situations related to this fear?",
                       ("Never Avoid", "Rarely Avoid", "Sometimes Avoid", "Often Avoid", "Always Avoid")),
    QuestionDescriptor("physical_symptoms_intensity",
                       "How intense are your physical symptoms (sweating, rapid heartbeat, trembling)?",
                       ("None", "Mild", "Moderate", "Severe", "Extreme")),
    QuestionDescriptor("interference_with_life", "How much does this fear interfere with your daily life?",
                       ("Not at all", "A little", "Moderately", "Significantly", "Completely")),
)


def _phobia(phobia_type: PhobiaType, display_name: str, medical_term: str,
            description: str) -> PhobiaTypeDescriptor:
    return PhobiaTypeDescriptor(
        id=phobia_type.value,
        display_name=display_name,
        medical_term=medical_term,
        description=description,
        table_key=phobia_type.table_key,
    )


PHOBIA_CATALOG: dict[PhobiaType, PhobiaTypeDescriptor] = {
    PhobiaType.ACROPHOBIA: _phobia(
        PhobiaType.ACROPHOBIA, "Fear of Heights", "Acrophobia",
        "Extreme or irrational fear of heights"),
    PhobiaType.AGORAPHOBIA: _phobia(
        PhobiaType.AGORAPHOBIA, "Fear of Open or Crowded Spaces", "Agoraphobia",
        "Fear of situations where escape might be difficult"),
    PhobiaType.SOCIAL_PHOBIA: _phobia(
        PhobiaType.SOCIAL_PHOBIA, "Fear of Social Situations",
        "Social Phobia (Social Anxiety Disorder)",
        "Intense fear of social or performance situations"),
    PhobiaType.CLAUSTROPHOBIA: _phobia(
        PhobiaType.CLAUSTROPHOBIA, "Fear of Confined Spaces", "Claustrophobia",
        "Fear of enclosed or tight spaces"),
    PhobiaType.ARACHNOPHOBIA: _phobia(
        PhobiaType.ARACHNOPHOBIA, "Fear of Spiders", "Arachnophobia",
        "Extreme or irrational fear of spiders"),
    PhobiaType.OPHIDIOPHOBIA: _phobia(
        PhobiaType.OPHIDIOPHOBIA, "Fear of Snakes", "Ophidiophobia",
        "Extreme fear of snakes"),
    PhobiaType.AEROPHOBIA: _phobia(
        PhobiaType.AEROPHOBIA, "Fear of Flying", "Aerophobia",
        "Fear of flying or air travel"),
    PhobiaType.HEMOPHOBIA: _phobia(
        PhobiaType.HEMOPHOBIA, "Fear of Blood", "Hemophobia",
        "Extreme fear of blood"),
    PhobiaType.CYNOPHOBIA: _phobia(
        PhobiaType.CYNOPHOBIA, "Fear of Dogs", "Cynophobia",
        "Fear of dogs or canines"),
    PhobiaType.AQUAPHOBIA: _phobia(
        PhobiaType.AQUAPHOBIA, "Fear of Water", "Aquaphobia",
        "Fear of water, particularly large bodies of water"),
}

_missing = set(PhobiaType) - set(PHOBIA_CATALOG)
if _missing:
    raise RuntimeError(f"Phobia catalog is missing entries for: {sorted(p.value for p in _missing)}")


def questions_for(survey_type: SurveyType) -> tuple[QuestionDescriptor, ...]:
    """Ordered question set for a survey family."""
    if survey_type == SurveyType.MENTAL_HEALTH:
        return MENTAL_HEALTH_QUESTIONS
    return PHOBIA_QUESTIONS


def phobia_descriptor(phobia_type: PhobiaType) -> PhobiaTypeDescriptor:
    return PHOBIA_CATALOG[phobia_type]


def table_key_for(survey_type: SurveyType, phobia_type: PhobiaType | None = None) -> str:
    """Storage partition for a survey; phobia surveys need their variant."""
    if survey_type == SurveyType.MENTAL_HEALTH:
        return MENTAL_HEALTH_TABLE
    if phobia_type is None:
        raise ValueError("Phobia surveys require a phobia type")
    return PHOBIA_CATALOG[phobia_type].table_key
