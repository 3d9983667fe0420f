"""
Survey Analytics - Record Schemas.

Enumerations and persisted record models for the mental-wellness and
phobia-intensity surveys. Field names match the stored table columns and
must stay stable for aggregation and export compatibility.

Architecture Layer: Domain
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field

MENTAL_HEALTH_TABLE = "mental_health_responses"


class SurveyType(str, Enum):
    """Questionnaire families."""
    MENTAL_HEALTH = "mental_health"
    PHOBIA = "phobia"


class SeverityCategory(str, Enum):
    """Mental-wellness severity buckets, best to worst."""
    STABLE = "Stable"
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"


class RiskLevel(str, Enum):
    """Phobia risk buckets, lowest to highest intensity."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    SEVERE = "Severe"


class AgeGroup(str, Enum):
    """Self-reported age brackets."""
    AGE_18_24 = "18-24"
    AGE_25_34 = "25-34"
    AGE_35_44 = "35-44"
    AGE_45_54 = "45-54"
    AGE_55_64 = "55-64"
    AGE_65_PLUS = "65+"


class PhobiaType(str, Enum):
    """Supported phobia variants. Each maps to its own storage table."""
    ACROPHOBIA = "acrophobia"
    AGORAPHOBIA = "agoraphobia"
    SOCIAL_PHOBIA = "social_phobia"
    CLAUSTROPHOBIA = "claustrophobia"
    ARACHNOPHOBIA = "arachnophobia"
    OPHIDIOPHOBIA = "ophidiophobia"
    AEROPHOBIA = "aerophobia"
    HEMOPHOBIA = "hemophobia"
    CYNOPHOBIA = "cynophobia"
    AQUAPHOBIA = "aquaphobia"

    @property
    def table_key(self) -> str:
        """Storage partition for this variant."""
        return f"{self.value}_assessments"


Likert = Annotated[int, Field(ge=1, le=5)]


class MentalHealthRecord(BaseModel):
    """Anonymized mental-wellness survey response."""
    survey_type: ClassVar[SurveyType] = SurveyType.MENTAL_HEALTH
    bucket_labels: ClassVar[tuple[str, ...]] = tuple(c.value for c in SeverityCategory)

    stress_level: Likert
    anxiety_level: Likert
    mood_level: Likert
    sleep_quality: Likert
    focus_ability: Likert
    emotional_regulation: Likert
    social_connection: Likert
    physical_energy: Likert
    motivation_level: Likert
    appetite_changes: Likert
    intrusive_thoughts: Likert
    hopelessness_feeling: Likert
    wellness_score: int = Field(ge=0, le=100)
    severity_category: SeverityCategory
    region: str = ""
    age_group: AgeGroup
    submitted_at: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def score(self) -> int:
        return self.wellness_score

    @property
    def bucket(self) -> str:
        return self.severity_category.value


class PhobiaRecord(BaseModel):
    """Anonymized phobia-intensity survey response."""
    survey_type: ClassVar[SurveyType] = SurveyType.PHOBIA
    bucket_labels: ClassVar[tuple[str, ...]] = tuple(r.value for r in RiskLevel)

    frequency_of_fear: Likert
    avoidance_level: Likert
    physical_symptoms_intensity: Likert
    interference_with_life: Likert
    duration_months: int = Field(ge=0)
    intensity_percentage: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    region: str = ""
    age_group: AgeGroup
    submitted_at: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def score(self) -> int:
        return self.intensity_percentage

    @property
    def bucket(self) -> str:
        return self.risk_level.value


SurveyRecord = Union[MentalHealthRecord, PhobiaRecord]


def record_type_for_table(table_key: str) -> type[MentalHealthRecord] | type[PhobiaRecord] | None:
    """Resolve the record model stored in a table, or None for unknown keys."""
    if table_key == MENTAL_HEALTH_TABLE:
        return MentalHealthRecord
    if any(p.table_key == table_key for p in PhobiaType):
        return PhobiaRecord
    return None
