"""
Survey Analytics - Response Collector.
Walks one survey instance through its questions and demographics, then persists once.
"""
from __future__ import annotations
from enum import Enum
from typing import Any

import structlog

from ..exceptions import StoreError, ValidationError
from ..infrastructure.repository import RecordStore
from ..schemas import (
    AgeGroup, MentalHealthRecord, PhobiaRecord, PhobiaType, SurveyRecord, SurveyType,
)
from .questionnaires import QuestionDescriptor, questions_for, table_key_for
from .scoring import ScoringResult, score_mental_health, score_phobia

logger = structlog.get_logger(__name__)


class CollectorState(str, Enum):
    """Response collector states."""
    PHOBIA_SELECTION = "phobia_selection"
    QUESTION = "question"
    DEMOGRAPHICS = "demographics"
    SUBMITTED = "submitted"


class ResponseCollector:
    """
    Stateful walk through a single survey instance.

    Phobia surveys start in PHOBIA_SELECTION unless a variant is given up
    front. Answering the last question moves to DEMOGRAPHICS; a successful
    submit moves to SUBMITTED. A failed insert leaves the collector in
    DEMOGRAPHICS so the same answers can be resubmitted.
    """

    def __init__(
        self,
        survey_type: SurveyType,
        store: RecordStore,
        phobia_type: PhobiaType | None = None,
    ) -> None:
        self._survey_type = survey_type
        self._store = store
        self._questions = questions_for(survey_type)
        self._phobia_type = phobia_type if survey_type == SurveyType.PHOBIA else None
        self._responses: dict[str, int] = {}
        self._index = 0
        self._region: str | None = None
        self._age_group: AgeGroup | None = None
        self._duration_months: int | None = None
        self._result: ScoringResult | None = None
        if survey_type == SurveyType.PHOBIA and self._phobia_type is None:
            self._state = CollectorState.PHOBIA_SELECTION
        else:
            self._state = CollectorState.QUESTION

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def survey_type(self) -> SurveyType:
        return self._survey_type

    @property
    def phobia_type(self) -> PhobiaType | None:
        return self._phobia_type

    @property
    def question_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> QuestionDescriptor | None:
        if self._state != CollectorState.QUESTION:
            return None
        return self._questions[self._index]

    @property
    def responses(self) -> dict[str, int]:
        return dict(self._responses)

    @property
    def progress(self) -> tuple[int, int]:
        """(answered, total) question counts."""
        return len(self._responses), len(self._questions)

    @property
    def result(self) -> ScoringResult | None:
        return self._result

    def _require_state(self, *states: CollectorState) -> None:
        if self._state not in states:
            raise ValidationError(
                f"Action not allowed in state {self._state.value}",
                user_message="This step is not available right now.",
                details={"state": self._state.value},
            )

    def select_phobia(self, phobia_type: PhobiaType) -> None:
        self._require_state(CollectorState.PHOBIA_SELECTION)
        self._phobia_type = PhobiaType(phobia_type)
        self._state = CollectorState.QUESTION
        logger.debug("phobia_selected", phobia_type=self._phobia_type.value)

    def answer(self, value: int) -> CollectorState:
        """Record an answer for the current question and advance."""
        self._require_state(CollectorState.QUESTION)
        question = self._questions[self._index]
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
            raise ValidationError(
                f"Response for {question.id} must be an integer between 1 and 5",
                field=question.id, value=value,
            )
        self._responses[question.id] = value
        if self._index < len(self._questions) - 1:
            self._index += 1
        else:
            self._state = CollectorState.DEMOGRAPHICS
        return self._state

    def previous(self) -> None:
        """Step back one question."""
        if self._state == CollectorState.DEMOGRAPHICS:
            self._state = CollectorState.QUESTION
            return
        self._require_state(CollectorState.QUESTION)
        if self._index == 0:
            raise ValidationError("Already at the first question",
                                  user_message="There is no previous question.")
        self._index -= 1

    def set_demographics(
        self,
        region: str,
        age_group: AgeGroup | str,
        duration_months: int | None = None,
    ) -> None:
        self._require_state(CollectorState.DEMOGRAPHICS)
        self._region = region
        try:
            self._age_group = AgeGroup(age_group)
        except ValueError:
            self._age_group = None
            raise ValidationError(f"Unknown age group: {age_group}", field="age_group", value=age_group)
        self._duration_months = duration_months

    def _validate(self) -> None:
        missing = [q.id for q in self._questions if q.id not in self._responses]
        if missing:
            raise ValidationError("Response set is incomplete", field=missing[0],
                                  details={"missing": missing})
        if not self._region or not self._region.strip():
            raise ValidationError("Region is required", field="region", value=self._region)
        if self._age_group is None:
            raise ValidationError("Age group is required", field="age_group")
        if self._survey_type == SurveyType.PHOBIA:
            if self._phobia_type is None:
                raise ValidationError("Phobia type is required", field="phobia_type")
            if (self._duration_months is None or isinstance(self._duration_months, bool)
                    or self._duration_months < 0):
                raise ValidationError("Duration must be a non-negative number of months",
                                      field="duration_months", value=self._duration_months)

    def _build_record(self, result: ScoringResult) -> SurveyRecord:
        common: dict[str, Any] = {
            **self._responses,
            "region": self._region.strip(),
            "age_group": self._age_group,
        }
        if self._survey_type == SurveyType.MENTAL_HEALTH:
            return MentalHealthRecord(
                **common, wellness_score=result.score, severity_category=result.category,
            )
        return PhobiaRecord(
            **common, duration_months=self._duration_months,
            intensity_percentage=result.score, risk_level=result.category,
        )

    async def submit(self) -> ScoringResult:
        """Score the completed response set and persist it with a single insert."""
        self._require_state(CollectorState.DEMOGRAPHICS)
        self._validate()
        if self._survey_type == SurveyType.MENTAL_HEALTH:
            result = score_mental_health(self._responses)
        else:
            result = score_phobia(self._responses)
        record = self._build_record(result)
        table_key = table_key_for(self._survey_type, self._phobia_type)
        try:
            await self._store.insert(table_key, record)
        except StoreError:
            logger.warning("survey_submission_failed", table=table_key)
            raise
        self._result = result
        self._state = CollectorState.SUBMITTED
        logger.info("survey_submitted", survey_type=self._survey_type.value, table=table_key,
                    score=result.score, category=result.label)
        return result
