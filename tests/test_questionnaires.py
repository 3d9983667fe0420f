"""
Unit tests for questionnaire definitions and the phobia catalog.
"""
import pytest

from survey_analytics.domain.questionnaires import (
    MENTAL_HEALTH_QUESTIONS,
    PHOBIA_CATALOG,
    PHOBIA_QUESTIONS,
    QuestionDescriptor,
    phobia_descriptor,
    questions_for,
    table_key_for,
)
from survey_analytics.schemas import (
    MENTAL_HEALTH_TABLE,
    MentalHealthRecord,
    PhobiaRecord,
    PhobiaType,
    SurveyType,
    record_type_for_table,
)


class TestQuestionSets:
    """Tests for the static question sets."""

    def test_question_counts(self):
        """Test question set sizes."""
        assert len(MENTAL_HEALTH_QUESTIONS) == 12
        assert len(PHOBIA_QUESTIONS) == 4

    def test_question_ids_match_record_fields(self):
        """Test each question id is a column of its record model."""
        for question in MENTAL_HEALTH_QUESTIONS:
            assert question.id in MentalHealthRecord.model_fields
        for question in PHOBIA_QUESTIONS:
            assert question.id in PhobiaRecord.model_fields

    def test_question_ids_unique(self):
        """Test question ids do not repeat."""
        ids = [q.id for q in MENTAL_HEALTH_QUESTIONS]
        assert len(ids) == len(set(ids))

    def test_questions_for(self):
        """Test lookup by survey type."""
        assert questions_for(SurveyType.MENTAL_HEALTH) is MENTAL_HEALTH_QUESTIONS
        assert questions_for(SurveyType.PHOBIA) is PHOBIA_QUESTIONS

    def test_descriptor_requires_five_labels(self):
        """Test descriptors reject a non-five-point scale."""
        with pytest.raises(ValueError):
            QuestionDescriptor("q", "Prompt?", ("Yes", "No"))

    def test_to_dict(self):
        """Test descriptor serialization."""
        data = MENTAL_HEALTH_QUESTIONS[0].to_dict()

        assert data["id"] == "stress_level"
        assert len(data["response_labels"]) == 5


class TestPhobiaCatalog:
    """Tests for the phobia type catalog."""

    def test_catalog_is_exhaustive(self):
        """Test every phobia type has a catalog entry."""
        assert set(PHOBIA_CATALOG) == set(PhobiaType)
        assert len(PHOBIA_CATALOG) == 10

    def test_table_keys_are_distinct(self):
        """Test each variant has its own partition."""
        keys = {d.table_key for d in PHOBIA_CATALOG.values()}
        assert len(keys) == 10
        assert MENTAL_HEALTH_TABLE not in keys

    def test_descriptor_lookup(self):
        """Test descriptor fields."""
        descriptor = phobia_descriptor(PhobiaType.ARACHNOPHOBIA)

        assert descriptor.id == "arachnophobia"
        assert descriptor.display_name == "Fear of Spiders"
        assert descriptor.table_key == "arachnophobia_assessments"
        assert "table_key" not in descriptor.to_dict()

    def test_table_key_for(self):
        """Test partition resolution."""
        assert table_key_for(SurveyType.MENTAL_HEALTH) == MENTAL_HEALTH_TABLE
        assert table_key_for(SurveyType.PHOBIA, PhobiaType.AQUAPHOBIA) == "aquaphobia_assessments"

    def test_phobia_table_key_requires_variant(self):
        """Test phobia surveys need a variant."""
        with pytest.raises(ValueError):
            table_key_for(SurveyType.PHOBIA)

    def test_record_type_for_table(self):
        """Test table key to record type resolution."""
        assert record_type_for_table(MENTAL_HEALTH_TABLE) is MentalHealthRecord
        assert record_type_for_table(PhobiaType.CYNOPHOBIA.table_key) is PhobiaRecord
        assert record_type_for_table("cynophobia") is None
