"""
Tests for Core Export Model Objects

These tests verify:
    - Defaults of freshly created objects
    - Retrieval methods
    - Column schema ordering
"""

from surveyflat.model import (
    ColumnNames,
    ResponseItem,
    SurveyItemResponse,
    SurveyQuestion,
    SurveyResponse,
    SurveyVersionPreview,
)


class TestSurveyVersionPreview:
    """Test SurveyVersionPreview objects."""

    def test_defaults(self):
        """A new version is unpublished and empty."""
        v = SurveyVersionPreview(version_id="v1")
        assert v.published == 0
        assert v.unpublished == 0
        assert v.questions == []

    def test_get_question(self):
        """Should retrieve questions by full key."""
        v = SurveyVersionPreview(questions=[SurveyQuestion(id="S.Q1"), SurveyQuestion(id="S.Q2")])
        assert v.get_question("S.Q2").id == "S.Q2"
        assert v.get_question("S.Q3") is None

    def test_independent_question_lists(self):
        a = SurveyVersionPreview()
        b = SurveyVersionPreview()
        a.questions.append(SurveyQuestion(id="S.Q1"))
        assert b.questions == []


class TestSurveyResponse:
    """Test SurveyResponse objects."""

    def test_find_response(self):
        r = SurveyResponse(responses=[
            SurveyItemResponse(key="S.Q1", response=ResponseItem(key="rg")),
        ])
        assert r.find_response("S.Q1").response.key == "rg"
        assert r.find_response("S.Q2") is None


class TestColumnNames:
    """Test ColumnNames objects."""

    def test_all_columns_order(self):
        """Fixed, context, response, then meta columns."""
        cols = ColumnNames(
            fixed_columns=["ID"],
            context_columns=["language"],
            response_columns=["S.Q1"],
            meta_columns=["S.Q1-metaPosition"],
        )
        assert cols.all_columns() == ["ID", "language", "S.Q1", "S.Q1-metaPosition"]
