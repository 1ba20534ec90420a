"""
Tests for extracting version previews from stored survey definitions.
"""

import pytest

from surveyflat import constants as c
from surveyflat.definition import (
    ExtractOptions,
    get_question_type,
    get_translation,
    map_to_response_defs,
    survey_def_to_version_preview,
)
from surveyflat.errors import DefinitionParseError
from surveyflat.model import ResponseDef
from surveyflat.parser import ResponseParser


def text(s: str):
    return [{"code": "en", "parts": [{"dtype": "str", "str": s}]}]


def item(key: str, *response_components, title: str = None, **extra):
    components = []
    if title is not None:
        components.append({"role": "title", "content": text(title)})
    if response_components:
        components.append({"role": "responseGroup", "key": "rg", "items": list(response_components)})
    d = {"key": key, "components": {"role": "root", "items": components}}
    d.update(extra)
    return d


def build_survey():
    single_choice = {"role": "singleChoiceGroup", "key": "scg", "items": [
        {"role": "option", "key": "1", "content": text("Good")},
        {"role": "input", "key": "2", "content": text("Other")},
        {"role": "cloze", "key": "3", "items": [
            {"role": "text", "key": "t", "content": text("I am ")},
            {"role": "numberInput", "key": "in"},
            {"role": "dropDownGroup", "key": "dd", "items": [{"role": "option", "key": "a"}]},
        ]},
    ]}
    multiple_choice = {"role": "multipleChoiceGroup", "key": "mcg", "items": [
        {"role": "option", "key": "1"},
        {"role": "option", "key": "2"},
    ]}
    return {
        "versionId": "v1",
        "published": 100,
        "unpublished": 0,
        "surveyDefinition": {"key": "S", "items": [
            {"key": "S.G1", "items": [item("S.G1.Q1", single_choice, title="How are you?")]},
            {"key": "S.pb", "type": "pageBreak"},
            item("S.Q2", multiple_choice),
            item("S.Q3", {"role": "input", "key": "input"}, confidentialMode="replace"),
            item("S.Q4", title="Just some text"),
            item("S.Q5", {"role": "input", "key": "a"}, {"role": "numberInput", "key": "b"}),
        ]},
    }


class TestSurveyDefToVersionPreview:

    def test_version_fields(self):
        preview = survey_def_to_version_preview(build_survey())
        assert preview.version_id == "v1"
        assert preview.published == 100
        assert preview.unpublished == 0

    def test_questions(self):
        """Groups are flattened; page breaks, confidential and display-only items are skipped."""
        preview = survey_def_to_version_preview(build_survey())
        assert [q.id for q in preview.questions] == ["S.G1.Q1", "S.Q2", "S.Q5"]
        assert [q.question_type for q in preview.questions] == [
            c.QUESTION_TYPE_SINGLE_CHOICE,
            c.QUESTION_TYPE_MULTIPLE_CHOICE,
            c.QUESTION_TYPE_UNKNOWN,
        ]

    def test_single_choice_options(self):
        q = survey_def_to_version_preview(build_survey()).get_question("S.G1.Q1")
        assert len(q.responses) == 1
        assert [(o.id, o.option_type) for o in q.responses[0].options] == [
            ("1", c.OPTION_TYPE_RADIO),
            ("2", c.OPTION_TYPE_TEXT_INPUT),
            ("3", c.OPTION_TYPE_CLOZE),
            ("3.in", c.OPTION_TYPE_EMBEDDED_CLOZE_NUMBER_INPUT),
            ("3.dd", c.OPTION_TYPE_EMBEDDED_CLOZE_DROPDOWN),
        ]

    def test_no_labels_by_default(self):
        q = survey_def_to_version_preview(build_survey()).get_question("S.G1.Q1")
        assert q.title == ""
        assert all(o.label == "" for o in q.responses[0].options)

    def test_labels(self):
        preview = survey_def_to_version_preview(build_survey(), ExtractOptions(use_label_lang="en"))
        q = preview.get_question("S.G1.Q1")
        assert q.title == "How are you?"
        assert [o.label for o in q.responses[0].options][:3] == ["Good", "Other", "I am "]

    def test_include_items(self):
        preview = survey_def_to_version_preview(build_survey(), ExtractOptions(include_items=["S.Q2"]))
        assert [q.id for q in preview.questions] == ["S.Q2"]

    def test_exclude_items(self):
        preview = survey_def_to_version_preview(build_survey(), ExtractOptions(exclude_items=["S.Q2"]))
        assert "S.Q2" not in [q.id for q in preview.questions]

    def test_missing_definition(self):
        assert survey_def_to_version_preview({"versionId": "v1"}).questions == []

    def test_malformed(self):
        with pytest.raises(DefinitionParseError):
            survey_def_to_version_preview("not a survey")
        with pytest.raises(DefinitionParseError):
            survey_def_to_version_preview({"published": "yesterday"})
        with pytest.raises(DefinitionParseError):
            survey_def_to_version_preview({"surveyDefinition": {"key": "S", "items": [{"type": "x"}]}})

    def test_preview_drives_export_columns(self):
        parser = ResponseParser("S", [survey_def_to_version_preview(build_survey())])
        assert parser.columns.response_columns == sorted([
            "S.G1.Q1", "S.G1.Q1-2", "S.G1.Q1-3.in", "S.G1.Q1-3.dd",
            "S.Q2-1", "S.Q2-2",
            "S.Q5-a", "S.Q5-b",
        ])


class TestMapToResponseDefs:

    def test_input_roles(self):
        slot = map_to_response_defs({"role": "dateInput", "key": "d"})[0]
        assert (slot.id, slot.response_type) == ("d", c.QUESTION_TYPE_DATE_INPUT)
        assert map_to_response_defs({"role": "consent", "key": "c"})[0].response_type == c.QUESTION_TYPE_CONSENT

    def test_role_with_suffix(self):
        assert map_to_response_defs({"role": "input:custom", "key": "x"})[0].response_type == c.QUESTION_TYPE_TEXT_INPUT
        assert map_to_response_defs({"role": "widget:custom", "key": "x"})[0].response_type == c.QUESTION_TYPE_UNKNOWN
        assert map_to_response_defs({"role": ":custom", "key": "x"})[0].response_type == c.QUESTION_TYPE_UNKNOWN

    def test_ignored_roles(self):
        assert map_to_response_defs({"role": "text", "key": "t"}) == []
        assert map_to_response_defs(None) == []

    def test_likert_group(self):
        slots = map_to_response_defs({"role": "likertGroup", "key": "lg", "items": [
            {"role": "text", "key": "t"},
            {"role": "likert", "key": "row1", "items": [{"role": "option", "key": "1"}]},
            {"role": "likert", "key": "row2", "items": [{"role": "option", "key": "1"}]},
        ]})
        assert [s.id for s in slots] == ["row1", "row2"]
        assert get_question_type(slots) == c.QUESTION_TYPE_LIKERT_GROUP

    def test_matrix(self):
        slots = map_to_response_defs({"role": "matrix", "key": "mat", "items": [
            {"role": "responseRow", "key": "r1", "items": [
                {"role": "dropDownGroup", "key": "c1", "items": [{"role": "option", "key": "o1"}]},
                {"role": "input", "key": "c2"},
            ]},
            {"role": "radioRow", "key": "r2", "items": [
                {"role": "label", "key": "l"},
                {"role": "option", "key": "a"},
            ]},
        ]})
        assert [(s.id, s.response_type) for s in slots] == [
            ("mat.r1.c1", c.QUESTION_TYPE_MATRIX_DROPDOWN),
            ("mat.r1.c2", c.QUESTION_TYPE_MATRIX_INPUT),
            ("mat.r2", c.QUESTION_TYPE_MATRIX_RADIO_ROW),
        ]
        assert [o.id for o in slots[2].options] == ["a"]
        assert get_question_type(slots) == c.QUESTION_TYPE_MATRIX

    def test_responsive_matrix(self):
        slots = map_to_response_defs({"role": "responsiveMatrix", "key": "rm", "items": [
            {"role": "columns", "items": [{"key": "c1"}, {"key": "c2"}]},
            {"role": "rows", "items": [{"role": "category", "key": "cat"}, {"key": "r1"}]},
        ]})
        assert [s.id for s in slots] == ["r1-c1", "r1-c2"]
        assert get_question_type(slots) == c.QUESTION_TYPE_RESPONSIVE_TABLE

    def test_cloze(self):
        slot = map_to_response_defs({"role": "cloze", "key": "cloze", "items": [
            {"role": "text", "key": "t"},
            {"role": "input", "key": "in"},
            {"role": "dropDownGroup", "key": "dd"},
        ]})[0]
        assert [(o.id, o.option_type) for o in slot.options] == [
            ("in", c.OPTION_TYPE_TEXT_INPUT),
            ("dd", c.OPTION_TYPE_DROPDOWN),
        ]


class TestQuestionType:

    def test_empty(self):
        assert get_question_type([]) == c.QUESTION_TYPE_EMPTY

    def test_uniform(self):
        slots = [ResponseDef(id="a", response_type="text"), ResponseDef(id="b", response_type="text")]
        assert get_question_type(slots) == "text"

    def test_mixed(self):
        slots = [ResponseDef(id="a", response_type="text"), ResponseDef(id="b", response_type="number")]
        assert get_question_type(slots) == c.QUESTION_TYPE_UNKNOWN


class TestTranslation:

    def test_placeholders(self):
        content = [{"code": "en", "parts": [
            {"dtype": "str", "str": "Age "},
            {"dtype": "num", "num": 3},
            {"dtype": "exp", "exp": {"name": "getAttribute"}},
        ]}]
        assert get_translation(content, "en") == "Age <num><exp>"

    def test_missing_language(self):
        assert get_translation(text("Hello"), "de") is None
        assert get_translation(None, "en") is None
