"""
Tests for response parsing and row rendering.
"""

import pytest

from surveyflat import constants as c
from surveyflat.errors import VersionNotFoundError
from surveyflat.model import (
    IncludeMeta,
    ResponseDef,
    ResponseItem,
    ResponseMeta,
    ResponseOption,
    SurveyItemResponse,
    SurveyQuestion,
    SurveyResponse,
    SurveyVersionPreview,
)
from surveyflat.parser import ResponseParser, short_key_versions, strip_root_key, value_to_str


def build_versions():
    q1 = SurveyQuestion(id="S.Q1", question_type=c.QUESTION_TYPE_SINGLE_CHOICE, responses=[
        ResponseDef(id="scg", options=[
            ResponseOption(id="1", option_type=c.OPTION_TYPE_RADIO),
            ResponseOption(id="2", option_type=c.OPTION_TYPE_TEXT_INPUT),
        ]),
    ])
    q2 = SurveyQuestion(id="S.Q2", question_type=c.QUESTION_TYPE_TEXT_INPUT, responses=[ResponseDef(id="input")])
    return [
        SurveyVersionPreview(version_id="v1", published=100, unpublished=200, questions=[q1]),
        SurveyVersionPreview(version_id="v2", published=200, questions=[q1, q2]),
    ]


def q1_answer(option: str = "1", value=None, meta: ResponseMeta = None) -> SurveyItemResponse:
    return SurveyItemResponse(
        key="S.Q1",
        meta=meta or ResponseMeta(),
        response=ResponseItem(key="rg", items=[
            ResponseItem(key="scg", items=[ResponseItem(key=option, value=value)]),
        ]),
    )


def build_response(version_id="v1", submitted_at=150, answers=None) -> SurveyResponse:
    return SurveyResponse(
        id="r1",
        key="S",
        participant_id="p1",
        version_id=version_id,
        opened_at=140,
        submitted_at=submitted_at,
        responses=answers if answers is not None else [q1_answer()],
        context={"language": "en"},
    )


class TestValueToStr:

    def test_scalars(self):
        assert value_to_str(None) == ""
        assert value_to_str("x") == "x"
        assert value_to_str(True) == "TRUE"
        assert value_to_str(False) == "FALSE"
        assert value_to_str(42) == "42"
        assert value_to_str(3.14) == "3.140000"

    def test_answer_node_as_json(self):
        assert value_to_str(ResponseItem(key="1", value="answer")) == '{"key":"1","value":"answer"}'

    def test_list_as_json(self):
        assert value_to_str([1, 2]) == "[1,2]"


class TestShortKeys:

    def test_strip_root_key(self):
        assert strip_root_key("S.Q1", "S") == "Q1"
        assert strip_root_key("Other.Q1", "S") == "Other.Q1"
        assert strip_root_key("S.Q1", "") == "S.Q1"

    def test_input_versions_are_not_modified(self):
        versions = build_versions()
        shortened = short_key_versions(versions, "S")
        assert [q.id for q in shortened[1].questions] == ["Q1", "Q2"]
        assert [q.id for q in versions[1].questions] == ["S.Q1", "S.Q2"]

    def test_parser_with_short_keys(self):
        versions = build_versions()
        parser = ResponseParser("S", versions, short_keys=True)
        assert parser.columns.response_columns == ["Q1", "Q1-2", "Q2"]

        parsed = parser.parse_response(build_response())
        assert parsed.responses["Q1"] == "1"
        assert versions[0].questions[0].id == "S.Q1"


class TestParseResponse:

    def test_answers(self):
        parser = ResponseParser("S", build_versions())
        parsed = parser.parse_response(build_response(answers=[q1_answer("2", "other text")]))
        assert parsed.id == "r1"
        assert parsed.participant_id == "p1"
        assert parsed.version == "v1"
        assert parsed.responses == {"S.Q1": "2", "S.Q1-2": "other text"}

    def test_version_annotated_when_resolved_differently(self):
        parser = ResponseParser("S", build_versions())
        assert parser.parse_response(build_response("old", 250)).version == "old (v2)"
        assert parser.parse_response(build_response("", 250)).version == "v2"

    def test_unresolvable_version(self):
        parser = ResponseParser("S", [])
        with pytest.raises(VersionNotFoundError):
            parser.parse_response(build_response())

    def test_first_duplicate_answer_wins(self):
        parser = ResponseParser("S", build_versions())
        parsed = parser.parse_response(build_response(answers=[q1_answer("1"), q1_answer("2", "x")]))
        assert parsed.responses["S.Q1"] == "1"

    def test_raw_response_not_modified(self):
        raw = build_response()
        ResponseParser("S", build_versions(), short_keys=True).parse_response(raw)
        assert raw == build_response()

    def test_meta(self):
        parser = ResponseParser("S", build_versions(), include_meta=IncludeMeta(responded_times=True, position=True))
        meta = ResponseMeta(position=3, responded=[160])
        parsed = parser.parse_response(build_response("v2", 250, [q1_answer(meta=meta)]))

        assert parsed.meta["S.Q1-" + c.META_RESPONSE] == [160]
        assert parsed.meta["S.Q1-" + c.META_POSITION] == 3
        assert parsed.meta["S.Q2-" + c.META_RESPONSE] == []
        assert parsed.meta["S.Q2-" + c.META_POSITION] == 0


class TestRendering:

    def test_wide_row(self):
        """Columns of questions missing from the response's version stay empty."""
        parser = ResponseParser("S", build_versions())
        row = parser.to_row(parser.parse_response(build_response()))
        assert parser.columns.all_columns() == [
            "ID", "participantID", "version", "opened", "submitted",
            "language", "engineVersion", "session",
            "S.Q1", "S.Q1-2", "S.Q2",
        ]
        assert row == ["r1", "p1", "v1", "140", "150", "en", "", "", "1", "", ""]

    def test_meta_cells(self):
        parser = ResponseParser("S", build_versions(), include_meta=IncludeMeta(responded_times=True))
        meta = ResponseMeta(responded=[160, 170])
        flat = parser.to_flat_dict(parser.parse_response(build_response(answers=[q1_answer(meta=meta)])))
        assert flat["S.Q1-metaResponse"] == [160, 170]
        assert parser.to_row(parser.parse_response(build_response(answers=[q1_answer(meta=meta)])))[-2:] == [
            "[160,170]", "",
        ]

    def test_flat_dict_without_meta(self):
        parser = ResponseParser("S", build_versions())
        flat = parser.to_flat_dict(parser.parse_response(build_response()))
        assert list(flat) == parser.columns.all_columns()

    def test_long_rows(self):
        parser = ResponseParser("S", build_versions())
        rows = parser.to_long_rows(parser.parse_response(build_response()))
        assert parser.long_header()[-2:] == ["responseSlot", "value"]
        assert [r[-2:] for r in rows] == [["S.Q1", "1"], ["S.Q1-2", ""], ["S.Q2", ""]]
        assert all(r[:5] == ["r1", "p1", "v1", "140", "150"] for r in rows)
