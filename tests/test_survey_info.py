"""
Tests for the survey info (codebook) export.
"""

import csv
import io

from surveyflat import constants as c
from surveyflat.model import ResponseDef, ResponseOption, SurveyQuestion, SurveyVersionPreview
from surveyflat.survey_info import SURVEY_INFO_HEADER, SurveyInfoExporter


def build_versions(version_id: str = "v1"):
    return [SurveyVersionPreview(version_id=version_id, published=100, questions=[
        SurveyQuestion(id="S.Q1", title="T", question_type=c.QUESTION_TYPE_SINGLE_CHOICE, responses=[
            ResponseDef(id="scg", response_type=c.QUESTION_TYPE_SINGLE_CHOICE, options=[
                ResponseOption(id="1", option_type=c.OPTION_TYPE_RADIO, label="Yes"),
                ResponseOption(id="2", option_type=c.OPTION_TYPE_RADIO, label="No"),
            ]),
        ]),
        SurveyQuestion(id="S.Q2", question_type=c.QUESTION_TYPE_TEXT_INPUT, responses=[
            ResponseDef(id="input", response_type=c.QUESTION_TYPE_TEXT_INPUT),
        ]),
    ])]


class TestSurveyInfoRows:

    def test_one_row_per_option(self):
        rows = SurveyInfoExporter(build_versions(), "S").rows()
        assert rows == [
            ["S", "v1", "S.Q1", "T", "scg", "single_choice", "1", "radio", "Yes"],
            ["S", "v1", "S.Q1", "T", "scg", "single_choice", "2", "radio", "No"],
            ["S", "v1", "S.Q2", "", "input", "text", "", "", ""],
        ]

    def test_missing_version_id_uses_index(self):
        rows = SurveyInfoExporter(build_versions(version_id=""), "S").rows()
        assert {r[1] for r in rows} == {"0"}

    def test_short_keys(self):
        versions = build_versions()
        exporter = SurveyInfoExporter(versions, "S", short_keys=True)
        assert [q.id for q in exporter.get_survey_infos()[0].questions] == ["Q1", "Q2"]
        assert versions[0].questions[0].id == "S.Q1"


class TestSurveyInfoCsv:

    def test_write_csv(self):
        sink = io.StringIO()
        SurveyInfoExporter(build_versions(), "S").write_csv(sink)
        rows = list(csv.reader(io.StringIO(sink.getvalue())))
        assert rows[0] == SURVEY_INFO_HEADER
        assert len(rows) == 4
