#!/usr/bin/env python3
"""
Complete Pipeline Demo: Survey Definition → Version Preview → Exports

Shows the full workflow:
1. Extract version previews from two stored survey versions
2. Build the export column schema across both versions
3. Export responses as wide CSV, long CSV and JSON
4. Export the codebook
"""

import io
import logging

from surveyflat.definition import ExtractOptions, survey_def_to_version_preview
from surveyflat.exporter import ResponseExporter, export_responses
from surveyflat.model import ResponseItem, SurveyItemResponse, SurveyResponse
from surveyflat.parser import ResponseParser
from surveyflat.survey_info import SurveyInfoExporter


def en(text):
    return [{"code": "en", "parts": [{"dtype": "str", "str": text}]}]


def build_survey_version(version_id, published, unpublished, with_age):
    items = [{
        "key": "weekly.Q1",
        "components": {"role": "root", "items": [
            {"role": "title", "content": en("Did you have symptoms?")},
            {"role": "responseGroup", "key": "rg", "items": [
                {"role": "singleChoiceGroup", "key": "scg", "items": [
                    {"role": "option", "key": "yes", "content": en("Yes")},
                    {"role": "option", "key": "no", "content": en("No")},
                    {"role": "input", "key": "other", "content": en("Other")},
                ]},
            ]},
        ]},
    }]
    if with_age:
        items.append({
            "key": "weekly.Q2",
            "components": {"role": "root", "items": [
                {"role": "title", "content": en("Age")},
                {"role": "responseGroup", "key": "rg", "items": [{"role": "numberInput", "key": "age"}]},
            ]},
        })
    return {
        "versionId": version_id,
        "published": published,
        "unpublished": unpublished,
        "surveyDefinition": {"key": "weekly", "items": items},
    }


def build_response(rid, version_id, submitted_at, choice, age=None):
    answers = [SurveyItemResponse(key="weekly.Q1", response=ResponseItem(key="rg", items=[
        ResponseItem(key="scg", items=[ResponseItem(key=choice)]),
    ]))]
    if age is not None:
        answers.append(SurveyItemResponse(key="weekly.Q2", response=ResponseItem(key="rg", items=[
            ResponseItem(key="age", value=str(age)),
        ])))
    return SurveyResponse(
        id=rid, key="weekly", participant_id="p" + rid, version_id=version_id,
        opened_at=submitted_at - 60, submitted_at=submitted_at, responses=answers,
        context={"language": "en"},
    )


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s - %(name)s - %(message)s")

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Definition → Preview → Exports")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Extract version previews
    # =========================================================================
    print("\n1. EXTRACTING VERSIONS...")
    options = ExtractOptions(use_label_lang="en")
    versions = [
        survey_def_to_version_preview(build_survey_version("v1", 1000, 2000, with_age=False), options),
        survey_def_to_version_preview(build_survey_version("v2", 2000, 0, with_age=True), options),
    ]
    for v in versions:
        print(f"   ✓ {v.version_id}: {[q.id for q in v.questions]}")

    # =========================================================================
    # STEP 2: Column schema
    # =========================================================================
    print("\n2. BUILDING COLUMN SCHEMA...")
    parser = ResponseParser("weekly", versions, short_keys=True)
    print(f"   ✓ Columns: {parser.columns.all_columns()}")

    responses = [
        build_response("1", "v1", 1500, "yes"),
        build_response("2", "v2", 2500, "no", age=42),
        build_response("3", "", 500, "yes"),
    ]

    # =========================================================================
    # STEP 3: Response exports
    # =========================================================================
    for export_format in ("wide", "long", "json"):
        print(f"\n3. EXPORTING RESPONSES ({export_format})...")
        sink = io.StringIO()
        summary = export_responses(ResponseExporter(parser, sink, export_format), responses)
        print(f"   ✓ Written: {summary.written}, skipped: {summary.skipped}")
        print(sink.getvalue())

    # =========================================================================
    # STEP 4: Codebook
    # =========================================================================
    print("\n4. EXPORTING CODEBOOK...")
    sink = io.StringIO()
    SurveyInfoExporter(versions, "weekly", short_keys=True).write_csv(sink)
    print(sink.getvalue())

    print("=" * 80)
    print("✓ DEMO COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
