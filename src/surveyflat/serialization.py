"""
Serialization helpers for export model objects.

Converts between dataclasses and the dict form stored by the study system
(camelCase keys), and loads/dumps lists of versions and responses as
JSON or YAML. The structure is kept explicit rather than derived.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List

import yaml

from surveyflat.model import (
    ResponseDef,
    ResponseItem,
    ResponseMeta,
    ResponseOption,
    SurveyItemResponse,
    SurveyQuestion,
    SurveyResponse,
    SurveyVersionPreview,
)


# =========================================================================
# Version previews
# =========================================================================

def option_to_dict(o: ResponseOption) -> Dict[str, Any]:
    return {"id": o.id, "optionType": o.option_type, "label": o.label}


def option_from_dict(d: Dict[str, Any]) -> ResponseOption:
    return ResponseOption(id=d["id"], option_type=d.get("optionType", ""), label=d.get("label", ""))


def response_def_to_dict(r: ResponseDef) -> Dict[str, Any]:
    return {
        "id": r.id,
        "responseType": r.response_type,
        "label": r.label,
        "options": [option_to_dict(o) for o in r.options],
    }


def response_def_from_dict(d: Dict[str, Any]) -> ResponseDef:
    return ResponseDef(
        id=d["id"],
        response_type=d.get("responseType", ""),
        label=d.get("label", ""),
        options=[option_from_dict(o) for o in d.get("options") or []],
    )


def question_to_dict(q: SurveyQuestion) -> Dict[str, Any]:
    return {
        "id": q.id,
        "title": q.title,
        "questionType": q.question_type,
        "responses": [response_def_to_dict(r) for r in q.responses],
    }


def question_from_dict(d: Dict[str, Any]) -> SurveyQuestion:
    return SurveyQuestion(
        id=d["id"],
        title=d.get("title", ""),
        question_type=d.get("questionType", ""),
        responses=[response_def_from_dict(r) for r in d.get("responses") or []],
    )


def version_to_dict(v: SurveyVersionPreview) -> Dict[str, Any]:
    return {
        "versionId": v.version_id,
        "published": v.published,
        "unpublished": v.unpublished,
        "questions": [question_to_dict(q) for q in v.questions],
    }


def version_from_dict(d: Dict[str, Any]) -> SurveyVersionPreview:
    return SurveyVersionPreview(
        version_id=d.get("versionId", ""),
        published=int(d.get("published") or 0),
        unpublished=int(d.get("unpublished") or 0),
        questions=[question_from_dict(q) for q in d.get("questions") or []],
    )


# =========================================================================
# Responses
# =========================================================================

def response_item_to_dict(item: ResponseItem) -> Dict[str, Any]:
    """Dict form of an answer node; empty value, dtype and items are omitted."""
    d: Dict[str, Any] = {"key": item.key}
    if item.value:
        d["value"] = item.value
    if item.dtype:
        d["dtype"] = item.dtype
    if item.items:
        d["items"] = [response_item_to_dict(i) for i in item.items]
    return d


def response_item_from_dict(d: Dict[str, Any] | None) -> ResponseItem | None:
    if d is None:
        return None
    return ResponseItem(
        key=d["key"],
        value=d.get("value"),
        dtype=d.get("dtype"),
        items=[response_item_from_dict(i) for i in d.get("items") or []],
    )


def meta_to_dict(m: ResponseMeta) -> Dict[str, Any]:
    return {
        "position": m.position,
        "localeCode": m.locale_code,
        "rendered": list(m.rendered),
        "displayed": list(m.displayed),
        "responded": list(m.responded),
    }


def meta_from_dict(d: Dict[str, Any] | None) -> ResponseMeta:
    d = d or {}
    return ResponseMeta(
        position=int(d.get("position") or 0),
        locale_code=d.get("localeCode", ""),
        rendered=list(d.get("rendered") or []),
        displayed=list(d.get("displayed") or []),
        responded=list(d.get("responded") or []),
    )


def item_response_to_dict(r: SurveyItemResponse) -> Dict[str, Any]:
    d: Dict[str, Any] = {"key": r.key, "meta": meta_to_dict(r.meta)}
    if r.response is not None:
        d["response"] = response_item_to_dict(r.response)
    if r.items:
        d["items"] = [item_response_to_dict(i) for i in r.items]
    if r.confidential_mode:
        d["confidentialMode"] = r.confidential_mode
    return d


def item_response_from_dict(d: Dict[str, Any]) -> SurveyItemResponse:
    return SurveyItemResponse(
        key=d["key"],
        meta=meta_from_dict(d.get("meta")),
        response=response_item_from_dict(d.get("response")),
        items=[item_response_from_dict(i) for i in d.get("items") or []],
        confidential_mode=d.get("confidentialMode", ""),
    )


def survey_response_to_dict(r: SurveyResponse) -> Dict[str, Any]:
    return {
        "id": r.id,
        "key": r.key,
        "participantId": r.participant_id,
        "versionId": r.version_id,
        "openedAt": r.opened_at,
        "submittedAt": r.submitted_at,
        "arrivedAt": r.arrived_at,
        "responses": [item_response_to_dict(i) for i in r.responses],
        "context": dict(r.context),
    }


def survey_response_from_dict(d: Dict[str, Any]) -> SurveyResponse:
    return SurveyResponse(
        id=str(d.get("id", "")),
        key=d.get("key", ""),
        participant_id=d.get("participantId", ""),
        version_id=d.get("versionId", ""),
        opened_at=int(d.get("openedAt") or 0),
        submitted_at=int(d.get("submittedAt") or 0),
        arrived_at=int(d.get("arrivedAt") or 0),
        responses=[item_response_from_dict(i) for i in d.get("responses") or []],
        context=dict(d.get("context") or {}),
    )


# =========================================================================
# Documents
# =========================================================================

def versions_from_json(s: str) -> List[SurveyVersionPreview]:
    return [version_from_dict(v) for v in json.loads(s)]


def versions_to_json(versions: List[SurveyVersionPreview]) -> str:
    return json.dumps([version_to_dict(v) for v in versions], sort_keys=True)


def versions_from_yaml(s: str) -> List[SurveyVersionPreview]:
    return [version_from_dict(v) for v in yaml.safe_load(s) or []]


def versions_to_yaml(versions: List[SurveyVersionPreview]) -> str:
    return yaml.safe_dump([version_to_dict(v) for v in versions])


def responses_from_json(s: str) -> List[SurveyResponse]:
    return [survey_response_from_dict(r) for r in json.loads(s)]


def responses_from_yaml(s: str) -> List[SurveyResponse]:
    return [survey_response_from_dict(r) for r in yaml.safe_load(s) or []]


def iter_responses_jsonl(lines) -> Iterator[SurveyResponse]:
    """Lazily read responses from JSON lines (one response document per line)."""
    for line in lines:
        line = line.strip()
        if line:
            yield survey_response_from_dict(json.loads(line))


def json_default(obj: Any) -> Any:
    """`default` hook for json.dumps so answer nodes serialize in their dict form."""
    if isinstance(obj, ResponseItem):
        return response_item_to_dict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
