"""
Response parsing: raw survey responses to flat rows.

A ResponseParser is built once per export. It fixes the column schema for
all versions of the survey, then turns each raw response into a
ParsedResponse and renders it as a wide row, long rows or a flat record.
"""

import dataclasses
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from surveyflat import constants as c
from surveyflat.columns import build_column_names
from surveyflat.handlers import HandlerRegistry, default_registry
from surveyflat.model import (
    ColumnNames,
    IncludeMeta,
    ParsedResponse,
    SurveyResponse,
    SurveyVersionPreview,
)
from surveyflat.serialization import json_default
from surveyflat.version_resolver import resolve_version

logger = logging.getLogger(__name__)


def value_to_str(value: Any) -> str:
    """
    Render a cell value.

    None -> "", bools -> TRUE/FALSE, ints as decimals, floats with six
    decimals, answer nodes, lists and dicts as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return c.TRUE_VALUE if value else c.FALSE_VALUE
    if isinstance(value, int):
        return "%d" % value
    if isinstance(value, float):
        return "%f" % value
    return json.dumps(value, default=json_default, separators=(",", ":"))


def strip_root_key(key: str, survey_key: str) -> str:
    prefix = survey_key + "."
    if survey_key and key.startswith(prefix):
        return key[len(prefix):]
    return key


def short_key_versions(versions: Sequence[SurveyVersionPreview], survey_key: str) -> List[SurveyVersionPreview]:
    return [
        dataclasses.replace(
            v,
            questions=[dataclasses.replace(q, id=strip_root_key(q.id, survey_key)) for q in v.questions],
        )
        for v in versions
    ]


class ResponseParser:
    """
    Flattens raw responses of one survey against all its versions.

    Args:
        survey_key: Key of the survey, the prefix stripped by `short_keys`
        versions: All versions of the survey (read-only)
        short_keys: Strip "<survey_key>." from question and answer keys
        include_meta: Metadata columns to export (None = none)
        question_option_sep: Separator between question and option keys
        extra_context_columns: Context keys beyond the defaults
        registry: Question type handlers (defaults to default_registry())
    """

    def __init__(
        self,
        survey_key: str,
        versions: Sequence[SurveyVersionPreview],
        short_keys: bool = False,
        include_meta: Optional[IncludeMeta] = None,
        question_option_sep: str = c.DEFAULT_QUESTION_OPTION_SEPARATOR,
        extra_context_columns: Optional[Sequence[str]] = None,
        registry: Optional[HandlerRegistry] = None,
    ):
        self.survey_key = survey_key
        self.short_keys = short_keys
        self.include_meta = include_meta
        self.question_option_sep = question_option_sep
        self.registry = registry if registry is not None else default_registry()

        if short_keys:
            self.versions = short_key_versions(versions, survey_key)
        else:
            self.versions = list(versions)

        self.columns: ColumnNames = build_column_names(
            self.versions,
            self.registry,
            question_option_sep,
            include_meta=include_meta,
            extra_context_columns=extra_context_columns,
        )

    def parse_response(self, raw: SurveyResponse) -> ParsedResponse:
        """
        Resolve the version of a response and flatten its answers.

        Raises:
            VersionNotFoundError: If no version matches the response
        """
        parsed = ParsedResponse(
            id=raw.id,
            participant_id=raw.participant_id,
            version=raw.version_id,
            opened_at=raw.opened_at,
            submitted_at=raw.submitted_at,
            context=dict(raw.context),
        )

        resolved = resolve_version(raw.version_id, raw.submitted_at, self.versions)
        current = resolved.version
        if current.version_id != raw.version_id and current.version_id != "":
            if raw.version_id == "":
                parsed.version = current.version_id
            else:
                parsed.version = f"{raw.version_id} ({current.version_id})"
        if resolved.fallback:
            logger.warning(
                "response %s mapped to version %r by %s",
                raw.id, current.version_id, resolved.method.value,
            )

        answers = {}
        for item in raw.responses:
            key = strip_root_key(item.key, self.survey_key) if self.short_keys else item.key
            answers.setdefault(key, item)

        sep = self.question_option_sep
        for question in current.questions:
            answer = answers.get(question.id)

            for key, value in self.registry.parse_response(question, answer, sep).items():
                if key in parsed.responses:
                    logger.error("response column %s produced twice, keeping the first value", key)
                    continue
                parsed.responses[key] = value

            meta = answer.meta if answer is not None else None
            parsed.meta[question.id + sep + c.META_INIT] = list(meta.rendered) if meta else []
            parsed.meta[question.id + sep + c.META_DISPLAYED] = list(meta.displayed) if meta else []
            parsed.meta[question.id + sep + c.META_RESPONSE] = list(meta.responded) if meta else []
            parsed.meta[question.id + sep + c.META_POSITION] = meta.position if meta else 0

        return parsed

    # =====================================================================
    # Rendering
    # =====================================================================

    def to_flat_dict(self, parsed: ParsedResponse) -> Dict[str, Any]:
        """All export columns in output order; missing values are ""."""
        cols = self.columns
        result: Dict[str, Any] = {
            cols.fixed_columns[0]: parsed.id,
            cols.fixed_columns[1]: parsed.participant_id,
            cols.fixed_columns[2]: parsed.version,
            cols.fixed_columns[3]: parsed.opened_at,
            cols.fixed_columns[4]: parsed.submitted_at,
        }
        for name in cols.context_columns:
            result[name] = parsed.context.get(name, "")
        for name in cols.response_columns:
            result[name] = parsed.responses.get(name, "")
        if self.include_meta is not None:
            for name in cols.meta_columns:
                result[name] = parsed.meta.get(name, "")
        return result

    def to_row(self, parsed: ParsedResponse) -> List[str]:
        """Wide format: one cell per column of ColumnNames.all_columns()."""
        flat = self.to_flat_dict(parsed)
        return [value_to_str(flat.get(name)) for name in self.columns.all_columns()]

    def long_header(self) -> List[str]:
        return self.columns.fixed_columns + self.columns.context_columns + ["responseSlot", "value"]

    def to_long_rows(self, parsed: ParsedResponse) -> List[List[str]]:
        """Long format: one row per response/meta column, prefixed with the fixed and context values."""
        flat = self.to_flat_dict(parsed)
        cols = self.columns
        prefix = [value_to_str(flat.get(name)) for name in cols.fixed_columns + cols.context_columns]
        return [
            prefix + [name, value_to_str(flat.get(name))]
            for name in cols.response_columns + cols.meta_columns
        ]


__all__ = ["ResponseParser", "value_to_str", "strip_root_key", "short_key_versions"]
