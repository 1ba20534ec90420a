"""
Column schema of a response export.

The header of a CSV export has to be known before the first row is
written, so the columns are the union over every version of the survey,
computed up front from the schema alone.
"""

from typing import List, Optional, Sequence

from surveyflat import constants as c
from surveyflat.handlers import HandlerRegistry
from surveyflat.model import ColumnNames, IncludeMeta, SurveyQuestion, SurveyVersionPreview

FIXED_COLUMNS = ["ID", "participantID", "version", "opened", "submitted"]
DEFAULT_CONTEXT_COLUMNS = ["language", "engineVersion", "session"]


def meta_column_names(question: SurveyQuestion, include_meta: IncludeMeta, sep: str) -> List[str]:
    cols = []
    if include_meta.init_times:
        cols.append(question.id + sep + c.META_INIT)
    if include_meta.displayed_times:
        cols.append(question.id + sep + c.META_DISPLAYED)
    if include_meta.responded_times:
        cols.append(question.id + sep + c.META_RESPONSE)
    if include_meta.position:
        cols.append(question.id + sep + c.META_POSITION)
    return cols


def _unique(names) -> List[str]:
    # dict keeps first-seen order
    return list(dict.fromkeys(names))


def response_columns_for_all_versions(
    versions: Sequence[SurveyVersionPreview],
    registry: HandlerRegistry,
    sep: str,
) -> List[str]:
    """Deduplicated answer columns of every question in every version."""
    return _unique(
        col
        for version in versions
        for question in version.questions
        for col in registry.response_column_names(question, sep)
    )


def meta_columns_for_all_versions(
    versions: Sequence[SurveyVersionPreview],
    include_meta: Optional[IncludeMeta],
    sep: str,
) -> List[str]:
    """Deduplicated metadata columns; empty when no metadata is requested."""
    if include_meta is None:
        return []
    return _unique(
        col
        for version in versions
        for question in version.questions
        for col in meta_column_names(question, include_meta, sep)
    )


def build_column_names(
    versions: Sequence[SurveyVersionPreview],
    registry: HandlerRegistry,
    sep: str,
    include_meta: Optional[IncludeMeta] = None,
    extra_context_columns: Optional[Sequence[str]] = None,
) -> ColumnNames:
    """
    Build the full column schema of an export.

    Response and metadata columns are sorted, so the header does not depend
    on the order versions or questions were supplied in.

    Args:
        versions: All versions of the survey
        registry: Handlers used to name answer columns
        sep: Question/option separator
        include_meta: Metadata columns to add (None = none)
        extra_context_columns: Context keys beyond the defaults

    Returns:
        ColumnNames
    """
    context_cols = _unique(list(DEFAULT_CONTEXT_COLUMNS) + list(extra_context_columns or []))
    return ColumnNames(
        fixed_columns=list(FIXED_COLUMNS),
        context_columns=context_cols,
        response_columns=sorted(response_columns_for_all_versions(versions, registry, sep)),
        meta_columns=sorted(meta_columns_for_all_versions(versions, include_meta, sep)),
    )


__all__ = [
    "FIXED_COLUMNS",
    "DEFAULT_CONTEXT_COLUMNS",
    "meta_column_names",
    "response_columns_for_all_versions",
    "meta_columns_for_all_versions",
    "build_column_names",
]
