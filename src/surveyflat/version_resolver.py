"""
Survey version resolution.

Finds the schema version a response was answered against.

Resolution order:
    1. Exact match on the version ID the client reported.
    2. By submission time, in tiers:
        a. nearest preceding published version that is still active then
        b. nearest following published version
        c. nearest preceding version even though it was already unpublished
    3. VersionNotFoundError if no version was ever published.

Tiers (b) and (c) are guesses. They are logged as warnings and flagged on
the result, so callers can count responses mapped this way.

Ties on `published` go to the version that comes first in the input list.
Versions with `published == 0` only match by ID.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from surveyflat.errors import VersionNotFoundError
from surveyflat.model import SurveyVersionPreview

logger = logging.getLogger(__name__)


class ResolutionMethod(Enum):
    """How a version was matched to a response."""
    VERSION_ID = "version_id"
    ACTIVE_AT_SUBMISSION = "active_at_submission"
    NEAREST_FOLLOWING = "nearest_following"
    NEAREST_PRECEDING_EXPIRED = "nearest_preceding_expired"


@dataclass
class ResolvedVersion:
    version: SurveyVersionPreview
    method: ResolutionMethod

    @property
    def fallback(self) -> bool:
        """True if the version was guessed by a fallback tier."""
        return self.method in (
            ResolutionMethod.NEAREST_FOLLOWING,
            ResolutionMethod.NEAREST_PRECEDING_EXPIRED,
        )


def find_version_by_id(version_id: str, versions: Sequence[SurveyVersionPreview]) -> Optional[SurveyVersionPreview]:
    for v in versions:
        if v.version_id == version_id:
            return v
    return None


def _nearest_preceding(submitted_at: int, versions: Sequence[SurveyVersionPreview]) -> Optional[SurveyVersionPreview]:
    best = None
    for v in versions:
        if v.published == 0 or v.published > submitted_at:
            continue
        if best is None or v.published > best.published:
            best = v
    return best


def _active_preceding(submitted_at: int, versions: Sequence[SurveyVersionPreview]) -> Optional[SurveyVersionPreview]:
    """
    Nearest preceding version still active at `submitted_at`.

    A version unpublished exactly at `submitted_at` still counts, but loses
    against any version that was active strictly beyond that instant.
    """
    best = None
    best_rank = None
    for v in versions:
        if v.published == 0 or v.published > submitted_at:
            continue
        if v.unpublished != 0 and v.unpublished < submitted_at:
            continue
        rank = (v.unpublished == 0 or v.unpublished > submitted_at, v.published)
        if best is None or rank > best_rank:
            best, best_rank = v, rank
    return best


def _nearest_following(submitted_at: int, versions: Sequence[SurveyVersionPreview]) -> Optional[SurveyVersionPreview]:
    best = None
    for v in versions:
        if v.published == 0 or v.published < submitted_at:
            continue
        if best is None or v.published < best.published:
            best = v
    return best


def resolve_by_timestamp(submitted_at: int, versions: Sequence[SurveyVersionPreview]) -> ResolvedVersion:
    """
    Resolve a version from the submission time alone.

    Args:
        submitted_at: Unix seconds
        versions: Candidate versions of one survey, in any order

    Returns:
        ResolvedVersion with the tier that matched

    Raises:
        VersionNotFoundError: If no version has a publish time
    """
    active = _active_preceding(submitted_at, versions)
    if active is not None:
        return ResolvedVersion(active, ResolutionMethod.ACTIVE_AT_SUBMISSION)

    following = _nearest_following(submitted_at, versions)
    if following is not None:
        logger.warning(
            "no version active at %d, taking more recent version %r (published %d)",
            submitted_at, following.version_id, following.published,
        )
        return ResolvedVersion(following, ResolutionMethod.NEAREST_FOLLOWING)

    preceding = _nearest_preceding(submitted_at, versions)
    if preceding is not None:
        logger.warning(
            "no version active at %d and no more recent version, taking older version %r (unpublished %d)",
            submitted_at, preceding.version_id, preceding.unpublished,
        )
        return ResolvedVersion(preceding, ResolutionMethod.NEAREST_PRECEDING_EXPIRED)

    raise VersionNotFoundError(submitted_at)


def resolve_version(
    version_id: str,
    submitted_at: int,
    versions: Sequence[SurveyVersionPreview],
) -> ResolvedVersion:
    """
    Resolve the version a response was answered against.

    Args:
        version_id: Version ID reported with the response (may be empty)
        submitted_at: Unix seconds
        versions: Candidate versions of one survey

    Returns:
        ResolvedVersion

    Raises:
        VersionNotFoundError: If neither ID nor timestamp match anything
    """
    if version_id:
        match = find_version_by_id(version_id, versions)
        if match is not None:
            return ResolvedVersion(match, ResolutionMethod.VERSION_ID)
        logger.debug("version %r not in version list, resolving by timestamp", version_id)

    try:
        return resolve_by_timestamp(submitted_at, versions)
    except VersionNotFoundError:
        raise VersionNotFoundError(submitted_at, version_id) from None


__all__ = [
    "ResolutionMethod",
    "ResolvedVersion",
    "find_version_by_id",
    "resolve_by_timestamp",
    "resolve_version",
]
