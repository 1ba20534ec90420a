"""
Core Export Model Objects

Defines the data structures the export engine reads and produces.

These are pure data classes representing:
    - Survey version previews (question schema snapshots)
    - Questions, response slots and options
    - Answer trees (ResponseItem) and raw survey responses
    - Parsed responses and the column schema of one export

ARCHITECTURAL RULE:
    These objects:
        - Are supplied by the caller and never mutated by the engine
        - Know nothing about CSV, JSON or any sink
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ResponseOption:
    """
    One selectable or fillable option of a response slot.

    Properties:
        id: Option key, unique within its slot (e.g. "1", "other",
            or "cloze1.input" for inputs embedded in a cloze option)
        option_type: One of the OPTION_TYPE_* tags
        label: Human-readable label (empty unless labels were extracted)
    """

    id: str
    option_type: str = ""
    label: str = ""


@dataclass
class ResponseDef:
    """
    A response slot of a question.

    Most questions have exactly one slot. Likert groups, matrices and
    responsive arrays have one slot per row/cell.

    Properties:
        id: Slot key (e.g. "scg", "mcg", "row1")
        response_type: One of the QUESTION_TYPE_* tags
        label: Slot label, used by input-like slots
        options: Ordered options of the slot
    """

    id: str
    response_type: str = ""
    label: str = ""
    options: List[ResponseOption] = field(default_factory=list)


@dataclass
class SurveyQuestion:
    """
    A question as it appears in one survey version.

    Properties:
        id:
            Dotted hierarchical key (e.g. "weekly.G1.Q1")
            Matches SurveyItemResponse.key of the answers to this question.

        title:
            Question text (empty unless labels were extracted)

        question_type:
            Tag selecting the handler that builds columns and values

        responses:
            Ordered response slots
    """

    id: str
    title: str = ""
    question_type: str = ""
    responses: List[ResponseDef] = field(default_factory=list)


@dataclass
class SurveyVersionPreview:
    """
    Timestamped snapshot of a survey's question schema.

    A version is active between `published` (inclusive) and `unpublished`.

    Properties:
        version_id: Unique within a survey, may be empty
        published: Unix seconds, 0 = never explicitly published
        unpublished: Unix seconds, 0 = still active
        questions: Ordered questions of this version

    INVARIANTS (not enforced, the resolver tolerates violations):
        - At most one version is active at any timestamp
    """

    version_id: str = ""
    published: int = 0
    unpublished: int = 0
    questions: List[SurveyQuestion] = field(default_factory=list)

    def get_question(self, question_id: str) -> Optional[SurveyQuestion]:
        """
        Retrieve a question by ID.

        Args:
            question_id: Full question key

        Returns:
            SurveyQuestion or None if not found
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


@dataclass
class ResponseItem:
    """
    A node of an answer tree.

    The answer to a question is a tree rooted at RESPONSE_ROOT_KEY ("rg")
    whose children mirror the response slots, selected options and
    cloze fields of the question.

    Properties:
        key: Key of this node (slot, option or field key)
        value: Scalar value for input-like nodes
        dtype: Optional data type hint stored with the value
        items: Ordered child nodes
    """

    key: str
    value: Optional[str] = None
    dtype: Optional[str] = None
    items: List["ResponseItem"] = field(default_factory=list)


@dataclass
class ResponseMeta:
    """
    Per-question timing and position metadata recorded by the survey client.

    Properties:
        position: Position of the question as displayed
        locale_code: Language the question was shown in
        rendered: Timestamps the question was initialised
        displayed: Timestamps the question became visible
        responded: Timestamps the answer changed
    """

    position: int = 0
    locale_code: str = ""
    rendered: List[int] = field(default_factory=list)
    displayed: List[int] = field(default_factory=list)
    responded: List[int] = field(default_factory=list)


@dataclass
class SurveyItemResponse:
    """
    The answer to one survey item.

    Properties:
        key: Question ID the answer belongs to
        meta: Timing metadata
        response: Root of the answer tree (None if not answered)
        items: Child answers for item groups
        confidential_mode: Set for answers stored separately
    """

    key: str
    meta: ResponseMeta = field(default_factory=ResponseMeta)
    response: Optional[ResponseItem] = None
    items: List["SurveyItemResponse"] = field(default_factory=list)
    confidential_mode: str = ""


@dataclass
class SurveyResponse:
    """
    One submitted survey, as read from storage.

    Properties:
        id: Storage ID of the submission
        key: Survey key
        participant_id: Participant the submission belongs to
        version_id: Version the client reports (may be empty)
        opened_at / submitted_at / arrived_at: Unix seconds
        responses: Answers, one per answered item
        context: Free-form context (language, engine version, session ...)
    """

    id: str = ""
    key: str = ""
    participant_id: str = ""
    version_id: str = ""
    opened_at: int = 0
    submitted_at: int = 0
    arrived_at: int = 0
    responses: List[SurveyItemResponse] = field(default_factory=list)
    context: Dict[str, str] = field(default_factory=dict)

    def find_response(self, key: str) -> Optional[SurveyItemResponse]:
        """Return the answer with the given item key, or None."""
        for response in self.responses:
            if response.key == key:
                return response
        return None


@dataclass
class IncludeMeta:
    """Which per-question metadata columns an export carries."""

    init_times: bool = False
    displayed_times: bool = False
    responded_times: bool = False
    position: bool = False


@dataclass
class ColumnNames:
    """
    Column schema of one export, in output order.

    Properties:
        fixed_columns: Submission columns (ID, participant, version, times)
        context_columns: Context keys copied from SurveyResponse.context
        response_columns: Unioned answer columns across all versions
        meta_columns: Unioned metadata columns (empty unless requested)
    """

    fixed_columns: List[str] = field(default_factory=list)
    context_columns: List[str] = field(default_factory=list)
    response_columns: List[str] = field(default_factory=list)
    meta_columns: List[str] = field(default_factory=list)

    def all_columns(self) -> List[str]:
        return (
            self.fixed_columns
            + self.context_columns
            + self.response_columns
            + self.meta_columns
        )


@dataclass
class ParsedResponse:
    """
    A response after version resolution and answer flattening.

    Properties:
        id / participant_id / opened_at / submitted_at: Copied from the raw response
        version: Reported version, annotated with the resolved one if they differ
        context: Copied context
        responses: Flat column -> value map of the answers
        meta: Flat column -> value map of the metadata
    """

    id: str = ""
    participant_id: str = ""
    version: str = ""
    opened_at: int = 0
    submitted_at: int = 0
    context: Dict[str, str] = field(default_factory=dict)
    responses: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)
