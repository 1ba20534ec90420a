"""
Question type handlers.

Every question type knows two things:
    - which columns its answers occupy (computable from the schema alone)
    - how to turn one answer tree into a flat column -> value map

Handlers are stateless. A HandlerRegistry maps question type tags to
handlers; it is built once, never changed, and passed to the parser.
New question types are supported by building a registry with more
entries (see HandlerRegistry.extended), not by editing existing handlers.

Column naming convention, with `sep` the question/option separator:
    single slot:  <questionID>             <questionID><sep><optionID>
    multi slot:   <questionID><sep><slotID> <questionID><sep><slotID>.<optionID>
"""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from surveyflat import constants as c
from surveyflat.errors import UnknownQuestionTypeError
from surveyflat.model import ResponseDef, ResponseItem, SurveyItemResponse, SurveyQuestion
from surveyflat.navigator import get_by_full_path, get_by_short_key

logger = logging.getLogger(__name__)


class QuestionTypeHandler(ABC):
    """Column naming and value extraction for one family of question types."""

    @abstractmethod
    def get_response_column_names(self, question: SurveyQuestion, sep: str) -> List[str]:
        """Return the columns answers to `question` may fill, in schema order."""

    @abstractmethod
    def parse_response(
        self,
        question: SurveyQuestion,
        response: Optional[SurveyItemResponse],
        sep: str,
    ) -> Dict[str, Any]:
        """Flatten one answer (None if unanswered) into column -> value."""


# =========================================================================
# Shared helpers
# =========================================================================

def _slot_path(slot: ResponseDef) -> str:
    return c.RESPONSE_ROOT_KEY + "." + slot.id


def _has_option_of_type(slot: ResponseDef, option_id: str, option_type: str) -> bool:
    return any(o.id == option_id and o.option_type == option_type for o in slot.options)


def _cloze_values(value_key: str, selection: ResponseItem) -> Dict[str, Any]:
    """Flatten the fields of a selected cloze option."""
    cols: Dict[str, Any] = {}
    for item in selection.items:
        key = value_key + "." + item.key
        # dropdown-like fields hold their selection as the only child
        if not item.value and len(item.items) == 1:
            cols[key] = item.items[0].key
        else:
            cols[key] = item.value
    return cols


def _single_selection(question_key: str, group: Optional[ResponseItem]) -> Optional[ResponseItem]:
    if group is None:
        return None
    if len(group.items) != 1:
        logger.debug("unexpected response group for question %s: %r", question_key, group)
        return None
    return group.items[0]


def _selection_values(
    selection_col: str,
    value_key: str,
    slot: ResponseDef,
    selection: ResponseItem,
) -> Dict[str, Any]:
    cols: Dict[str, Any] = {selection_col: selection.key}
    if _has_option_of_type(slot, selection.key, c.OPTION_TYPE_CLOZE):
        cols.update(_cloze_values(value_key, selection))
    else:
        cols[value_key] = selection.value
    return cols


# =========================================================================
# Handlers
# =========================================================================

class SingleChoiceHandler(QuestionTypeHandler):
    """Single choice, dropdown, likert and responsive array questions."""

    def get_response_column_names(self, question, sep):
        cols = []
        if len(question.responses) == 1:
            slot = question.responses[0]
            cols.append(question.id)
            for option in slot.options:
                if option.option_type not in c.SINGLE_VALUE_OPTION_TYPES:
                    cols.append(question.id + sep + option.id)
        else:
            for slot in question.responses:
                slot_key = question.id + sep + slot.id
                cols.append(slot_key)
                for option in slot.options:
                    if option.option_type not in c.SINGLE_VALUE_OPTION_TYPES:
                        cols.append(slot_key + "." + option.id)
        return cols

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        if len(question.responses) == 1:
            slot = question.responses[0]
            selection = _single_selection(question.id, get_by_full_path(response, _slot_path(slot)))
            if selection is not None:
                value_key = question.id + sep + selection.key
                cols.update(_selection_values(question.id, value_key, slot, selection))
            return cols

        for slot in question.responses:
            selection = _single_selection(question.id, get_by_short_key(response, slot.id))
            if selection is None:
                continue
            slot_key = question.id + sep + slot.id
            value_key = slot_key + "." + selection.key
            cols.update(_selection_values(slot_key, value_key, slot, selection))
        return cols


class MultipleChoiceHandler(QuestionTypeHandler):
    """Multiple choice questions: one TRUE/FALSE column per option."""

    @staticmethod
    def _has_open_field(option_type: str) -> bool:
        return (
            option_type not in (c.OPTION_TYPE_CHECKBOX, c.OPTION_TYPE_CLOZE)
            and option_type not in c.EMBEDDED_CLOZE_OPTION_TYPES
        )

    def get_response_column_names(self, question, sep):
        if len(question.responses) == 1:
            prefixes = [(question.responses[0], question.id + sep)]
        else:
            prefixes = [(slot, question.id + sep + slot.id + ".") for slot in question.responses]

        cols = []
        for slot, prefix in prefixes:
            for option in slot.options:
                cols.append(prefix + option.id)
                if self._has_open_field(option.option_type):
                    cols.append(prefix + option.id + sep + c.OPEN_FIELD_COL_SUFFIX)
        return cols

    def parse_response(self, question, response, sep):
        if len(question.responses) == 1:
            prefixes = [(question.responses[0], question.id + sep)]
        else:
            prefixes = [(slot, question.id + sep + slot.id + ".") for slot in question.responses]

        cols: Dict[str, Any] = {}
        for slot, prefix in prefixes:
            group = get_by_full_path(response, _slot_path(slot))
            if group is None or not group.items:
                continue

            for option in slot.options:
                if option.option_type in c.EMBEDDED_CLOZE_OPTION_TYPES:
                    cols[prefix + option.id] = ""
                else:
                    cols[prefix + option.id] = c.FALSE_VALUE

            for item in group.items:
                value_key = prefix + item.key
                cols[value_key] = c.TRUE_VALUE
                if _has_option_of_type(slot, item.key, c.OPTION_TYPE_CLOZE):
                    cols.update(_cloze_values(value_key, item))
                else:
                    cols[value_key + sep + c.OPEN_FIELD_COL_SUFFIX] = item.value
        return cols


class ConsentHandler(QuestionTypeHandler):
    """Consent questions: TRUE when the slot was answered, else FALSE."""

    def get_response_column_names(self, question, sep):
        if len(question.responses) == 1:
            return [question.id]
        return [question.id + sep + slot.id for slot in question.responses]

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        single = len(question.responses) == 1
        for slot in question.responses:
            col = question.id if single else question.id + sep + slot.id
            answered = get_by_full_path(response, _slot_path(slot)) is not None
            cols[col] = c.TRUE_VALUE if answered else c.FALSE_VALUE
        return cols


class InputValueHandler(QuestionTypeHandler):
    """Text, number, date and slider inputs: the slot's value as is."""

    def get_response_column_names(self, question, sep):
        if len(question.responses) == 1:
            return [question.id]
        return [question.id + sep + slot.id for slot in question.responses]

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        if len(question.responses) == 1:
            item = get_by_full_path(response, _slot_path(question.responses[0]))
            if item is not None:
                cols[question.id] = item.value
            return cols

        for slot in question.responses:
            slot_key = question.id + sep + slot.id
            cols[slot_key] = ""
            item = get_by_full_path(response, _slot_path(slot))
            if item is not None:
                cols[slot_key] = item.value
        return cols


class ResponsiveTableHandler(QuestionTypeHandler):
    """Responsive matrix cells, located anywhere in the tree by cell key."""

    def get_response_column_names(self, question, sep):
        return [question.id + sep + slot.id for slot in question.responses]

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        for slot in question.responses:
            item = get_by_short_key(response, slot.id)
            if item is not None:
                cols[question.id + sep + slot.id] = item.value
        return cols


class MatrixHandler(QuestionTypeHandler):
    """Matrix questions: radio rows yield the selected key, cells their value."""

    def get_response_column_names(self, question, sep):
        return [question.id + sep + slot.id for slot in question.responses]

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        for slot in question.responses:
            selection = _single_selection(question.id, get_by_full_path(response, _slot_path(slot)))
            if selection is None:
                continue
            slot_key = question.id + sep + slot.id
            if slot.response_type == c.QUESTION_TYPE_MATRIX_RADIO_ROW:
                cols[slot_key] = selection.key
            else:
                cols[slot_key] = selection.value or selection.key
        return cols


class ClozeHandler(QuestionTypeHandler):
    """Cloze questions: one column per fillable field."""

    FIELD_TYPES = (
        c.OPTION_TYPE_DATE_INPUT,
        c.OPTION_TYPE_NUMBER_INPUT,
        c.OPTION_TYPE_TEXT_INPUT,
        c.OPTION_TYPE_DROPDOWN,
    )

    def get_response_column_names(self, question, sep):
        cols = []
        single = len(question.responses) == 1
        for slot in question.responses:
            prefix = question.id + sep if single else question.id + sep + slot.id + "."
            for option in slot.options:
                if option.option_type in self.FIELD_TYPES:
                    cols.append(prefix + option.id)
        return cols

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        single = len(question.responses) == 1
        for slot in question.responses:
            if single:
                group = get_by_full_path(response, _slot_path(slot))
                prefix = question.id + sep
            else:
                group = get_by_short_key(response, slot.id)
                prefix = question.id + sep + slot.id + "."
            if group is None:
                continue

            for item in group.items:
                value_key = prefix + item.key
                if _has_option_of_type(slot, item.key, c.OPTION_TYPE_DROPDOWN):
                    if len(item.items) != 1:
                        logger.debug(
                            "multiple responses for dropdown in cloze %s (slot %s, item %s)",
                            question.id, slot.id, item.key,
                        )
                    else:
                        cols[value_key] = item.items[0].key
                else:
                    cols[value_key] = item.value
        return cols


class UnknownTypeHandler(QuestionTypeHandler):
    """Questions of mixed or unrecognised slot types: the raw slot subtree."""

    def get_response_column_names(self, question, sep):
        return [question.id + sep + slot.id for slot in question.responses]

    def parse_response(self, question, response, sep):
        cols: Dict[str, Any] = {}
        for slot in question.responses:
            group = get_by_full_path(response, _slot_path(slot))
            if group is not None:
                cols[question.id + sep + slot.id] = group
        return cols


# =========================================================================
# Registry
# =========================================================================

class HandlerRegistry:
    """
    Immutable mapping from question type tag to handler.

    Lookups of unregistered tags raise UnknownQuestionTypeError; the
    convenience methods log that error and yield no columns/values so a
    single unknown question never stops an export.
    """

    def __init__(self, handlers: Mapping[str, QuestionTypeHandler]):
        self._handlers = MappingProxyType(dict(handlers))

    def __contains__(self, question_type: str) -> bool:
        return question_type in self._handlers

    @property
    def question_types(self) -> Iterable[str]:
        return self._handlers.keys()

    def get(self, question_type: str) -> QuestionTypeHandler:
        try:
            return self._handlers[question_type]
        except KeyError:
            raise UnknownQuestionTypeError(question_type) from None

    def extended(self, handlers: Mapping[str, QuestionTypeHandler]) -> "HandlerRegistry":
        """Return a new registry with `handlers` added (or replacing existing tags)."""
        merged = dict(self._handlers)
        merged.update(handlers)
        return HandlerRegistry(merged)

    def response_column_names(self, question: SurveyQuestion, sep: str) -> List[str]:
        try:
            handler = self.get(question.question_type)
        except UnknownQuestionTypeError as e:
            logger.error("%s (question %s)", e, question.id)
            return []
        return handler.get_response_column_names(question, sep)

    def parse_response(
        self,
        question: SurveyQuestion,
        response: Optional[SurveyItemResponse],
        sep: str,
    ) -> Dict[str, Any]:
        try:
            handler = self.get(question.question_type)
        except UnknownQuestionTypeError as e:
            logger.error("%s (question %s)", e, question.id)
            return {}
        return handler.parse_response(question, response, sep)


def default_registry() -> HandlerRegistry:
    """Registry with handlers for every question type the definition parser produces."""
    single_choice = SingleChoiceHandler()
    input_value = InputValueHandler()
    return HandlerRegistry({
        c.QUESTION_TYPE_SINGLE_CHOICE: single_choice,
        c.QUESTION_TYPE_DROPDOWN: single_choice,
        c.QUESTION_TYPE_LIKERT: single_choice,
        c.QUESTION_TYPE_LIKERT_GROUP: single_choice,
        c.QUESTION_TYPE_RESPONSIVE_SINGLE_CHOICE_ARRAY: single_choice,
        c.QUESTION_TYPE_RESPONSIVE_BIPOLAR_LIKERT_ARRAY: single_choice,
        c.QUESTION_TYPE_MULTIPLE_CHOICE: MultipleChoiceHandler(),
        c.QUESTION_TYPE_CONSENT: ConsentHandler(),
        c.QUESTION_TYPE_TEXT_INPUT: input_value,
        c.QUESTION_TYPE_DATE_INPUT: input_value,
        c.QUESTION_TYPE_NUMBER_INPUT: input_value,
        c.QUESTION_TYPE_NUMERIC_SLIDER: input_value,
        c.QUESTION_TYPE_EQ5D_SLIDER: input_value,
        c.QUESTION_TYPE_RESPONSIVE_TABLE: ResponsiveTableHandler(),
        c.QUESTION_TYPE_MATRIX: MatrixHandler(),
        c.QUESTION_TYPE_CLOZE: ClozeHandler(),
        c.QUESTION_TYPE_UNKNOWN: UnknownTypeHandler(),
    })


__all__ = [
    "QuestionTypeHandler",
    "SingleChoiceHandler",
    "MultipleChoiceHandler",
    "ConsentHandler",
    "InputValueHandler",
    "ResponsiveTableHandler",
    "MatrixHandler",
    "ClozeHandler",
    "UnknownTypeHandler",
    "HandlerRegistry",
    "default_registry",
]
