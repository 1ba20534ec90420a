"""
Survey definition parser (stored survey version -> SurveyVersionPreview).

Reads the survey documents of the study system (plain dicts, as loaded
from JSON/YAML) and extracts the question schema the exporters work on:
    - item groups are walked recursively
    - page breaks, survey ends and confidential items are skipped
    - each question's responseGroup component becomes a list of ResponseDefs
    - the question type is derived from its response slots

Titles and labels are only read when a label language is requested.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from surveyflat import constants as c
from surveyflat.errors import DefinitionParseError
from surveyflat.model import ResponseDef, ResponseOption, SurveyQuestion, SurveyVersionPreview

logger = logging.getLogger(__name__)

Component = Dict[str, Any]


@dataclass
class ExtractOptions:
    """
    Properties:
        include_items: If set, only these item keys are extracted
        exclude_items: Item keys to skip (ignored when include_items is set)
        use_label_lang: Language code for titles and labels ("" = no labels)
    """

    include_items: List[str] = field(default_factory=list)
    exclude_items: List[str] = field(default_factory=list)
    use_label_lang: str = ""


CHOICE_OPTION_TYPES = {
    "input": c.OPTION_TYPE_TEXT_INPUT,
    "dateInput": c.OPTION_TYPE_DATE_INPUT,
    "timeInput": c.OPTION_TYPE_NUMBER_INPUT,
    "numberInput": c.OPTION_TYPE_NUMBER_INPUT,
    "cloze": c.OPTION_TYPE_CLOZE,
}

CLOZE_FIELD_TYPES = {
    "input": c.OPTION_TYPE_TEXT_INPUT,
    "dateInput": c.OPTION_TYPE_DATE_INPUT,
    "timeInput": c.OPTION_TYPE_NUMBER_INPUT,
    "numberInput": c.OPTION_TYPE_NUMBER_INPUT,
    "dropDownGroup": c.OPTION_TYPE_DROPDOWN,
}

EMBEDDED_CLOZE_FIELD_TYPES = {
    "input": c.OPTION_TYPE_EMBEDDED_CLOZE_TEXT_INPUT,
    "dateInput": c.OPTION_TYPE_EMBEDDED_CLOZE_DATE_INPUT,
    "timeInput": c.OPTION_TYPE_EMBEDDED_CLOZE_NUMBER_INPUT,
    "numberInput": c.OPTION_TYPE_EMBEDDED_CLOZE_NUMBER_INPUT,
    "dropDownGroup": c.OPTION_TYPE_EMBEDDED_CLOZE_DROPDOWN,
}

# Single-input roles: role -> response type
INPUT_ROLE_TYPES = {
    "input": c.QUESTION_TYPE_TEXT_INPUT,
    "validatedRandomQuestion": c.QUESTION_TYPE_TEXT_INPUT,
    "multilineTextInput": c.QUESTION_TYPE_TEXT_INPUT,
    "consent": c.QUESTION_TYPE_CONSENT,
    "numberInput": c.QUESTION_TYPE_NUMBER_INPUT,
    "dateInput": c.QUESTION_TYPE_DATE_INPUT,
    "timeInput": c.QUESTION_TYPE_NUMBER_INPUT,
    "sliderNumeric": c.QUESTION_TYPE_NUMERIC_SLIDER,
}


# =========================================================================
# Localised text
# =========================================================================

def get_translation(content: Optional[List[Dict[str, Any]]], lang: str) -> Optional[str]:
    """
    Join the parts of the `lang` translation; expressions become "<exp>", numbers "<num>".

    Returns:
        The text, or None if `lang` is missing
    """
    for translation in content or []:
        if translation.get("code") != lang:
            continue
        text = ""
        for part in translation.get("parts") or []:
            dtype = part.get("dtype")
            if dtype == "exp":
                text += "<exp>"
            elif dtype == "num":
                text += "<num>"
            else:
                text += str(part.get("str", ""))
        return text
    return None


def get_preview_text(component: Optional[Component], lang: str) -> str:
    """Label of a component in `lang`; "" when labels are off or missing."""
    if not lang or lang == "ignored":
        return ""
    if component is None:
        logger.debug("no component to read label from")
        return ""

    if component.get("items"):
        text = "".join(get_translation(i.get("content"), lang) or "" for i in component["items"])
    else:
        text = get_translation(component.get("content"), lang) or ""
    if not text:
        logger.debug("label not found for component %s", component.get("key"))
    return text


# =========================================================================
# Response slots
# =========================================================================

def _find_child(component: Component, role: str) -> Optional[Component]:
    for item in component.get("items") or []:
        if item.get("role") == role:
            return item
    return None


def _choice_options(component: Component, marker_type: str, lang: str) -> List[ResponseOption]:
    options = []
    for o in component.get("items") or []:
        role = o.get("role")
        option_type = marker_type if role == "option" else CHOICE_OPTION_TYPES.get(role, "")
        option = ResponseOption(id=o.get("key", ""), option_type=option_type, label=get_preview_text(o, lang))
        options.append(option)
        if option_type == c.OPTION_TYPE_CLOZE:
            options.extend(_embedded_cloze_options(o, option.id, lang))
    return options


def _embedded_cloze_options(cloze: Component, cloze_key: str, lang: str) -> List[ResponseOption]:
    options = []
    for o in cloze.get("items") or []:
        option_type = EMBEDDED_CLOZE_FIELD_TYPES.get(o.get("role"))
        if option_type is None:
            continue
        options.append(ResponseOption(
            id=cloze_key + "." + o.get("key", ""),
            option_type=option_type,
            label=get_preview_text(o, lang),
        ))
    return options


def _matrix_slots(component: Component, lang: str) -> List[ResponseDef]:
    slots = []
    key = component.get("key", "")
    for row in component.get("items") or []:
        row_key = key + "." + row.get("key", "")
        if row.get("role") == "responseRow":
            for col in row.get("items") or []:
                slot = ResponseDef(id=row_key + "." + col.get("key", ""))
                role = col.get("role")
                if role == "dropDownGroup":
                    slot.response_type = c.QUESTION_TYPE_MATRIX_DROPDOWN
                    slot.options = [
                        ResponseOption(id=o.get("key", ""), option_type=c.OPTION_TYPE_DROPDOWN_OPTION,
                                       label=get_preview_text(o, lang))
                        for o in col.get("items") or []
                    ]
                elif role == "input":
                    slot.response_type = c.QUESTION_TYPE_MATRIX_INPUT
                    slot.label = get_preview_text(col, lang)
                elif role == "check":
                    slot.response_type = c.QUESTION_TYPE_MATRIX_CHECKBOX
                elif role == "numberInput":
                    slot.response_type = c.QUESTION_TYPE_MATRIX_NUMBER_INPUT
                    slot.label = get_preview_text(col, lang)
                else:
                    logger.debug("matrix cell role %s ignored (key %s)", role, col.get("key"))
                    continue
                slots.append(slot)
        elif row.get("role") == "radioRow":
            slot = ResponseDef(id=row_key, response_type=c.QUESTION_TYPE_MATRIX_RADIO_ROW)
            for o in row.get("items") or []:
                if o.get("role") == "label":
                    slot.label = get_preview_text(o, lang)
                else:
                    slot.options.append(ResponseOption(id=o.get("key", ""), option_type=c.OPTION_TYPE_RADIO))
            slots.append(slot)
    return slots


def _responsive_matrix_slots(component: Component, lang: str) -> List[ResponseDef]:
    columns = _find_child(component, "columns")
    rows = _find_child(component, "rows")
    if columns is None or rows is None:
        logger.debug("responsiveMatrix %s without rows or columns", component.get("key"))
        return []

    slots = []
    for row in rows.get("items") or []:
        if row.get("role") == "category":
            continue
        row_label = get_preview_text(row, lang)
        for col in columns.get("items") or []:
            slots.append(ResponseDef(
                id=row.get("key", "") + "-" + col.get("key", ""),
                response_type=c.QUESTION_TYPE_RESPONSIVE_TABLE,
                label=row_label + " || " + get_preview_text(col, lang),
            ))
    return slots


def _array_slots(component: Component, response_type: str, lang: str) -> List[ResponseDef]:
    """Rows of responsive single choice and bipolar likert arrays, sharing one option list."""
    options = _find_child(component, "options")
    if options is None:
        logger.debug("options not found in %s", component.get("key"))
        return []

    bipolar = response_type == c.QUESTION_TYPE_RESPONSIVE_BIPOLAR_LIKERT_ARRAY
    slots = []
    for row in component.get("items") or []:
        if row.get("role") != "row":
            continue
        if bipolar:
            start = _find_child(row, "start")
            end = _find_child(row, "end")
            label = get_preview_text(start, lang) + " vs. " + get_preview_text(end, lang)
        else:
            label = get_preview_text(row, lang)
        slot = ResponseDef(id=row.get("key", ""), response_type=response_type, label=label)
        for o in options.get("items") or []:
            option_label = o.get("key", "") if bipolar else get_preview_text(o, lang)
            slot.options.append(ResponseOption(id=o.get("key", ""), option_type=c.OPTION_TYPE_RADIO,
                                               label=option_label))
        slots.append(slot)
    return slots


def _contact_slots(component: Component, lang: str) -> List[ResponseDef]:
    key = component.get("key", "")
    slots = []
    for o in component.get("items") or []:
        role = o.get("role")
        if role in ("fullName", "email", "phone"):
            slots.append(ResponseDef(id=key + "." + o.get("key", ""), response_type=c.QUESTION_TYPE_TEXT_INPUT,
                                     label=get_preview_text(o, lang)))
        elif role == "address":
            for sub_key, label in (("street", "Street"), ("street2", "Street 2"),
                                   ("city", "City"), ("postalCode", "Postal Code")):
                slots.append(ResponseDef(id=key + "." + sub_key, response_type=c.QUESTION_TYPE_TEXT_INPUT,
                                         label=label))
    return slots


def map_to_response_defs(component: Optional[Component], lang: str = "") -> List[ResponseDef]:
    """
    Map one child of a responseGroup to its response slots.

    Roles with a ":" suffix (e.g. "input:custom") are matched by their
    prefix; if the prefix is unknown the slot is typed "unknown".
    Components with other unknown roles yield no slots.
    """
    if component is None:
        logger.error("unexpected empty component")
        return []

    key = component.get("key", "")
    role = component.get("role", "")
    sep_index = role.find(":")
    if sep_index == 0:
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_UNKNOWN)]
    item_role = role if sep_index < 0 else role[:sep_index]

    if item_role == "singleChoiceGroup":
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_SINGLE_CHOICE,
                            options=_choice_options(component, c.OPTION_TYPE_RADIO, lang))]
    if item_role == "multipleChoiceGroup":
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_MULTIPLE_CHOICE,
                            options=_choice_options(component, c.OPTION_TYPE_CHECKBOX, lang))]
    if item_role == "dropDownGroup":
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_DROPDOWN, options=[
            ResponseOption(id=o.get("key", ""), option_type=c.OPTION_TYPE_DROPDOWN_OPTION,
                           label=get_preview_text(o, lang))
            for o in component.get("items") or []
        ])]
    if item_role in INPUT_ROLE_TYPES:
        return [ResponseDef(id=key, response_type=INPUT_ROLE_TYPES[item_role],
                            label=get_preview_text(component, lang))]
    if item_role == "eq5d-health-indicator":
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_EQ5D_SLIDER)]
    if item_role == "likert":
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_LIKERT, options=[
            ResponseOption(id=o.get("key", ""), option_type=c.OPTION_TYPE_RADIO, label=get_preview_text(o, lang))
            for o in component.get("items") or []
        ])]
    if item_role == "likertGroup":
        return [
            ResponseDef(
                id=likert.get("key", ""),
                response_type=c.QUESTION_TYPE_LIKERT_GROUP,
                options=[ResponseOption(id=o.get("key", ""), option_type=c.OPTION_TYPE_RADIO)
                         for o in likert.get("items") or []],
            )
            for likert in component.get("items") or []
            if likert.get("role") == "likert"
        ]
    if item_role == "responsiveSingleChoiceArray":
        return _array_slots(component, c.QUESTION_TYPE_RESPONSIVE_SINGLE_CHOICE_ARRAY, lang)
    if item_role == "responsiveBipolarLikertScaleArray":
        return _array_slots(component, c.QUESTION_TYPE_RESPONSIVE_BIPOLAR_LIKERT_ARRAY, lang)
    if item_role == "matrix":
        return _matrix_slots(component, lang)
    if item_role == "responsiveMatrix":
        return _responsive_matrix_slots(component, lang)
    if item_role == "cloze":
        options = []
        for o in component.get("items") or []:
            option_type = CLOZE_FIELD_TYPES.get(o.get("role"))
            if option_type is not None:
                options.append(ResponseOption(id=o.get("key", ""), option_type=option_type,
                                              label=get_preview_text(o, lang)))
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_CLOZE, options=options)]
    if item_role == "contact":
        return _contact_slots(component, lang)

    if sep_index > 0:
        return [ResponseDef(id=key, response_type=c.QUESTION_TYPE_UNKNOWN)]
    logger.debug("component with role %s ignored (key %s)", role, key)
    return []


def get_question_type(responses: List[ResponseDef]) -> str:
    if not responses:
        return c.QUESTION_TYPE_EMPTY
    q_type = responses[0].response_type
    if len(responses) == 1:
        return q_type
    if c.QUESTION_TYPE_MATRIX in q_type:
        return c.QUESTION_TYPE_MATRIX
    if any(r.response_type != q_type for r in responses):
        return c.QUESTION_TYPE_UNKNOWN
    return q_type


def extract_responses(response_group: Optional[Component], lang: str = "") -> Tuple[List[ResponseDef], str]:
    if response_group is None:
        return [], c.QUESTION_TYPE_EMPTY
    responses = []
    for component in response_group.get("items") or []:
        responses.extend(map_to_response_defs(component, lang))
    return responses, get_question_type(responses)


# =========================================================================
# Survey items
# =========================================================================

def _components(item: Dict[str, Any]) -> List[Component]:
    components = item.get("components")
    if not components:
        return []
    return components.get("items") or []


def _component_by_role(item: Dict[str, Any], role: str) -> Optional[Component]:
    for comp in _components(item):
        if comp.get("role") == role:
            return comp
    return None


def is_item_group(item: Optional[Dict[str, Any]]) -> bool:
    return bool(item) and bool(item.get("items"))


def extract_questions(root: Optional[Dict[str, Any]], options: Optional[ExtractOptions] = None) -> List[SurveyQuestion]:
    """Questions below `root`, depth-first in definition order."""
    if root is None:
        return []
    options = options or ExtractOptions()
    lang = options.use_label_lang

    questions = []
    for item in root.get("items") or []:
        if not isinstance(item, dict) or "key" not in item:
            raise DefinitionParseError(f"survey item without key below {root.get('key')!r}")
        if item.get("type") in (c.ITEM_TYPE_PAGE_BREAK, c.ITEM_TYPE_SURVEY_END):
            continue
        if item.get("confidentialMode"):
            continue
        if is_item_group(item):
            questions.extend(extract_questions(item, options))
            continue

        key = item["key"]
        if options.include_items:
            if key not in options.include_items:
                continue
        elif key in options.exclude_items:
            continue

        response_group = _component_by_role(item, c.COMPONENT_ROLE_RESPONSE_GROUP)
        if response_group is None:
            continue

        responses, q_type = extract_responses(response_group, lang)
        title = ""
        if lang:
            title_comp = _component_by_role(item, c.COMPONENT_ROLE_TITLE)
            if title_comp is not None:
                title = get_preview_text(title_comp, lang)

        questions.append(SurveyQuestion(id=key, title=title, question_type=q_type, responses=responses))
    return questions


def survey_def_to_version_preview(survey: Dict[str, Any], options: Optional[ExtractOptions] = None) -> SurveyVersionPreview:
    """
    Build the preview of one stored survey version.

    Args:
        survey: Survey document with versionId, published, unpublished
            and surveyDefinition (the root item)
        options: Item filters and label language

    Raises:
        DefinitionParseError: If the document is malformed
    """
    if not isinstance(survey, dict):
        raise DefinitionParseError("survey document must be a mapping")
    try:
        published = int(survey.get("published") or 0)
        unpublished = int(survey.get("unpublished") or 0)
    except (TypeError, ValueError) as e:
        raise DefinitionParseError(f"invalid publish timestamps: {e}") from e

    return SurveyVersionPreview(
        version_id=survey.get("versionId", ""),
        published=published,
        unpublished=unpublished,
        questions=extract_questions(survey.get("surveyDefinition"), options),
    )


__all__ = [
    "ExtractOptions",
    "get_translation",
    "get_preview_text",
    "map_to_response_defs",
    "get_question_type",
    "extract_responses",
    "is_item_group",
    "extract_questions",
    "survey_def_to_version_preview",
]
