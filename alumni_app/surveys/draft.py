"""Survey draft transitions.

A draft is a plain, JSON-compatible dict so it can live in the session
between builder requests::

    {
        "title": "", "description": "", "start_date": "", "end_date": "",
        "questions": [
            {"id": "...", "text": "", "type": "Open-ended", "required": False,
             "options": [{"id": "...", "text": "", "value": 1}]},
        ],
    }

Every transition takes the current draft and returns a new one; the input is
never modified. Question and option ids are generated here and stay with
their item for the lifetime of the draft. They are never sent to the server.
"""

from __future__ import annotations

import secrets
from copy import deepcopy
from typing import Any

from django.db import models

from .exceptions import DraftFieldError


class QuestionType(models.TextChoices):
    OPEN_ENDED = "Open-ended", "Open-ended"
    MULTIPLE_CHOICE = "Multiple Choice", "Multiple Choice"
    RATING = "Rating", "Rating"


# Question types whose options are sent to the server
OPTION_QUESTION_TYPES = {QuestionType.MULTIPLE_CHOICE.value, QuestionType.RATING.value}

MULTIPLE_CHOICE_DEFAULT_OPTION = "1st option"

# Rating options in scale order; values are 1..5 in this order
RATING_OPTION_TEXTS = [
    "Poorly",
    "Unsatisfied",
    "Neutral",
    "Satisfied",
    "Very Satisfied",
]

SURVEY_FIELDS = ("title", "description", "start_date", "end_date")
QUESTION_FIELDS = ("text", "type", "required")
OPTION_FIELDS = ("text", "value")


def new_id() -> str:
    return secrets.token_hex(8)


def empty_draft() -> dict[str, Any]:
    return {
        "title": "",
        "description": "",
        "start_date": "",
        "end_date": "",
        "questions": [],
    }


def _new_option(text: str, value: Any) -> dict[str, Any]:
    return {"id": new_id(), "text": text, "value": value}


def _check_index(items: list, index: int, label: str) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"{label} {index} does not exist")


def _question(draft: dict[str, Any], index: int) -> dict[str, Any]:
    _check_index(draft["questions"], index, "Question")
    return draft["questions"][index]


def default_options_for(question_type: str) -> list[dict[str, Any]]:
    """Return the options a question starts with after switching to ``question_type``."""
    if question_type == QuestionType.MULTIPLE_CHOICE:
        return [_new_option(MULTIPLE_CHOICE_DEFAULT_OPTION, 1)]
    if question_type == QuestionType.RATING:
        return [
            _new_option(text, value)
            for value, text in enumerate(RATING_OPTION_TEXTS, start=1)
        ]
    return []


def set_field(draft: dict[str, Any], name: str, value: Any) -> dict[str, Any]:
    if name not in SURVEY_FIELDS:
        raise DraftFieldError(f"Unknown survey field: {name}")
    updated = deepcopy(draft)
    updated[name] = value
    return updated


def add_question(draft: dict[str, Any]) -> dict[str, Any]:
    updated = deepcopy(draft)
    updated["questions"].append(
        {
            "id": new_id(),
            "text": "",
            "type": QuestionType.OPEN_ENDED.value,
            "required": False,
            "options": [],
        }
    )
    return updated


def delete_question(draft: dict[str, Any], index: int) -> dict[str, Any]:
    _check_index(draft["questions"], index, "Question")
    updated = deepcopy(draft)
    del updated["questions"][index]
    return updated


def set_question_field(
    draft: dict[str, Any], index: int, field: str, value: Any
) -> dict[str, Any]:
    """Update one question field.

    Changing ``type`` replaces the question's options wholesale with the
    defaults for the new type. Options entered before the switch are lost.
    """
    if field not in QUESTION_FIELDS:
        raise DraftFieldError(f"Unknown question field: {field}")
    updated = deepcopy(draft)
    question = _question(updated, index)
    if field == "type":
        try:
            value = QuestionType(value).value
        except ValueError as exc:
            raise DraftFieldError(f"Unknown question type: {value}") from exc
        question["options"] = default_options_for(value)
    elif field == "required":
        value = bool(value)
    question[field] = value
    return updated


def _option_question(draft: dict[str, Any], index: int) -> dict[str, Any]:
    question = _question(draft, index)
    if question["type"] not in OPTION_QUESTION_TYPES:
        raise DraftFieldError(f"{question['type']} questions do not take options")
    return question


def add_option(draft: dict[str, Any], question_index: int) -> dict[str, Any]:
    updated = deepcopy(draft)
    options = _option_question(updated, question_index)["options"]
    options.append(_new_option("", len(options) + 1))
    return updated


def set_option_field(
    draft: dict[str, Any],
    question_index: int,
    option_index: int,
    field: str,
    value: Any,
) -> dict[str, Any]:
    """Update an option's text or value.

    Values are kept as entered and may be whole numbers or strings; they are
    only converted to integers when the payload is built.
    """
    if field not in OPTION_FIELDS:
        raise DraftFieldError(f"Unknown option field: {field}")
    if field == "text" and not isinstance(value, str):
        raise DraftFieldError(f"Option text must be a string, not {value!r}")
    if field == "value" and (isinstance(value, bool) or not isinstance(value, (int, str))):
        raise DraftFieldError(f"Option value {value!r} is not a whole number")
    updated = deepcopy(draft)
    options = _option_question(updated, question_index)["options"]
    _check_index(options, option_index, "Option")
    options[option_index][field] = value
    return updated


def delete_option(
    draft: dict[str, Any], question_index: int, option_index: int
) -> dict[str, Any]:
    updated = deepcopy(draft)
    options = _question(updated, question_index)["options"]
    _check_index(options, option_index, "Option")
    del options[option_index]
    return updated


def _comparable(value: Any) -> Any:
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def find_duplicate_value(draft: dict[str, Any], question_index: int) -> Any | None:
    """Return the first option value that repeats an earlier sibling, or None.

    Values compare as integers where they parse as one, so ``"2"`` and ``2``
    collide. The value is returned as stored.
    """
    seen = set()
    for option in _question(draft, question_index)["options"]:
        key = _comparable(option["value"])
        if key in seen:
            return option["value"]
        seen.add(key)
    return None


def option_value_as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DraftFieldError(f"Option value {value!r} is not a whole number") from exc


def build_payload(draft: dict[str, Any]) -> dict[str, Any]:
    """Serialize a draft into the save endpoint's request body.

    Options are only sent for Multiple Choice and Rating questions and ids
    are dropped.
    """
    questions = []
    for question in draft["questions"]:
        if question["type"] in OPTION_QUESTION_TYPES:
            options = [
                {
                    "option_text": option["text"],
                    "option_value": option_value_as_int(option["value"]),
                }
                for option in question["options"]
            ]
        else:
            options = []
        questions.append(
            {
                "question_text": question["text"],
                "question_type": question["type"],
                "required": question["required"],
                "options": options,
            }
        )
    return {
        "title": draft["title"],
        "description": draft["description"],
        "start_date": draft["start_date"],
        "end_date": draft["end_date"],
        "questions": questions,
    }
