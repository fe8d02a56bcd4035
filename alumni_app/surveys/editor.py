"""Survey draft editor.

``SurveyDraftEditor`` owns one draft together with the state derived from it:
per-question duplicate value errors, the alert shown to the user, and whether
a save is in flight. Mutations go through the pure transitions in
``draft.py``. Option values are only re-validated after a value edit or an
option deletion; adding options and editing option text never re-run it.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from django.conf import settings
from django.utils import timezone

from . import draft as drafts
from .exceptions import DraftError, DraftFieldError, DraftLockedError, SurveySaveError

logger = logging.getLogger(__name__)

SAVE_SUCCESS_MESSAGE = "Survey saved successfully!"
SAVE_FAILED_MESSAGE = "Failed to save survey. Please try again."
SAVE_ERROR_MESSAGE = "Error saving survey. Please try again."


class SurveyTransport(Protocol):
    def save(self, payload: dict[str, Any]) -> int:
        """Submit ``payload`` and return the response status code."""
        ...


def empty_alert() -> dict[str, str]:
    return {"message": "", "severity": ""}


def survey_feedback_url() -> str:
    return getattr(settings, "SURVEY_FEEDBACK_URL", "/admin/survey-feedback")


def _lock_timeout() -> float:
    return float(getattr(settings, "SURVEY_SAVE_LOCK_TIMEOUT", 60))


def _lock_expired(started: float | None) -> bool:
    """A lock with no start time, or older than the lock timeout, is stale."""
    if started is None:
        return True
    return timezone.now().timestamp() - started > _lock_timeout()


class SurveyDraftEditor:
    def __init__(
        self,
        draft: dict[str, Any] | None = None,
        errors: dict[str, str] | None = None,
        alert: dict[str, str] | None = None,
        saving: bool = False,
        scroll_to: str | None = None,
        saving_started: float | None = None,
    ):
        self.draft = draft if draft is not None else drafts.empty_draft()
        # Keyed by question id so errors stay attached when questions move
        self.errors = dict(errors or {})
        self.alert = dict(alert or {"message": "", "severity": "info"})
        self.saving = saving
        self.saving_started = saving_started if saving else None
        self.scroll_to = scroll_to
        self.redirect: str | None = None

    @classmethod
    def from_state(cls, state: dict[str, Any] | None) -> "SurveyDraftEditor":
        if not state:
            return cls()
        saving = bool(state.get("saving", False))
        saving_started = state.get("saving_started")
        if saving and _lock_expired(saving_started):
            # The request holding the lock never finished
            logger.warning(f"Releasing stale survey save lock started at {saving_started}")
            saving, saving_started = False, None
        return cls(
            draft=state.get("draft"),
            errors=state.get("errors"),
            alert=state.get("alert"),
            saving=saving,
            scroll_to=state.get("scroll_to"),
            saving_started=saving_started,
        )

    def to_state(self) -> dict[str, Any]:
        return {
            "draft": self.draft,
            "errors": self.errors,
            "alert": self.alert,
            "saving": self.saving,
            "saving_started": self.saving_started,
            "scroll_to": self.scroll_to,
        }

    @property
    def can_save(self) -> bool:
        return not self.errors and not self.saving

    def _apply(self, transition, *args) -> None:
        if self.saving:
            raise DraftLockedError("The survey is being saved and cannot be edited.")
        self.draft = transition(self.draft, *args)

    def _question_id(self, index: int) -> str:
        return self.draft["questions"][index]["id"]

    # Survey fields

    def set_field(self, name: str, value: Any) -> None:
        self._apply(drafts.set_field, name, value)

    # Questions

    def add_question(self) -> None:
        self._apply(drafts.add_question)
        self.scroll_to = self.draft["questions"][-1]["id"]

    def delete_question(self, index: int) -> None:
        self._apply(drafts.delete_question, index)
        remaining = {question["id"] for question in self.draft["questions"]}
        self.errors = {
            question_id: message
            for question_id, message in self.errors.items()
            if question_id in remaining
        }

    def set_question_field(self, index: int, field: str, value: Any) -> None:
        self._apply(drafts.set_question_field, index, field, value)

    # Options

    def add_option(self, question_index: int) -> None:
        self._apply(drafts.add_option, question_index)

    def set_option_field(
        self, question_index: int, option_index: int, field: str, value: Any
    ) -> None:
        self._apply(drafts.set_option_field, question_index, option_index, field, value)
        if field == "value":
            self.validate_options(question_index)

    def delete_option(self, question_index: int, option_index: int) -> None:
        self._apply(drafts.delete_option, question_index, option_index)
        self.validate_options(question_index)

    def validate_options(self, question_index: int) -> None:
        question_id = self._question_id(question_index)
        duplicate = drafts.find_duplicate_value(self.draft, question_index)
        if duplicate is not None:
            self.errors[question_id] = f"Duplicate option value found: {duplicate}"
            self.alert = {
                "message": f"Duplicate option value found in Question {question_index + 1}",
                "severity": "error",
            }
            logger.debug(
                f"Duplicate option value {duplicate!r} in question {question_index + 1}"
            )
        else:
            self.errors.pop(question_id, None)
            self.alert = empty_alert()

    def dismiss_alert(self) -> None:
        self.alert = empty_alert()

    # Save / cancel

    def begin_save(self) -> dict[str, Any]:
        """Lock the draft and return the payload to submit.

        Raises ``DraftLockedError`` when a save is already running,
        ``DraftError`` while any question has a duplicate option value and
        ``DraftFieldError`` when an option value is not a whole number.
        """
        if self.saving:
            raise DraftLockedError("The survey is already being saved.")
        if self.errors:
            raise DraftError("Resolve duplicate option values before saving.")
        try:
            payload = drafts.build_payload(self.draft)
        except DraftFieldError as exc:
            self.alert = {"message": str(exc), "severity": "error"}
            raise
        self.saving = True
        self.saving_started = timezone.now().timestamp()
        return payload

    def finish_save(self, transport: SurveyTransport, payload: dict[str, Any]) -> bool:
        """Submit ``payload`` and settle the save. Returns True on success."""
        try:
            status_code = transport.save(payload)
        except SurveySaveError as exc:
            logger.error(f"Error saving survey: {exc}")
            self.alert = {"message": SAVE_ERROR_MESSAGE, "severity": "error"}
            return False
        finally:
            self.saving = False
            self.saving_started = None
        if status_code != 201:
            logger.warning(f"Survey save rejected with status {status_code}")
            self.alert = {"message": SAVE_FAILED_MESSAGE, "severity": "error"}
            return False
        logger.info(f"Survey saved: {payload['title']!r}")
        self.draft = drafts.empty_draft()
        self.errors = {}
        self.scroll_to = None
        self.alert = {"message": SAVE_SUCCESS_MESSAGE, "severity": "success"}
        self.redirect = survey_feedback_url()
        return True

    def save(self, transport: SurveyTransport) -> bool:
        payload = self.begin_save()
        return self.finish_save(transport, payload)

    def cancel(self) -> str:
        if self.saving:
            raise DraftLockedError("The survey is being saved and cannot be discarded.")
        self.draft = drafts.empty_draft()
        self.errors = {}
        self.scroll_to = None
        self.alert = empty_alert()
        self.redirect = survey_feedback_url()
        return self.redirect
