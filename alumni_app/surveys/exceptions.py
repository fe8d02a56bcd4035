"""Exceptions raised while editing and saving survey drafts."""

from __future__ import annotations


class DraftError(Exception):
    """Base class for survey draft errors."""

    pass


class DraftFieldError(DraftError, ValueError):
    """Raised for an unknown field, an unknown question type or an unparsable option value."""

    pass


class DraftLockedError(DraftError):
    """Raised when the draft is mutated while a save is in flight."""

    pass


class SurveySaveError(DraftError):
    """Raised by a transport when the save request could not be completed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
