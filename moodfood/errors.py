"""
Error taxonomy shared by the stores, the gateway and the HTTP layer.

Every error carries a plain-language ``message`` that is safe to show to
the end user and the HTTP status the API reports it with.
"""
from __future__ import annotations


class MoodFoodError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MoodFoodError):
    """A required field is missing or blank. Raised before any mutation."""

    status_code = 400


class NotFoundError(MoodFoodError):
    status_code = 404


class ConflictError(MoodFoodError):
    """The action was already applied (e.g. a duplicate like)."""

    status_code = 409


class UpstreamError(MoodFoodError):
    """The place-search provider or listing endpoint failed or sent garbage."""

    status_code = 502
