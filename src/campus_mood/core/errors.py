"""Domain error hierarchy shared by services and the API layer."""

from __future__ import annotations


class CampusMoodError(Exception):
    """Base class for errors surfaced to API callers."""

    message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class PostValidationError(CampusMoodError):
    """Raised when a post submission fails validation before any write."""

    message = "Invalid post"


class ReactionValidationError(CampusMoodError):
    """Raised when a reaction references an unknown reaction kind."""

    message = "Unknown reaction"


class EmailDomainNotAllowedError(CampusMoodError):
    """Raised when a signed-in email is outside the allowed college domains."""

    message = "Please use your college email address to sign in"


class DailyLimitExceededError(CampusMoodError):
    """Raised when a user has used up today's post allowance."""

    message = "Daily post limit reached. Try again tomorrow!"

    def __init__(self, limit: int, message: str | None = None) -> None:
        super().__init__(message)
        self.limit = limit


class StoreError(CampusMoodError):
    """Transient failure talking to the backing store."""

    message = "Failed to reach the database. Please try again."
