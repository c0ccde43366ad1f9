"""Domain error taxonomy shared by services and controllers."""

from __future__ import annotations


class JournalError(Exception):
    """Base class for errors surfaced to API callers as JSON."""

    code = "error"
    status = 400

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        super().__init__(message or self.code)
        if code:
            self.code = code

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.code


class InvalidInput(JournalError, ValueError):
    """Bad mood score, bad date format, or another rejected input."""

    code = "validation_error"
    status = 400


class NotFound(JournalError):
    code = "not_found"
    status = 404


class Conflict(JournalError):
    """Uniqueness constraint lost to a concurrent writer."""

    code = "conflict"
    status = 409


class SummarizerError(JournalError):
    """AI collaborator failure; callers may retry the whole request."""

    code = "ai_error"
    status = 503
    retryable = True


class SummarizerUnavailable(SummarizerError):
    code = "ai_unavailable"
    status = 503


class SummarizerMalformed(SummarizerError):
    code = "ai_malformed_reply"
    status = 502


__all__ = [
    "JournalError",
    "InvalidInput",
    "NotFound",
    "Conflict",
    "SummarizerError",
    "SummarizerUnavailable",
    "SummarizerMalformed",
]
