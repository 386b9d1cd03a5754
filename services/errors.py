"""
Intake error taxonomy.

Every failure the intake pipeline can detect is raised as an IntakeError
subclass carrying the HTTP status and the client-facing message. The API
routers convert them into `{"ok": false, "error": ...}` responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from services.rate_limit_service import RateLimitDecision


class IntakeError(Exception):
    """Base class for submission failures that map to an HTTP response."""

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ClientInputError(IntakeError):
    """Missing or malformed field; the message names the first failing rule."""

    status_code = 400
    default_message = "Invalid payload"


class BotRejected(IntakeError):
    """A honeypot field was filled in."""

    status_code = 400
    default_message = "Bot rejected"


class PayloadTooLarge(IntakeError):
    """The request body exceeds the accepted size."""

    status_code = 413
    default_message = "Payload too large"


class RateLimited(IntakeError):
    """The caller exceeded the route's request ceiling."""

    status_code = 429
    default_message = "Too many requests"

    def __init__(self, decision: "RateLimitDecision", message: str | None = None) -> None:
        super().__init__(message)
        self.decision = decision


class DuplicateSubmit(IntakeError):
    """The same submission was accepted within the dedup window."""

    status_code = 429
    default_message = "Duplicate submit"


class UpstreamError(IntakeError):
    """Relaying to Telegram failed."""

    status_code = 502
    default_message = "Upstream error"


__all__ = [
    "BotRejected",
    "ClientInputError",
    "DuplicateSubmit",
    "IntakeError",
    "PayloadTooLarge",
    "RateLimited",
    "UpstreamError",
]
