"""
Submission intake pipeline.

Runs a form submission through every guard, in order, and relays it:

    rate limit -> honeypot -> validation -> dedup -> compose + send

Any stage may stop the request by raising an IntakeError. Only a submission
that passes every stage is sent, and it is sent exactly once.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from domain.submission import Submission, SubmissionKind
from services.bot_filter import check_honeypot
from services.dedup_service import DuplicateSuppressor
from services.errors import RateLimited, UpstreamError
from services.rate_limit_service import RateLimitDecision, RouteRateLimiter
from services.validation_service import validate_submission

logger = logging.getLogger(__name__)


class Relay(Protocol):
    async def send(self, submission: Submission) -> None: ...


class IntakePipeline:
    """
    Composes the intake guards around a relay.

    The dedup cache and rate-limit counters are shared by all in-flight
    requests. No stage awaits between reading and updating that state; the
    only suspension point is the relay call.
    """

    def __init__(
        self,
        relay: Relay,
        suppressor: DuplicateSuppressor,
        limiters: Mapping[SubmissionKind, RouteRateLimiter],
    ) -> None:
        self.relay = relay
        self.suppressor = suppressor
        self.limiters = dict(limiters)

    def admit(self, kind: SubmissionKind, source: str) -> RateLimitDecision:
        """
        Count the request against the route's limit.

        Raises:
            RateLimited: If the caller exceeded the ceiling for this route
        """

        decision = self.limiters[kind].hit(source)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"kind": kind.value, "source": source, "reset_after": decision.reset_after},
            )
            raise RateLimited(decision)
        return decision

    async def process(self, kind: SubmissionKind, payload: Mapping[str, Any]) -> Submission:
        """
        Filter, validate, deduplicate and relay an admitted submission.

        Returns:
            The validated Submission that was relayed

        Raises:
            BotRejected, ClientInputError, DuplicateSubmit: before anything is sent
            UpstreamError: If relaying failed for any reason
        """

        check_honeypot(payload)
        submission = validate_submission(kind, payload)
        self.suppressor.check_and_remember(submission)

        try:
            await self.relay.send(submission)
        except Exception:
            logger.exception("Relay to Telegram failed", extra={"kind": kind.value})
            raise UpstreamError() from None

        return submission


__all__ = ["IntakePipeline", "Relay"]
