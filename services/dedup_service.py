"""
Duplicate submission suppression.

Accidental double clicks and client retry storms produce the same submission
several times within seconds. Each accepted submission leaves a fingerprint in
a bounded in-memory LRU cache for a short time; a repeat inside that window is
rejected.

This is a best-effort guard for a single process. It does not survive a
restart and is not shared between instances.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Callable, Dict

from cachetools import TTLCache

from domain.submission import Order, Submission
from services.errors import DuplicateSubmit

logger = logging.getLogger(__name__)

DEFAULT_MAXSIZE = 5000
DEFAULT_TTL_SECONDS = 120.0


def _fingerprint_fields(submission: Submission) -> Dict[str, Any]:
    if isinstance(submission, Order):
        return {
            "k": "order",
            "phone": submission.customer.phone,
            "city": submission.delivery.city,
            "address": submission.delivery.address,
            "items": [
                {"t": item.title, "l": item.label, "q": item.qty, "p": item.price}
                for item in submission.items
            ],
            "total": submission.total,
        }
    return {
        "k": "lead",
        "phone": submission.customer.phone,
        "name": submission.customer.first_name.strip(),
    }


def fingerprint(submission: Submission) -> str:
    """
    Deterministic digest of the fields that make two submissions "the same".

    Orders: phone, city, address, the ordered item list and the total.
    Leads: phone and first name.
    Names on orders and the source URL are deliberately left out.
    """

    canonical = json.dumps(
        _fingerprint_fields(submission),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class DuplicateSuppressor:
    """
    Remembers recent fingerprints in a TTL + LRU cache.

    `check_and_remember` does not await, so under the asyncio event loop the
    lookup and insert happen without interleaving. Callers running it from
    several OS threads must serialize calls themselves.
    """

    def __init__(
        self,
        maxsize: int = DEFAULT_MAXSIZE,
        ttl: float = DEFAULT_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timer = timer
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, submission: Submission) -> bool:
        return fingerprint(submission) in self._cache

    def check_and_remember(self, submission: Submission) -> str:
        """
        Record the submission, or reject it if it was seen within the TTL.

        A rejected repeat does not refresh the stored entry, so the window is
        measured from the first accepted submission.

        Returns:
            The submission's fingerprint

        Raises:
            DuplicateSubmit: If the fingerprint is cached and unexpired
        """

        key = fingerprint(submission)
        if key in self._cache:
            logger.info(
                "Duplicate submission suppressed",
                extra={"kind": submission.kind.value, "fingerprint": key[:12]},
            )
            raise DuplicateSubmit()
        self._cache[key] = self._timer()
        return key

    def clear(self) -> None:
        self._cache.clear()


__all__ = ["DEFAULT_MAXSIZE", "DEFAULT_TTL_SECONDS", "DuplicateSuppressor", "fingerprint"]
