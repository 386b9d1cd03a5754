"""
Per-route request rate limiting.

Each public route gets its own limiter counting requests per caller address in
a moving (sliding) window, backed by the `limits` library's in-memory storage.

Limits:
- Orders: 8 requests per 120 seconds
- Leads: 6 requests per 60 seconds
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Dict, Optional

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import MovingWindowRateLimiter

ORDER_LIMIT = 8
ORDER_WINDOW_SECONDS = 120
LEAD_LIMIT = 6
LEAD_WINDOW_SECONDS = 60


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """
    Outcome of counting one request against a route limit.

    reset_after: whole seconds until the window frees a slot for this caller.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_after: int
    window: int

    def headers(self) -> Dict[str, str]:
        """Standard `RateLimit-*` response headers (IETF draft, as emitted by common proxies)."""

        headers = {
            "RateLimit-Policy": f"{self.limit};w={self.window}",
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_after)
        return headers


class RouteRateLimiter:
    """Moving-window limiter for a single route, keyed by caller address."""

    def __init__(
        self,
        name: str,
        amount: int,
        window_seconds: int,
        storage: Optional[Storage] = None,
    ) -> None:
        self.name = name
        self._item = RateLimitItemPerSecond(amount, window_seconds)
        self._storage = storage or MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self._storage)

    @property
    def limit(self) -> int:
        return self._item.amount

    @property
    def window(self) -> int:
        return self._item.get_expiry()

    def hit(self, source: str) -> RateLimitDecision:
        """Count one request from `source` and report whether it is within the limit."""

        allowed = self._strategy.hit(self._item, self.name, source)
        reset_time, remaining = self._strategy.get_window_stats(self._item, self.name, source)
        return RateLimitDecision(
            allowed=allowed,
            limit=self.limit,
            remaining=max(0, int(remaining)),
            reset_after=max(0, math.ceil(reset_time - time.time())),
            window=self.window,
        )

    def reset(self) -> None:
        self._storage.reset()


def order_rate_limiter(storage: Optional[Storage] = None) -> RouteRateLimiter:
    return RouteRateLimiter("order", ORDER_LIMIT, ORDER_WINDOW_SECONDS, storage)


def lead_rate_limiter(storage: Optional[Storage] = None) -> RouteRateLimiter:
    return RouteRateLimiter("lead", LEAD_LIMIT, LEAD_WINDOW_SECONDS, storage)


__all__ = [
    "RateLimitDecision",
    "RouteRateLimiter",
    "lead_rate_limiter",
    "order_rate_limiter",
]
