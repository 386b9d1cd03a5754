"""
Honeypot bot filter.

The storefront form renders two inputs that are hidden from people
(`company` and `email2`). Browsers driven by a human leave them empty;
form-filling bots usually do not.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from services.errors import BotRejected

logger = logging.getLogger(__name__)

HONEYPOT_FIELDS = ("company", "email2")


def _filled(value: Any) -> bool:
    if value is None or value is False:
        return False
    return str(value).strip() != ""


def check_honeypot(payload: Mapping[str, Any]) -> None:
    """
    Reject the payload if any honeypot field carries a value.

    Raises:
        BotRejected: If `company` or `email2` is non-empty after trimming
    """

    trapped = [name for name in HONEYPOT_FIELDS if _filled(payload.get(name))]
    if trapped:
        logger.info("Honeypot triggered", extra={"honeypot_fields": trapped})
        raise BotRejected()


__all__ = ["HONEYPOT_FIELDS", "check_honeypot"]
