"""
Tests for `services/bot_filter.py`.
"""

from __future__ import annotations

import pytest

from services.bot_filter import check_honeypot
from services.errors import BotRejected


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"company": "", "email2": ""},
        {"company": "   ", "email2": None},
        {"company": None},
    ],
)
def test_empty_honeypots_pass(payload):
    check_honeypot(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"company": "ACME Ltd"},
        {"email2": "bot@example.com"},
        {"company": " ", "email2": "x"},
        {"company": 0},
    ],
)
def test_filled_honeypot_rejected(payload):
    with pytest.raises(BotRejected) as exc:
        check_honeypot(payload)

    assert exc.value.status_code == 400
    assert exc.value.message == "Bot rejected"


def test_honeypot_ignores_validity_of_other_fields():
    """Bot rejection does not depend on the rest of the payload."""

    with pytest.raises(BotRejected):
        check_honeypot({"customer": "garbage", "items": None, "company": "spam"})
