"""
Tests for `services/config.py`.
"""

from __future__ import annotations

import pytest

from domain.submission import SubmissionKind
from services.config import Destination, Settings, load_settings

REQUIRED = {"TELEGRAM_BOT_TOKEN": "TOKEN", "TELEGRAM_ORDERS_CHAT_ID": "-1001"}


def test_defaults():
    settings = load_settings(dict(REQUIRED))

    assert settings.bot_token == "TOKEN"
    assert settings.orders_chat_id == "-1001"
    assert settings.orders_thread_id is None
    assert settings.leads_chat_id is None
    assert settings.port == 5050
    assert settings.trust_proxy_hops == 1
    assert settings.timeout_seconds == 10.0
    assert settings.api_base == "https://api.telegram.org"
    assert settings.log_level == "INFO"


@pytest.mark.parametrize("missing", ["TELEGRAM_BOT_TOKEN", "TELEGRAM_ORDERS_CHAT_ID"])
def test_missing_required_variable(missing):
    env = dict(REQUIRED)
    env[missing] = "  "

    with pytest.raises(RuntimeError, match=missing):
        load_settings(env)


def test_optional_values():
    env = dict(
        REQUIRED,
        TELEGRAM_ORDERS_THREAD_ID="12",
        TELEGRAM_LEADS_CHAT_ID="-1002",
        TELEGRAM_LEADS_THREAD_ID="0",
        TELEGRAM_API_BASE="http://localhost:8081/",
        TELEGRAM_TIMEOUT_SECONDS="2.5",
        TRUST_PROXY_HOPS="2",
        PORT="8080",
        LOG_LEVEL="debug",
    )

    settings = load_settings(env)

    assert settings.orders_thread_id == 12
    assert settings.leads_chat_id == "-1002"
    assert settings.leads_thread_id is None
    assert settings.api_base == "http://localhost:8081"
    assert settings.timeout_seconds == 2.5
    assert settings.trust_proxy_hops == 2
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


def test_malformed_integer():
    with pytest.raises(RuntimeError, match="PORT"):
        load_settings(dict(REQUIRED, PORT="http"))


def test_destinations():
    settings = Settings(bot_token="T", orders_chat_id="-1001", orders_thread_id=5, leads_thread_id=9)

    assert settings.destination(SubmissionKind.ORDER) == Destination("-1001", 5)
    assert settings.destination(SubmissionKind.LEAD) == Destination("-1001", 9)

    with_leads_chat = Settings(bot_token="T", orders_chat_id="-1001", leads_chat_id="-1002")
    assert with_leads_chat.destination(SubmissionKind.LEAD) == Destination("-1002", None)
