"""
Tests for `services/telegram_relay.py`.

Telegram is replaced by an httpx.MockTransport that records every request.

Covers:
- Request shape (chat, topic, parse mode, link previews disabled).
- Destination selection per submission kind.
- The single "message thread not found" fallback and its failure mode.
"""

from __future__ import annotations

import asyncio
import json
from typing import Callable, List, Optional

import httpx
import pytest

from services.config import Settings
from services.telegram_relay import RelayError, TelegramRelay
from services.validation_service import validate_lead, validate_order

THREAD_NOT_FOUND_BODY = {
    "ok": False,
    "error_code": 400,
    "description": "Bad Request: message thread not found",
}


def _settings(**overrides) -> Settings:
    fields = dict(bot_token="TOKEN", orders_chat_id="-1001", orders_thread_id=7)
    fields.update(overrides)
    return Settings(**fields)


def _send(
    settings: Settings,
    submission,
    responder: Callable[[int], httpx.Response],
    sent: Optional[List[dict]] = None,
) -> List[dict]:
    """Send through a mock transport; `responder` gets the 0-based attempt number."""

    sent = [] if sent is None else sent

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/botTOKEN/sendMessage"
        sent.append(json.loads(request.content))
        return responder(len(sent) - 1)

    async def run() -> None:
        relay = TelegramRelay(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        try:
            await relay.send(submission)
        finally:
            await relay.aclose()

    asyncio.run(run())
    return sent


def _ok(_: int) -> httpx.Response:
    return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})


def test_order_request_shape(order_payload):
    sent = _send(_settings(), validate_order(order_payload), _ok)

    assert len(sent) == 1
    body = sent[0]
    assert body["chat_id"] == "-1001"
    assert body["message_thread_id"] == 7
    assert body["parse_mode"] == "MarkdownV2"
    assert body["disable_web_page_preview"] is True
    assert body["text"].startswith("*Новий заказ*")


def test_no_thread_id_when_not_configured(order_payload):
    sent = _send(_settings(orders_thread_id=None), validate_order(order_payload), _ok)

    assert "message_thread_id" not in sent[0]


def test_lead_uses_orders_chat_when_no_leads_chat(lead_payload):
    sent = _send(_settings(), validate_lead(lead_payload), _ok)

    assert sent[0]["chat_id"] == "-1001"
    assert "message_thread_id" not in sent[0]


def test_lead_uses_own_chat_and_topic(lead_payload):
    settings = _settings(leads_chat_id="-1002", leads_thread_id=3)

    sent = _send(settings, validate_lead(lead_payload), _ok)

    assert sent[0]["chat_id"] == "-1002"
    assert sent[0]["message_thread_id"] == 3


def test_thread_not_found_retries_once_without_thread(order_payload):
    def responder(attempt: int) -> httpx.Response:
        if attempt == 0:
            return httpx.Response(400, json=THREAD_NOT_FOUND_BODY)
        return _ok(attempt)

    sent = _send(_settings(), validate_order(order_payload), responder)

    assert len(sent) == 2
    assert sent[0]["message_thread_id"] == 7
    assert "message_thread_id" not in sent[1]
    assert sent[1]["text"] == sent[0]["text"]


def test_failed_retry_raises(order_payload):
    def responder(attempt: int) -> httpx.Response:
        if attempt == 0:
            return httpx.Response(400, json=THREAD_NOT_FOUND_BODY)
        return httpx.Response(403, text="Forbidden: bot was kicked from the supergroup chat")

    sent: List[dict] = []
    with pytest.raises(RelayError) as exc:
        _send(_settings(), validate_order(order_payload), responder, sent)

    assert exc.value.status_code == 403
    assert "bot was kicked" in exc.value.body
    assert len(sent) == 2


def test_other_errors_are_not_retried(order_payload):
    def responder(_: int) -> httpx.Response:
        return httpx.Response(400, text="Bad Request: can't parse entities")

    sent: List[dict] = []
    with pytest.raises(RelayError) as exc:
        _send(_settings(), validate_order(order_payload), responder, sent)

    assert exc.value.status_code == 400
    assert str(exc.value) == "Telegram error: 400 Bad Request: can't parse entities"
    assert len(sent) == 1


def test_thread_not_found_without_thread_is_not_retried(order_payload):
    def responder(_: int) -> httpx.Response:
        return httpx.Response(400, json=THREAD_NOT_FOUND_BODY)

    sent: List[dict] = []
    with pytest.raises(RelayError):
        _send(_settings(orders_thread_id=None), validate_order(order_payload), responder, sent)

    assert len(sent) == 1


def test_transport_errors_propagate(order_payload):
    def responder(_: int) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    with pytest.raises(httpx.ConnectError):
        _send(_settings(), validate_order(order_payload), responder)


def test_default_client_uses_configured_timeout():
    async def run() -> httpx.Timeout:
        relay = TelegramRelay(_settings(timeout_seconds=3.5))
        try:
            return relay._client.timeout
        finally:
            await relay.aclose()

    timeout = asyncio.run(run())

    assert timeout.connect == 3.5
    assert timeout.read == 3.5
