"""
Telegram Bot API relay.

Posts composed messages to the configured chat via `sendMessage`.

Failure handling:
- If the destination has a forum topic (message_thread_id) and Telegram
  answers "message thread not found" (topic deleted or the chat is not a
  forum), the message is sent once more to the chat's main stream.
- Every other failure raises RelayError with the HTTP status and body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from domain.submission import Submission
from services.config import Destination, Settings
from services.message_formatter import compose_message

logger = logging.getLogger(__name__)

THREAD_NOT_FOUND = "message thread not found"


class RelayError(Exception):
    """Telegram rejected the message or answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Telegram error: {status_code} {body}")


class TelegramRelay:
    """
    Sends submissions to Telegram.

    The underlying httpx.AsyncClient is created with a bounded timeout unless
    one is injected (tests pass a client backed by httpx.MockTransport).
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._url = f"{settings.api_base}/bot{settings.bot_token}/sendMessage"

    async def aclose(self) -> None:
        await self._client.aclose()

    def _body(self, destination: Destination, text: str, with_thread: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "chat_id": destination.chat_id,
            "text": text,
            "parse_mode": "MarkdownV2",
            "disable_web_page_preview": True,
        }
        if with_thread and destination.thread_id:
            body["message_thread_id"] = destination.thread_id
        return body

    async def _post(self, body: Dict[str, Any]) -> httpx.Response:
        return await self._client.post(self._url, json=body)

    async def send(self, submission: Submission) -> None:
        """
        Relay one submission.

        Raises:
            RelayError: If Telegram answers with an error (after the topic fallback)
            httpx.HTTPError: On transport failures and timeouts
        """

        destination = self._settings.destination(submission.kind)
        text = compose_message(submission)

        response = await self._post(self._body(destination, text, with_thread=True))

        if response.is_error:
            error_text = response.text
            if destination.thread_id and THREAD_NOT_FOUND in error_text:
                logger.warning(
                    "Telegram topic not found, retrying in the main chat",
                    extra={"chat_id": destination.chat_id, "thread_id": destination.thread_id},
                )
                response = await self._post(self._body(destination, text, with_thread=False))
            else:
                raise RelayError(response.status_code, error_text)

        if response.is_error:
            raise RelayError(response.status_code, response.text)

        logger.info("Message sent (%s)", submission.kind.value)


__all__ = ["RelayError", "TelegramRelay", "THREAD_NOT_FOUND"]
