"""
Runtime configuration.

Settings are read from the environment once at startup and passed explicitly
into the components that need them.

Environment variables:
- TELEGRAM_BOT_TOKEN: Bot API token (required)
- TELEGRAM_ORDERS_CHAT_ID: chat receiving orders (required)
- TELEGRAM_ORDERS_THREAD_ID: forum topic for orders (optional, 0 = none)
- TELEGRAM_LEADS_CHAT_ID: chat receiving leads (defaults to the orders chat)
- TELEGRAM_LEADS_THREAD_ID: forum topic for leads (optional, 0 = none)
- TELEGRAM_API_BASE: Bot API base URL (default https://api.telegram.org)
- TELEGRAM_TIMEOUT_SECONDS: outbound request timeout (default 10)
- TRUST_PROXY_HOPS: reverse proxies trusted for X-Forwarded-For (default 1)
- PORT: listen port (default 5050)
- LOG_LEVEL: logging level name (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from domain.submission import SubmissionKind

DEFAULT_API_BASE = "https://api.telegram.org"
DEFAULT_PORT = 5050
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class Destination:
    """Where a message is posted: a chat and optionally a forum topic in it."""

    chat_id: str
    thread_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Settings:
    bot_token: str
    orders_chat_id: str
    orders_thread_id: Optional[int] = None
    leads_chat_id: Optional[str] = None
    leads_thread_id: Optional[int] = None
    api_base: str = DEFAULT_API_BASE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    trust_proxy_hops: int = 1
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def destination(self, kind: SubmissionKind) -> Destination:
        """Resolve the chat/topic for a submission kind."""

        if kind is SubmissionKind.ORDER:
            return Destination(self.orders_chat_id, self.orders_thread_id)
        return Destination(self.leads_chat_id or self.orders_chat_id, self.leads_thread_id)


def _require(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}.")
    return value


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be a number, got {raw!r}") from None


def _thread_id(env: Mapping[str, str], name: str) -> Optional[int]:
    # Telegram topic ids are positive; 0 means "post to the main chat".
    return _int(env, name, 0) or None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    When `env` is not given, a `.env` file at the project root is loaded first
    and `os.environ` is read.

    Raises:
        RuntimeError: If a required variable is missing or a number is malformed
    """

    if env is None:
        load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")
        env = os.environ

    return Settings(
        bot_token=_require(env, "TELEGRAM_BOT_TOKEN"),
        orders_chat_id=_require(env, "TELEGRAM_ORDERS_CHAT_ID"),
        orders_thread_id=_thread_id(env, "TELEGRAM_ORDERS_THREAD_ID"),
        leads_chat_id=(env.get("TELEGRAM_LEADS_CHAT_ID") or "").strip() or None,
        leads_thread_id=_thread_id(env, "TELEGRAM_LEADS_THREAD_ID"),
        api_base=(env.get("TELEGRAM_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        timeout_seconds=_float(env, "TELEGRAM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        trust_proxy_hops=_int(env, "TRUST_PROXY_HOPS", 1),
        port=_int(env, "PORT", DEFAULT_PORT),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )


__all__ = ["Destination", "Settings", "load_settings"]
