"""
Form-to-Telegram Bridge API - Main Application.

FastAPI application relaying storefront orders and leads to Telegram chats.
CORS is open because the storefront is served from a different origin.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.routers import telegram
from domain.submission import SubmissionKind
from services.config import Settings, load_settings
from services.dedup_service import DuplicateSuppressor
from services.intake_service import IntakePipeline, Relay
from services.rate_limit_service import lead_rate_limiter, order_rate_limiter
from services.telegram_relay import TelegramRelay

logger = logging.getLogger(__name__)


def health_check():
    """
    Health check endpoint.
    """
    return {"ok": True}


def create_app(settings: Optional[Settings] = None, relay: Optional[Relay] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Runtime settings (read from the environment when omitted)
        relay: Relay to send messages with (a TelegramRelay when omitted)
    """
    settings = settings or load_settings()
    telegram_relay = TelegramRelay(settings) if relay is None else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if telegram_relay is not None:
            await telegram_relay.aclose()

    app = FastAPI(
        title="Form-to-Telegram Bridge API",
        description="Relays storefront orders and leads to Telegram chats",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.pipeline = IntakePipeline(
        relay=relay or telegram_relay,
        suppressor=DuplicateSuppressor(),
        limiters={
            SubmissionKind.ORDER: order_rate_limiter(),
            SubmissionKind.LEAD: lead_rate_limiter(),
        },
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.include_router(telegram.router, prefix="/api/telegram", tags=["Telegram"])

    return app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Telegram bridge listening on :%s", settings.port)
    # X-Forwarded-For is resolved by api.network.client_address, not by uvicorn.
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, proxy_headers=False)


if __name__ == "__main__":
    main()
