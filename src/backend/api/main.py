"""
FastAPI server for the trading chat assistant with SSE streaming.

This module handles application setup, lifespan management, and middleware configuration.
Route handlers are organized in the routers/ package.

- Sessions: hold the conversation and the selected provider
- Chat stream: runs one TradingAssistant send cycle and streams its progress
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from api.routers import chat_router, sessions_router
from config.settings import get_settings
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, force=True)

# Reduce noise from HTTP client libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Opens the shared HTTP client on startup and closes it on shutdown.
    Chat sessions and assistants are created per request by the routers.
    """
    settings = get_settings()
    logger.info("Brave Trader API starting")
    logger.info("Broker gateway: %s", settings.broker_url)
    logger.info("Price API: %s", settings.price_api_url)
    if settings.strict_acknowledgement_check:
        logger.info("Strict acknowledgement check is ENABLED")

    application.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    try:
        yield
    finally:
        await application.state.http_client.aclose()
        logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(title="Brave Trader", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat_router)
app.include_router(sessions_router)


@app.get("/health")
async def health_check() -> dict[str, object]:
    """Health check endpoint."""
    client_ready = getattr(app.state, "http_client", None) is not None
    return {"status": "healthy", "client_ready": client_ready}


if __name__ == "__main__":
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)  # noqa: S104
