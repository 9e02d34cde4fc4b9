"""
Chat API routes with SSE streaming support.

The stream endpoint runs one ``TradingAssistant.send`` cycle against a
cached session and emits:
1. Step events (acknowledgement, prices, funding, generation, verification)
2. The session snapshot after the cycle
3. A final ``done`` event
"""

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncGenerator

import httpx
from api.dependencies import get_http_client, require_session
from api.session_manager import store_session
from config.settings import get_settings
from entities.assistant import (
    ChatSession,
    TradingAssistant,
    create_assistant_clients,
    render_session,
)
from entities.shared.protocols import QueueReporter
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


def _sanitized_error_event(error: Exception) -> str:
    """Build a sanitized SSE error payload with a correlation ID.

    Logs the full exception server-side and returns a generic message
    to the client so internal details are never leaked.
    """
    correlation_id = uuid.uuid4().hex[:12]
    logger.error("SSE error [%s]: %s", correlation_id, error, exc_info=True)
    payload = {
        "error": "An internal error occurred. Please try again.",
        "correlation_id": correlation_id,
        "done": True,
    }
    return f"data: {json.dumps(payload)}\n\n"


def _format_step_event(step_event: dict) -> dict:
    """Format a step event dict for SSE emission."""
    result: dict = {"step": step_event.get("step"), "done": False}
    if "status" in step_event:
        result["status"] = step_event["status"]
    if "duration_ms" in step_event:
        result["duration_ms"] = step_event["duration_ms"]
    return result


async def generate_chat_stream(
    session: ChatSession,
    message: str,
    http_client: httpx.AsyncClient,
) -> AsyncGenerator[str, None]:
    """Stream step events while the assistant runs a send cycle."""
    step_queue: asyncio.Queue[dict] = asyncio.Queue()

    try:
        settings = get_settings()
        clients = create_assistant_clients(settings, http_client, reporter=QueueReporter(step_queue))
        assistant = TradingAssistant(clients, settings)

        send_task = asyncio.create_task(assistant.send(session, message))
        try:
            while not send_task.done() or not step_queue.empty():
                try:
                    evt = await asyncio.wait_for(step_queue.get(), timeout=0.1)
                except TimeoutError:
                    continue
                yield f"data: {json.dumps(_format_step_event(evt))}\n\n"
            await send_task
        finally:
            if not send_task.done():
                send_task.cancel()

        store_session(session)
        output = {"session": render_session(session), "done": False}
        yield f"data: {json.dumps(output, ensure_ascii=False)}\n\n"
        yield f"data: {json.dumps({'done': True, 'session_id': session.session_id})}\n\n"

    except Exception as e:
        yield _sanitized_error_event(e)


@router.get("/stream")
async def chat_stream(
    message: str = Query(..., description="User message"),
    session: ChatSession = Depends(require_session),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> StreamingResponse:
    """SSE streaming chat for one send cycle."""
    return StreamingResponse(
        generate_chat_stream(session, message, http_client),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
