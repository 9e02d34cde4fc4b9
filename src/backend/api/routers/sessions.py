"""
Chat session API routes.

Sessions hold the conversation and the selected provider; the chat stream
endpoint runs send cycles against them.
"""

import logging
from typing import Any

from api.dependencies import require_session
from api.models import CreateSessionRequest
from api.session_manager import clear_session, store_session
from entities.assistant import ChatSession, render_session
from fastapi import APIRouter, Depends, HTTPException
from models import ProviderSelection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("", status_code=201)
async def create_session(body: CreateSessionRequest | None = None) -> dict[str, Any]:
    """
    Start a new conversation, optionally with a provider already selected.
    """
    session = ChatSession()
    if body is not None and body.provider is not None:
        session.select_provider(body.provider)
    store_session(session)
    logger.info("Created session_id=%s", session.session_id)
    return render_session(session)


@router.get("/{session_id}")
async def get_session_state(session: ChatSession = Depends(require_session)) -> dict[str, Any]:
    """
    Get the current conversation snapshot.
    """
    return render_session(session)


@router.put("/{session_id}/provider")
async def select_provider(
    provider: ProviderSelection,
    session: ChatSession = Depends(require_session),
) -> dict[str, Any]:
    """
    Select the provider. Switching to a different provider clears the history.
    """
    if session.busy:
        raise HTTPException(status_code=409, detail="A message is still being sent")
    session.select_provider(provider)
    store_session(session)
    return render_session(session)


@router.delete("/{session_id}")
async def delete_session(session_id: str) -> dict[str, bool]:
    """
    Drop a session.
    """
    if not clear_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}
