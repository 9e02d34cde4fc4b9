"""
FastAPI dependencies for shared resources.
"""

import logging

import httpx
from api.session_manager import get_session
from entities.assistant import ChatSession
from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Get the shared HTTP client from app state.

    Raises HTTPException 503 if not initialized.
    """
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="HTTP client not initialized")
    return client


def require_session(session_id: str) -> ChatSession:
    """
    Look up a cached chat session.

    Raises HTTPException 404 if the session does not exist or has expired.
    """
    session = get_session(session_id)
    if session is None:
        logger.info("Unknown session_id=%s", session_id)
        raise HTTPException(status_code=404, detail="Session not found")
    return session
