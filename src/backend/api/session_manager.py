"""
In-memory store of ChatSession instances keyed by session_id.

Idle sessions expire after ``session_ttl_seconds``; past
``max_session_cache_size`` the least recently used idle session is dropped.
A session with a send in flight is never expired or evicted, so a running
chat stream can always store its result.
"""

import logging
import time
from collections import OrderedDict
from threading import Lock
from typing import TYPE_CHECKING

from config.settings import get_settings

if TYPE_CHECKING:
    from entities.assistant import ChatSession

logger = logging.getLogger(__name__)

# session_id -> (session, last access on the monotonic clock), oldest first
_sessions: OrderedDict[str, tuple["ChatSession", float]] = OrderedDict()
_lock = Lock()

SESSION_TTL_SECONDS = get_settings().session_ttl_seconds
MAX_SESSIONS = get_settings().max_session_cache_size


def _is_stale(session: "ChatSession", last_used: float, now: float) -> bool:
    return not session.busy and now - last_used > SESSION_TTL_SECONDS


def get_session(session_id: str | None) -> "ChatSession | None":
    """
    Look up a session and mark it as recently used.

    Returns:
        The session, or None if it is unknown or has gone stale
    """
    if not session_id:
        return None

    now = time.monotonic()
    with _lock:
        entry = _sessions.get(session_id)
        if entry is None:
            return None
        session, last_used = entry
        if _is_stale(session, last_used, now):
            del _sessions[session_id]
            logger.info("Chat session %s expired", session_id)
            return None
        _sessions[session_id] = (session, now)
        _sessions.move_to_end(session_id)
        return session


def store_session(session: "ChatSession") -> None:
    """Insert or refresh *session*, then drop stale and surplus idle sessions."""
    now = time.monotonic()
    with _lock:
        _sessions[session.session_id] = (session, now)
        _sessions.move_to_end(session.session_id)

        stale = [sid for sid, (s, used) in _sessions.items() if _is_stale(s, used, now)]
        for sid in stale:
            del _sessions[sid]

        surplus = len(_sessions) - MAX_SESSIONS
        evicted = []
        for sid, (s, _) in _sessions.items():
            if surplus <= 0:
                break
            if sid != session.session_id and not s.busy:
                evicted.append(sid)
                surplus -= 1
        for sid in evicted:
            del _sessions[sid]

        if stale or evicted:
            logger.info(
                "Dropped %d expired and %d evicted chat sessions (%d cached)",
                len(stale),
                len(evicted),
                len(_sessions),
            )


def clear_session(session_id: str) -> bool:
    """Remove a session. Returns True if it existed."""
    with _lock:
        removed = _sessions.pop(session_id, None) is not None
    if removed:
        logger.info("Cleared chat session %s", session_id)
    return removed


def clear_all_sessions() -> None:
    with _lock:
        _sessions.clear()
