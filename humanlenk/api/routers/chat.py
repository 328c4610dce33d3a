"""
Chat Router: Turns • Sessions • Messages
=========================================

All routes require a bearer token and only ever touch the caller's own
sessions and messages. A session or message that exists but belongs to
someone else is reported exactly like a missing one (404).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from humanlenk.api.chat_handler import SESSION_NOT_FOUND, handle_chat_turn
from humanlenk.api.dependencies import (
    current_user_id,
    get_completion_service,
    get_current_user,
    get_session_factory,
    resolve_id,
)
from humanlenk.api.models import ChatMessage, ChatSessionCreationDetails
from humanlenk.database.core.funcs import (
    create_chat_session,
    delete_all_messages,
    delete_chat_session,
    delete_message,
    list_chat_sessions,
    list_messages,
    message_stats,
)

router = APIRouter(prefix="/api/chat", tags=["Chat"])
logger = logging.getLogger(__name__)


@router.post("")
async def chat(
    data: ChatMessage,
    user: dict = Depends(get_current_user),
    completion_service=Depends(get_completion_service),
    session_factory=Depends(get_session_factory),
):
    """Send a message and receive the assistant's reply.

    Request body:
        {message (1..4000 chars), chatSessionId, fileId?}

    Response:
        200: {userMessage, assistantMessage, degraded, degradedReason?}
        404: session or file not found / not accessible
    """
    turn = await handle_chat_turn(
        user_id=current_user_id(user),
        chat_session_id=data.chat_session_id,
        message=data.message,
        completion_service=completion_service,
        session_factory=session_factory,
        file_id=data.file_id,
    )
    return {"success": True, "data": turn}


@router.post("/sessions")
def new_chat_session(
    data: Optional[ChatSessionCreationDetails] = Body(None),
    user: dict = Depends(get_current_user),
    session_factory=Depends(get_session_factory),
):
    """Create a chat session; the body (and its title) is optional."""
    chat_session = create_chat_session(
        user_id=current_user_id(user),
        title=data.title if data is not None else None,
        session_factory=session_factory,
    )
    return {"success": True, "data": chat_session}


@router.get("/sessions")
def get_chat_sessions(user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    sessions = list_chat_sessions(user_id=current_user_id(user), session_factory=session_factory)
    return {"success": True, "data": sessions}


@router.delete("/sessions/{session_id}")
def remove_chat_session(session_id: str, user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    delete_chat_session(
        chat_session_id=resolve_id(session_id, SESSION_NOT_FOUND),
        user_id=current_user_id(user),
        session_factory=session_factory,
    )
    return {"success": True, "message": "Chat session deleted successfully"}


@router.get("/messages")
def get_messages(
    chat_session_id: str = Query(..., alias="chatSessionId"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: dict = Depends(get_current_user),
    session_factory=Depends(get_session_factory),
):
    """One chronological page of a session's messages with pagination info."""
    page = list_messages(
        chat_session_id=resolve_id(chat_session_id, SESSION_NOT_FOUND),
        user_id=current_user_id(user),
        limit=limit,
        offset=offset,
        session_factory=session_factory,
    )
    return {"success": True, "data": page}


@router.delete("/messages/{message_id}")
def remove_message(message_id: str, user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    delete_message(
        message_id=resolve_id(message_id, "Message not found"),
        user_id=current_user_id(user),
        session_factory=session_factory,
    )
    return {"success": True, "message": "Message deleted successfully"}


@router.delete("/messages")
def clear_messages(user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    deleted = delete_all_messages(user_id=current_user_id(user), session_factory=session_factory)
    return {"success": True, "message": f"Deleted {deleted} messages", "data": {"deletedCount": deleted}}


@router.get("/stats")
def chat_stats(user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    stats = message_stats(user_id=current_user_id(user), session_factory=session_factory)
    return {"success": True, "data": stats}
