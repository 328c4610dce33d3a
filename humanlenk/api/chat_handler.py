"""
Chat Turn Orchestration
=======================

One call of `handle_chat_turn` processes a single turn:

    RECEIVED → SESSION_VERIFIED → FILE_VERIFIED (optional) → USER_MSG_PERSISTED
    → COMPLETION_REQUESTED → ASSISTANT_MSG_PERSISTED → SESSION_TOUCHED → DONE

Verification failures stop the turn before anything is written. After that,
the user message, the assistant message and the session timestamp are three
independent writes, each committed on its own; a crash in between may leave a
user message without its reply.

A completion that fails for any reason is replaced by `FALLBACK_RESPONSE`
and the turn still succeeds; the response reports it through `degraded`
and `degradedReason`.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from humanlenk.api.completion_service import CompletionService
from humanlenk.api.errors import AppError
from humanlenk.api.prompt_utilities import CONTEXT_FETCH_LIMIT, build_messages
from humanlenk.api.utils import parse_uuid
from humanlenk.database.core.funcs import (
    create_message,
    fetch_recent_messages,
    get_completed_file,
    get_owned_chat_session,
    touch_chat_session,
    utcnow,
)
from humanlenk.database.entities.enums import MessageRole

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = "I'm sorry, but I'm not able to process your request right now. Please try again later."

SESSION_NOT_FOUND = "Chat session not found"
FILE_NOT_ACCESSIBLE = "File not found or not accessible"


async def handle_chat_turn(
    user_id: UUID,
    chat_session_id: str,
    message: str,
    completion_service: CompletionService,
    session_factory,
    file_id: Optional[str] = None,
) -> dict:
    """
    Run one chat turn for `user_id`.

    Args:
        user_id (UUID): The authenticated caller.
        chat_session_id (str): Session id as sent by the client.
        message (str): Validated user text (1..4000 characters).
        completion_service (CompletionService): Model adapter.
        session_factory: SQLAlchemy sessionmaker for the transactional services.
        file_id (str | None): Optional id of a file to reference.

    Returns:
        dict: ``{userMessage, assistantMessage, degraded[, degradedReason]}``.

    Raises:
        AppError: 404 when the session or the file fails verification.
    """
    session_uuid = parse_uuid(chat_session_id)
    chat_session = (
        get_owned_chat_session(chat_session_id=session_uuid, user_id=user_id, session_factory=session_factory)
        if session_uuid is not None
        else None
    )
    if chat_session is None:
        raise AppError(SESSION_NOT_FOUND, 404)

    file = None
    file_uuid = None
    if file_id:
        file_uuid = parse_uuid(file_id)
        if file_uuid is not None:
            file = get_completed_file(file_id=file_uuid, user_id=user_id, session_factory=session_factory)
        if file is None:
            raise AppError(FILE_NOT_ACCESSIBLE, 404)

    user_created_at = utcnow()
    user_message = create_message(
        content=message,
        role=MessageRole.USER.value,
        user_id=user_id,
        chat_session_id=session_uuid,
        file_id=file_uuid,
        created_at=user_created_at,
        session_factory=session_factory,
    )

    history = fetch_recent_messages(
        chat_session_id=session_uuid,
        user_id=user_id,
        limit=CONTEXT_FETCH_LIMIT,
        session_factory=session_factory,
    )
    result = await completion_service.complete(build_messages(history, message, file))
    if result.ok:
        reply = result.text
        logger.info(
            "Chat turn completed: user=%s session=%s message_length=%s response_length=%s file=%s",
            user_id, session_uuid, len(message), len(reply), file_uuid,
        )
    else:
        reply = FALLBACK_RESPONSE
        logger.warning("Chat turn degraded (%s): user=%s session=%s", result.failure, user_id, session_uuid)

    # The reply must sort strictly after its prompt even on coarse clocks.
    assistant_created_at = max(utcnow(), user_created_at + timedelta(microseconds=1))
    assistant_message = create_message(
        content=reply,
        role=MessageRole.ASSISTANT.value,
        user_id=user_id,
        chat_session_id=session_uuid,
        file_id=file_uuid,
        created_at=assistant_created_at,
        session_factory=session_factory,
    )

    touch_chat_session(chat_session_id=session_uuid, timestamp=assistant_created_at, session_factory=session_factory)

    response = {
        "userMessage": user_message,
        "assistantMessage": assistant_message,
        "degraded": not result.ok,
    }
    if not result.ok:
        response["degradedReason"] = result.failure
    return response
