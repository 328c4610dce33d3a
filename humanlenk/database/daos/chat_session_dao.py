"""
Chat Session DAO

Purpose
-------
Provides a thin data-access layer for the `ChatSession` ORM entity:
- Create sessions
- Query by owner (most recent activity first) or by id scoped to the owner
- Bump the `updated_at` recency cursor
- Delete (messages follow through the ORM cascade)

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller (no session
  creation inside the DAO). This keeps transaction boundaries in the service
  layer where they belong.
- Every read used on behalf of a caller is scoped by `user_id`.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from humanlenk.database.entities.chat_session import ChatSession

logger = logging.getLogger(__name__)


class ChatSessionDao:
    """
    Data Access Object (DAO) for managing ChatSession entities.
    """

    def createChatSession(self, session: Session, chat_session: ChatSession) -> ChatSession:
        """
        Create a new chat session record.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        chat_session : ChatSession
            Entity instance to be added.
        """
        try:
            session.add(chat_session)
            session.flush()
            return chat_session
        except Exception:
            logger.exception("Error in ChatSessionDao.createChatSession")
            raise

    def fetchChatSessionsByUserId(self, session: Session, user_id: UUID):
        """
        Fetch all sessions belonging to a specific user,
        ordered by most recent activity.

        Returns
        -------
        list[ChatSession]
        """
        try:
            return (
                session.query(ChatSession)
                .filter(ChatSession.user_id == user_id)
                .order_by(desc(ChatSession.updated_at))
                .all()
            )
        except Exception:
            logger.exception("Error in ChatSessionDao.fetchChatSessionsByUserId")
            raise

    def fetchChatSessionByIdAndUserId(self, session: Session, chat_session_id: UUID, user_id: UUID) -> ChatSession | None:
        """
        Fetch one session only if it belongs to `user_id`.

        Returns
        -------
        ChatSession | None
            None when the session does not exist or is owned by someone else.
        """
        try:
            return (
                session.query(ChatSession)
                .filter(ChatSession.id == chat_session_id, ChatSession.user_id == user_id)
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in ChatSessionDao.fetchChatSessionByIdAndUserId")
            raise

    def updateChatSessionByDate(self, session: Session, chat_session_id: UUID, timestamp: datetime) -> None:
        """
        Update the `updated_at` timestamp of a session.

        A session deleted in the meantime is left alone.
        """
        try:
            chat_session = session.query(ChatSession).filter(ChatSession.id == chat_session_id).one_or_none()
            if chat_session is not None:
                chat_session.updated_at = timestamp
                session.flush()
        except Exception:
            logger.exception("Error in ChatSessionDao.updateChatSessionByDate")
            raise

    def deleteChatSession(self, session: Session, chat_session: ChatSession) -> None:
        try:
            session.delete(chat_session)
            session.flush()
        except Exception:
            logger.exception("Error in ChatSessionDao.deleteChatSession")
            raise
