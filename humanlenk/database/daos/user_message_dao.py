"""
User Messages DAO

Purpose
-------
Data-access layer for the `UserMessage` ORM entity. Provides:
- Message creation
- Chronological, paginated retrieval by chat session
- The "most recent N" window used to assemble completion context
- Owner-scoped deletion (single message or everything a user wrote)
- Counts and group-by aggregates for statistics

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- Keeps business rules (auth, validation, ownership decisions) in higher layers;
  methods that act on behalf of a caller take the owner's `user_id`.
- Messages are immutable: there is no update method.

Ordering
--------
`created_at` ascending is the canonical order of a session. The assistant
reply of a turn is always stamped strictly after its user message, so the
order is total within a turn.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session, aliased

from humanlenk.database.entities.messages import UserMessage

logger = logging.getLogger(__name__)


class UserMessagesDao:
    """
    Data Access Object (DAO) for managing User Messages.
    Provides methods to create, fetch, count and delete messages within chat sessions.
    """

    def createMessage(self, session: Session, userMessage: UserMessage) -> UserMessage:
        """
        Create a new message record.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        userMessage : UserMessage
            Message entity instance to be added.

        Returns
        -------
        UserMessage
            The message object that was added.
        """
        try:
            session.add(userMessage)
            session.flush()
            return userMessage
        except Exception:
            logger.exception("Error in UserMessagesDao.createMessage")
            raise

    def fetchMessageByIdAndUserId(self, session: Session, message_id: UUID, user_id: UUID) -> UserMessage | None:
        try:
            return (
                session.query(UserMessage)
                .filter(UserMessage.id == message_id, UserMessage.user_id == user_id)
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in UserMessagesDao.fetchMessageByIdAndUserId (id=%s)", message_id)
            raise

    def fetchMessagesByChatSessionId(self, session: Session, chat_session_id: UUID, user_id: UUID, limit: int, offset: int):
        """
        Fetch one page of a session's messages in chronological order.

        Pages are counted from the newest message backwards (offset 0 is the
        latest page), then each page is re-ordered ascending, mirroring how a
        chat window scrolls back through history.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        chat_session_id : UUID
            Session whose messages are read.
        user_id : UUID
            Owner of the session.
        limit, offset : int
            Page window.

        Returns
        -------
        tuple[list[UserMessage], int]
            The page (oldest first) and the total message count of the session.
        """
        try:
            query = session.query(UserMessage).filter(
                UserMessage.chat_session_id == chat_session_id,
                UserMessage.user_id == user_id,
            )
            total = query.count()
            subq = (
                query.order_by(desc(UserMessage.created_at))
                .offset(offset)
                .limit(limit)
            ).subquery()

            pageMessages = aliased(UserMessage, subq)

            messages = (
                session.query(pageMessages)
                .order_by(asc(pageMessages.created_at))
                .all()
            )
            return messages, total
        except Exception:
            logger.exception("Error in UserMessagesDao.fetchMessagesByChatSessionId")
            raise

    def fetchRecentMessages(self, session: Session, chat_session_id: UUID, user_id: UUID, limit: int):
        """
        Fetch the `limit` most recent messages of a session, newest first.

        The user message of the turn being answered is already stored, so it
        is part of the result.
        """
        try:
            query = session.query(UserMessage).filter(
                UserMessage.chat_session_id == chat_session_id,
                UserMessage.user_id == user_id,
            )
            return query.order_by(desc(UserMessage.created_at)).limit(limit).all()
        except Exception:
            logger.exception("Error in UserMessagesDao.fetchRecentMessages")
            raise

    def fetchLatestMessage(self, session: Session, chat_session_id: UUID) -> UserMessage | None:
        return (
            session.query(UserMessage)
            .filter(UserMessage.chat_session_id == chat_session_id)
            .order_by(desc(UserMessage.created_at))
            .first()
        )

    def fetchRecentMessagesByUserId(self, session: Session, user_id: UUID, limit: int = 10):
        return (
            session.query(UserMessage)
            .filter(UserMessage.user_id == user_id)
            .order_by(desc(UserMessage.created_at))
            .limit(limit)
            .all()
        )

    def countMessagesByChatSessionId(self, session: Session, chat_session_id: UUID) -> int:
        return session.query(UserMessage).filter(UserMessage.chat_session_id == chat_session_id).count()

    def countMessages(self, session: Session, user_id: UUID | None = None) -> int:
        query = session.query(UserMessage)
        if user_id is not None:
            query = query.filter(UserMessage.user_id == user_id)
        return query.count()

    def countMessagesByRole(self, session: Session, user_id: UUID | None = None) -> dict[str, int]:
        query = session.query(UserMessage.role, func.count(UserMessage.id))
        if user_id is not None:
            query = query.filter(UserMessage.user_id == user_id)
        return {role: count for role, count in query.group_by(UserMessage.role).all()}

    def fetchFirstMessageDate(self, session: Session, user_id: UUID) -> datetime | None:
        return session.query(func.min(UserMessage.created_at)).filter(UserMessage.user_id == user_id).scalar()

    def deleteMessage(self, session: Session, message: UserMessage) -> None:
        try:
            session.delete(message)
            session.flush()
        except Exception:
            logger.exception("Error in UserMessagesDao.deleteMessage")
            raise

    def deleteMessagesByUserId(self, session: Session, user_id: UUID) -> int:
        """
        Delete every message written in the sessions of `user_id`.

        Returns
        -------
        int
            Number of deleted rows (0 when the user has none).
        """
        try:
            deleted = (
                session.query(UserMessage)
                .filter(UserMessage.user_id == user_id)
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted
        except Exception:
            logger.exception("Error in UserMessagesDao.deleteMessagesByUserId")
            raise
