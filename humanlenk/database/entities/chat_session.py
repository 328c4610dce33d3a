"""
ChatSession ORM Model
=====================

The ``ChatSession`` ORM model represents a user-owned, named container of chat
messages stored in the ``chat_session`` table.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Human-readable title (``title``), defaults to ``"New Chat"``
- Foreign key to the owning user (``user_id`` → ``app_user.id``)
- ``updated_at`` bumped on every chat turn; session listings sort on it
- Messages are deleted together with their session
"""

from humanlenk.database.config.connection_engine import declarativeBase
from sqlalchemy import ForeignKey, DateTime, TEXT, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime, timezone

DEFAULT_CHAT_TITLE = "New Chat"


class ChatSession(declarativeBase):
    """
    ORM model for the `chat_session` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the session.
    user_id : UUID
        Foreign key reference to the `app_user` table (the owner of the session).
    title : str
        Title of the session.
    created_at : datetime
        Creation timestamp (UTC).
    updated_at : datetime
        Recency cursor, bumped on every new message (UTC).
    """

    __tablename__ = 'chat_session'

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True
    )
    """Primary key. UUID of the session."""

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('app_user.id', ondelete="CASCADE"), nullable=False, index=True
    )
    """Foreign key reference to the `app_user` table (owner)."""

    title: Mapped[str] = mapped_column(
        TEXT, nullable=False
    )
    """Title of the session (cannot be null)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    """Timestamp of the latest activity in the session (UTC, timezone-aware)."""

    user = relationship("User", back_populates="chat_sessions")
    messages = relationship("UserMessage", back_populates="chat_session", cascade="all, delete")

    def __init__(self, user_id: UUID, title: str | None = None, date_created_on=None):
        """
        Initialize a new ChatSession object.

        Parameters
        ----------
        user_id : UUID
            The ID of the user who owns this session.
        title : str | None
            Title of the session; "New Chat" when empty.
        date_created_on : datetime | str | None
            Creation timestamp. Accepts datetime or ISO8601 string; defaults to now (UTC).
        """
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.title = title or DEFAULT_CHAT_TITLE
        if date_created_on is None:
            date_created_on = datetime.now(timezone.utc)
        elif isinstance(date_created_on, str):
            date_created_on = datetime.fromisoformat(date_created_on)
        self.created_at = date_created_on
        self.updated_at = date_created_on

    def __str__(self) -> str:
        return f"ChatSession: id:{self.id}, title: {self.title}, user_id: {self.user_id}"
