"""
UserMessage ORM Model
=====================

The ``UserMessage`` ORM model represents a single message record within a
chat session. Messages are immutable once written.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Foreign keys to the owning user and chat session
- Optional reference (not ownership) to a stored file; nulled when the file is deleted
- Timezone-aware ``created_at`` timestamp (UTC), the ordering key
- Message text content (``content``) and sender role (``role``)

"""

from humanlenk.database.config.connection_engine import declarativeBase
from sqlalchemy import ForeignKey, DateTime, TEXT, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime, timezone


class UserMessage(declarativeBase):
    """
    ORM model for the `message` table.
    Represents a single message within a chat session.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the message.
    content : str
        Content of the message.
    role : str
        Role of the sender ("user" or "assistant").
    user_id : UUID
        Foreign key reference to the `app_user` table.
    chat_session_id : UUID
        Foreign key reference to the `chat_session` table.
    file_id : UUID | None
        Optional reference to a file in the `stored_file` table.
    created_at : datetime
        Timestamp when the message was created.
    """

    __tablename__ = 'message'

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True
    )
    """Primary key. UUID of the message."""

    content: Mapped[str] = mapped_column(
        TEXT, nullable=False
    )
    """Text content of the message (cannot be null)."""

    role: Mapped[str] = mapped_column(
        TEXT, nullable=False
    )
    """Role of the message sender (user, assistant)."""

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('app_user.id', ondelete="CASCADE"), nullable=False, index=True
    )

    chat_session_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('chat_session.id', ondelete="CASCADE"), nullable=False, index=True
    )
    """Foreign key to the chat session this message belongs to."""

    file_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('stored_file.id', ondelete="SET NULL"), nullable=True
    )
    """Optional file the message refers to."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    """Timestamp when the message was created (UTC)."""

    user = relationship("User", back_populates="messages")
    chat_session = relationship("ChatSession", back_populates="messages")
    file = relationship("StoredFile", back_populates="messages")

    def __init__(
        self,
        content: str,
        role: str,
        user_id: UUID,
        chat_session_id: UUID,
        file_id: UUID | None = None,
        date_created_on=None,
    ):
        """
        Initialize a new UserMessage object.

        Parameters
        ----------
        content : str
            The content of the message.
        role : str
            The role of the sender (user/assistant).
        user_id : UUID
            ID of the user owning the message.
        chat_session_id : UUID
            ID of the chat session this message belongs to.
        file_id : UUID | None
            Optional file reference.
        date_created_on : datetime | str | None
            Timestamp when the message was created. Accepts datetime or ISO8601 string;
            defaults to now (UTC).
        """
        self.id = uuid.uuid4()
        self.content = content
        self.role = role
        self.user_id = user_id
        self.chat_session_id = chat_session_id
        self.file_id = file_id
        if date_created_on is None:
            self.created_at = datetime.now(timezone.utc)
        elif isinstance(date_created_on, str):
            self.created_at = datetime.fromisoformat(date_created_on)
        else:
            self.created_at = date_created_on

    def __str__(self) -> str:
        return (
            f"Message: session:{self.chat_session_id}, "
            f"role: {self.role}, "
            f"time_created: {self.created_at}"
        )
