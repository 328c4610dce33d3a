"""
User ORM Model
==============

The ``User`` ORM model represents a registered user in the system. It maps to the
``app_user`` table and contains identity, credential, and role information.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Unique email address and display name
- Hashed password storage (bcrypt)
- User role management (``user`` or ``admin``)
- Creation/update timestamps; ``updated_at`` doubles as an activity marker
- Owns chat sessions, messages, files and surveys (deleted with the user)

"""

from humanlenk.database.config.connection_engine import declarativeBase
from humanlenk.database.entities.enums import UserRole
from sqlalchemy import VARCHAR, TEXT, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime, timezone


class User(declarativeBase):
    """
    ORM model for the `app_user` table.
    Represents a registered user in the system.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    email : str
        Email address of the user (unique, max 255 chars).
    name : str
        Display name of the user.
    password : str
        Hashed password of the user.
    role : str
        Role of the user ("user" or "admin").
    created_at : datetime
        Registration timestamp.
    updated_at : datetime
        Last profile change / login timestamp.
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True
    )
    """Primary key. UUID of the user."""

    email: Mapped[str] = mapped_column(
        VARCHAR(255), nullable=False, unique=True
    )
    """Email address of the user (max length 255, unique)."""

    name: Mapped[str] = mapped_column(
        VARCHAR(255), nullable=False
    )
    """Display name of the user."""

    password: Mapped[str] = mapped_column(
        TEXT, nullable=False
    )
    """Hashed password of the user."""

    role: Mapped[str] = mapped_column(
        TEXT, nullable=False, default=UserRole.USER.value
    )
    """Role assigned to the user (user, admin)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    """Datetime when the user registered (UTC)."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    """Datetime of the last profile change or login (UTC)."""

    chat_sessions = relationship("ChatSession", back_populates="user", cascade="all, delete")
    messages = relationship("UserMessage", back_populates="user", cascade="all, delete")
    files = relationship("StoredFile", back_populates="user", cascade="all, delete")
    surveys = relationship("Survey", back_populates="user", cascade="all, delete")

    def __init__(
        self,
        email: str,
        name: str,
        password: str,
        role: str = UserRole.USER.value,
        date_created_on=None,
    ):
        """
        Initialize a new User object.

        Parameters
        ----------
        email : str
            Email address of the user.
        name : str
            Display name of the user.
        password : str
            Hashed password of the user.
        role : str
            Role of the user ("user" or "admin").
        date_created_on : datetime | str | None
            Creation timestamp. Accepts a datetime or ISO8601 string; defaults to now (UTC).
        """
        self.id = uuid.uuid4()
        self.email = email
        self.name = name
        self.password = password
        self.role = role
        if date_created_on is None:
            date_created_on = datetime.now(timezone.utc)
        elif isinstance(date_created_on, str):
            date_created_on = datetime.fromisoformat(date_created_on)
        self.created_at = date_created_on
        self.updated_at = date_created_on

    def __str__(self) -> str:
        return f"User: id:{self.id}, email: {self.email}, role: {self.role}"
