"""
Entities Package: SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by DAOs
(`daos` package) to perform CRUD and transactional operations.

Tech Stack & Conventions
------------------------
- PostgreSQL in production, SQLite for tests (portable `Uuid` columns)
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Clear foreign keys for relational integrity; ORM cascades mirror ownership

Contents
--------
- User
    A registered user (email, name, hashed password, role).
    Owns chat sessions, messages, files and surveys.

- ChatSession
    A titled container of messages owned by one user; `updated_at` is the recency cursor.

- UserMessage
    One immutable message (`user` or `assistant`) in a session, optionally referencing a file.

- StoredFile
    Metadata of an upload kept in object storage; status gates use as chat context.

- Survey
    A 1–5 rating with free-text feedback.

Importing this package registers every mapper, which the relationship
strings between entities rely on.
"""

from humanlenk.database.entities.user import User
from humanlenk.database.entities.chat_session import ChatSession
from humanlenk.database.entities.messages import UserMessage
from humanlenk.database.entities.files import StoredFile
from humanlenk.database.entities.survey import Survey

__all__ = ["User", "ChatSession", "UserMessage", "StoredFile", "Survey"]
