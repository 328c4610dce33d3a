"""
StoredFile ORM Model
====================

Metadata of a user upload whose bytes live in object storage (S3). Maps to the
``stored_file`` table.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``) and owning user (``user_id``)
- Display name, MIME type and byte size
- Storage location: object key (``s3_key``) plus derived URL (``url``)
- Processing status (``uploading`` | ``processing`` | ``completed`` | ``error``);
  only ``completed`` files can be referenced from a chat turn
- Deleting a file keeps the messages that referenced it and clears their ``file_id``
"""

from humanlenk.database.config.connection_engine import declarativeBase
from humanlenk.database.entities.enums import FileStatus
from sqlalchemy import ForeignKey, DateTime, TEXT, VARCHAR, BigInteger, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime, timezone


class StoredFile(declarativeBase):
    """
    ORM model for the `stored_file` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user_id : UUID
        Owner of the file.
    name : str
        Original filename as uploaded.
    type : str
        MIME type.
    size : int
        Size in bytes.
    url : str
        Object URL in the bucket.
    s3_key : str
        Object key in the bucket.
    status : str
        Processing status.
    created_at, updated_at : datetime
        Timestamps (UTC).
    """

    __tablename__ = 'stored_file'

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('app_user.id', ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(TEXT, nullable=False)
    type: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    url: Mapped[str] = mapped_column(TEXT, nullable=False)
    s3_key: Mapped[str] = mapped_column(TEXT, nullable=False)
    status: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="files")
    messages = relationship("UserMessage", back_populates="file")

    def __init__(
        self,
        user_id: UUID,
        name: str,
        type: str,
        size: int,
        url: str,
        s3_key: str,
        status: str = FileStatus.COMPLETED.value,
        date_created_on=None,
    ):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.name = name
        self.type = type
        self.size = size
        self.url = url
        self.s3_key = s3_key
        self.status = status
        if date_created_on is None:
            date_created_on = datetime.now(timezone.utc)
        elif isinstance(date_created_on, str):
            date_created_on = datetime.fromisoformat(date_created_on)
        self.created_at = date_created_on
        self.updated_at = date_created_on

    def __str__(self) -> str:
        return f"StoredFile: id:{self.id}, name: {self.name}, status: {self.status}"
