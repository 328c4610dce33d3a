"""
Stored File DAO

Purpose
-------
Data-access layer for the `StoredFile` ORM entity (metadata of objects kept
in S3). Provides creation, filtered paginated listing, owner-scoped lookup,
deletion and reporting aggregates.

Filters
-------
- `status`: equality on the lifecycle status
- `type`: case-insensitive substring of the MIME type (e.g. "pdf")
- `user_id`: owner; `None` lists across all owners (administrator views)
"""

import logging
from uuid import UUID

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from humanlenk.database.entities.files import StoredFile
from humanlenk.database.entities.messages import UserMessage

logger = logging.getLogger(__name__)


class FileDao:
    """
    Data Access Object (DAO) for managing StoredFile entities.
    """

    def createFile(self, session: Session, stored_file: StoredFile) -> StoredFile:
        try:
            session.add(stored_file)
            session.flush()
            return stored_file
        except Exception:
            logger.exception("Error in FileDao.createFile")
            raise

    def fetchFileById(self, session: Session, file_id: UUID) -> StoredFile | None:
        try:
            return session.query(StoredFile).filter(StoredFile.id == file_id).one_or_none()
        except Exception:
            logger.exception("Error in FileDao.fetchFileById")
            raise

    def fetchFileByIdAndUserId(self, session: Session, file_id: UUID, user_id: UUID, status: str | None = None) -> StoredFile | None:
        """
        Fetch a file only if it belongs to `user_id` and, when given, has `status`.

        Returns
        -------
        StoredFile | None
        """
        try:
            query = session.query(StoredFile).filter(StoredFile.id == file_id, StoredFile.user_id == user_id)
            if status is not None:
                query = query.filter(StoredFile.status == status)
            return query.one_or_none()
        except Exception:
            logger.exception("Error in FileDao.fetchFileByIdAndUserId")
            raise

    def fetchFiles(self, session: Session, limit: int, offset: int, user_id: UUID | None = None, status: str | None = None, type_filter: str | None = None):
        """
        List files newest first.

        Returns
        -------
        tuple[list[StoredFile], int]
            The requested page and the number of files matching the filters.
        """
        try:
            query = session.query(StoredFile)
            if user_id is not None:
                query = query.filter(StoredFile.user_id == user_id)
            if status:
                query = query.filter(StoredFile.status == status)
            if type_filter:
                query = query.filter(StoredFile.type.ilike(f"%{type_filter}%"))
            total = query.count()
            files = query.order_by(desc(StoredFile.created_at)).offset(offset).limit(limit).all()
            return files, total
        except Exception:
            logger.exception("Error in FileDao.fetchFiles")
            raise

    def countMessagesByFileIds(self, session: Session, file_ids) -> dict:
        """Number of messages referencing each of `file_ids`."""
        if not file_ids:
            return {}
        rows = (
            session.query(UserMessage.file_id, func.count(UserMessage.id))
            .filter(UserMessage.file_id.in_(file_ids))
            .group_by(UserMessage.file_id)
            .all()
        )
        return {file_id: count for file_id, count in rows}

    def countFiles(self, session: Session, user_id: UUID | None = None) -> int:
        query = session.query(StoredFile)
        if user_id is not None:
            query = query.filter(StoredFile.user_id == user_id)
        return query.count()

    def sumFileSizes(self, session: Session, user_id: UUID | None = None) -> int:
        query = session.query(func.coalesce(func.sum(StoredFile.size), 0))
        if user_id is not None:
            query = query.filter(StoredFile.user_id == user_id)
        return int(query.scalar() or 0)

    def countFilesByStatus(self, session: Session, user_id: UUID | None = None):
        """
        Group files by status.

        Returns
        -------
        list[tuple[str, int, int]]
            (status, count, total size in bytes) per status.
        """
        query = session.query(StoredFile.status, func.count(StoredFile.id), func.coalesce(func.sum(StoredFile.size), 0))
        if user_id is not None:
            query = query.filter(StoredFile.user_id == user_id)
        return [(status, count, int(size)) for status, count, size in query.group_by(StoredFile.status).all()]

    def countFilesByType(self, session: Session, user_id: UUID | None = None):
        query = session.query(StoredFile.type, func.count(StoredFile.id), func.coalesce(func.sum(StoredFile.size), 0))
        if user_id is not None:
            query = query.filter(StoredFile.user_id == user_id)
        return [(file_type, count, int(size)) for file_type, count, size in query.group_by(StoredFile.type).all()]

    def fetchRecentFiles(self, session: Session, limit: int = 5, user_id: UUID | None = None):
        query = session.query(StoredFile)
        if user_id is not None:
            query = query.filter(StoredFile.user_id == user_id)
        return query.order_by(desc(StoredFile.created_at)).limit(limit).all()

    def deleteFile(self, session: Session, stored_file: StoredFile) -> None:
        """Delete the record; referencing messages keep living with `file_id` nulled."""
        try:
            session.delete(stored_file)
            session.flush()
        except Exception:
            logger.exception("Error in FileDao.deleteFile")
            raise
