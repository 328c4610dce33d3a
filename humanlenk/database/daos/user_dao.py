"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation and deletion
- Lookup by id or email
- Filtered, paginated listing for the admin dashboard
- Role, profile, password and activity-timestamp updates
- Aggregate counts for reporting

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Business logic (validation, authorization, transactions) lives in the
  service layer; the DAO focuses on persistence operations.
- Passwords arrive already hashed (see `EncryptionDec.hash_password`).

Error Handling
--------------
- Each method logs the failing operation and re-raises, so the error
  translator decides the HTTP outcome.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from humanlenk.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> User:
        """
        Add a new user (password already hashed) to the session.

        Returns
        -------
        User
            The user object that was added.
        """
        try:
            session.add(user_data)
            session.flush()
            return user_data
        except Exception:
            logger.exception("Error in UserDao.createUser")
            raise

    def fetchUserById(self, session: Session, user_id: UUID) -> User | None:
        try:
            return session.query(User).filter(User.id == user_id).one_or_none()
        except Exception:
            logger.exception("Error in UserDao.fetchUserById")
            raise

    def fetchUserByEmail(self, session: Session, email: str) -> User | None:
        """
        Fetch a user by email.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        email : str
            Email address of the user.

        Returns
        -------
        User | None
            The matching user, if any.
        """
        try:
            return session.query(User).filter(User.email == email).one_or_none()
        except Exception:
            logger.exception("Error in UserDao.fetchUserByEmail")
            raise

    def fetchUsers(self, session: Session, limit: int, offset: int, role: str | None = None, search: str | None = None):
        """
        List users newest first, optionally filtered by role and a
        case-insensitive substring of email or name.

        Returns
        -------
        tuple[list[User], int]
            The requested page and the total number of matching users.
        """
        try:
            query = session.query(User)
            if role:
                query = query.filter(User.role == role)
            if search:
                pattern = f"%{search}%"
                query = query.filter(or_(User.email.ilike(pattern), User.name.ilike(pattern)))
            total = query.count()
            users = query.order_by(desc(User.created_at)).offset(offset).limit(limit).all()
            return users, total
        except Exception:
            logger.exception("Error in UserDao.fetchUsers")
            raise

    def fetchRecentUsers(self, session: Session, limit: int = 5):
        try:
            return session.query(User).order_by(desc(User.created_at)).limit(limit).all()
        except Exception:
            logger.exception("Error in UserDao.fetchRecentUsers")
            raise

    def countUsers(self, session: Session) -> int:
        return session.query(User).count()

    def countActiveUsersSince(self, session: Session, since: datetime) -> int:
        return session.query(User).filter(User.updated_at >= since).count()

    def countUsersByRole(self, session: Session) -> dict[str, int]:
        rows = session.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}

    def updateRole(self, session: Session, user: User, role: str, timestamp: datetime) -> User:
        try:
            user.role = role
            user.updated_at = timestamp
            session.flush()
            return user
        except Exception:
            logger.exception("Error in UserDao.updateRole")
            raise

    def updateProfile(self, session: Session, user: User, timestamp: datetime, name: str | None = None, email: str | None = None) -> User:
        try:
            if name is not None:
                user.name = name
            if email is not None:
                user.email = email
            user.updated_at = timestamp
            session.flush()
            return user
        except Exception:
            logger.exception("Error in UserDao.updateProfile")
            raise

    def updatePassword(self, session: Session, user: User, hashed_password: str, timestamp: datetime) -> None:
        try:
            user.password = hashed_password
            user.updated_at = timestamp
            session.flush()
        except Exception:
            logger.exception("Error in UserDao.updatePassword")
            raise

    def touchUser(self, session: Session, user: User, timestamp: datetime) -> None:
        """Bump `updated_at`, the activity marker used by the dashboard."""
        user.updated_at = timestamp
        session.flush()

    def deleteUser(self, session: Session, user: User) -> None:
        """Delete a user; ORM cascades remove sessions, messages, files and surveys."""
        try:
            session.delete(user)
            session.flush()
        except Exception:
            logger.exception("Error in UserDao.deleteUser")
            raise
