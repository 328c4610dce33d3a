"""
Service-layer operations for users, chat sessions, messages, files and surveys.

All public functions are wrapped with the `@transactional` decorator, which
manages SQLAlchemy sessions and transactions. Each function receives the
injected `session: Session`; callers pass `session_factory=` instead
(usually `request.app.state.session_factory`).

Functions return plain dictionaries (camelCase keys, ISO-8601 UTC
timestamps) so nothing ORM-bound escapes the transaction. Known failures are
raised as `AppError` with the HTTP status they should produce; the
surrounding transaction is rolled back by the decorator.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from humanlenk.api.errors import AppError
from humanlenk.crypt.encrypt_decrypt import EncryptionDec
from humanlenk.database.daos.chat_session_dao import ChatSessionDao
from humanlenk.database.daos.file_dao import FileDao
from humanlenk.database.daos.survey_dao import SurveyDao
from humanlenk.database.daos.user_dao import UserDao
from humanlenk.database.daos.user_message_dao import UserMessagesDao
from humanlenk.database.entities.chat_session import ChatSession
from humanlenk.database.entities.enums import FileStatus, UserRole
from humanlenk.database.entities.files import StoredFile
from humanlenk.database.entities.messages import UserMessage
from humanlenk.database.entities.survey import Survey
from humanlenk.database.entities.user import User
from humanlenk.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

SURVEY_COOLDOWN = timedelta(hours=24)
ACTIVE_USER_WINDOW = timedelta(days=7)
NO_MESSAGES_PREVIEW = "No messages yet"


# --------------------------------------------------------------------
# Serialisation helpers
# --------------------------------------------------------------------

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value is not None else None


def pagination(total: int, limit: int, offset: int) -> dict:
    return {"total": total, "limit": limit, "offset": offset, "hasMore": offset + limit < total}


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "createdAt": iso(user.created_at),
        "updatedAt": iso(user.updated_at),
    }


def serialize_chat_session(chat_session: ChatSession) -> dict:
    return {
        "id": str(chat_session.id),
        "title": chat_session.title,
        "userId": str(chat_session.user_id),
        "createdAt": iso(chat_session.created_at),
        "updatedAt": iso(chat_session.updated_at),
    }


def serialize_message(message: UserMessage, include_file: bool = False) -> dict:
    data = {
        "id": str(message.id),
        "content": message.content,
        "role": message.role,
        "userId": str(message.user_id),
        "chatSessionId": str(message.chat_session_id),
        "fileId": str(message.file_id) if message.file_id else None,
        "createdAt": iso(message.created_at),
    }
    if include_file:
        data["file"] = (
            {"id": str(message.file.id), "name": message.file.name, "type": message.file.type}
            if message.file is not None
            else None
        )
    return data


def serialize_file(stored_file: StoredFile) -> dict:
    return {
        "id": str(stored_file.id),
        "name": stored_file.name,
        "type": stored_file.type,
        "size": stored_file.size,
        "url": stored_file.url,
        "s3Key": stored_file.s3_key,
        "status": stored_file.status,
        "userId": str(stored_file.user_id),
        "createdAt": iso(stored_file.created_at),
        "updatedAt": iso(stored_file.updated_at),
    }


def serialize_survey(survey: Survey) -> dict:
    return {
        "id": str(survey.id),
        "rating": survey.rating,
        "feedback": survey.feedback,
        "userId": str(survey.user_id),
        "createdAt": iso(survey.created_at),
    }


def user_summary(user: User) -> dict:
    return {"id": str(user.id), "email": user.email, "name": user.name}


def _user_counts(session: Session, user: User) -> dict:
    return {
        "files": FileDao().countFiles(session, user.id),
        "messages": UserMessagesDao().countMessages(session, user.id),
        "surveys": len(SurveyDao().fetchSurveysByUserId(session, user.id)),
    }


# --------------------------------------------------------------------
# Users and authentication
# --------------------------------------------------------------------

@transactional
def register_user(session: Session, email: str, password: str, name: str, bcrypt_rounds: int = 12) -> dict:
    """
    Create a regular user account.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    email, password, name : str
        Validated registration fields; the password is hashed here.
    bcrypt_rounds : int
        bcrypt cost factor.

    Returns
    -------
    dict
        The serialised user.

    Raises
    ------
    AppError
        409 when the email is already registered.
    """
    user_dao = UserDao()
    if user_dao.fetchUserByEmail(session, email) is not None:
        raise AppError("User already exists with this email", 409)
    enc = EncryptionDec(rounds=bcrypt_rounds)
    user = User(email=email, name=name, password=enc.hash_password(password), role=UserRole.USER.value)
    user_dao.createUser(session, user)
    logger.info("User registered: id=%s email=%s", user.id, user.email)
    return serialize_user(user)


@transactional
def authenticate_user(session: Session, email: str, password: str) -> dict:
    """
    Check credentials and record the login as activity.

    Unknown email and wrong password produce the same 401 so callers cannot
    probe which addresses are registered.
    """
    user_dao = UserDao()
    user = user_dao.fetchUserByEmail(session, email)
    if user is None or not EncryptionDec().check_passwords(password, user.password):
        logger.warning("Failed login attempt for email=%s", email)
        raise AppError("Invalid email or password", 401)
    user_dao.touchUser(session, user, utcnow())
    logger.info("User logged in: id=%s", user.id)
    return serialize_user(user)


@transactional
def get_user(session: Session, user_id: UUID) -> dict | None:
    user = UserDao().fetchUserById(session, user_id)
    return serialize_user(user) if user is not None else None


@transactional
def get_profile(session: Session, user_id: UUID) -> dict:
    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise AppError("User not found", 404)
    profile = serialize_user(user)
    profile["_count"] = _user_counts(session, user)
    return profile


@transactional
def update_profile(session: Session, user_id: UUID, name: str | None = None, email: str | None = None) -> dict:
    """
    Change the caller's display name and/or email.

    Raises
    ------
    AppError
        404 if the user vanished, 409 ``Email already taken`` when another
        account owns `email`.
    """
    user_dao = UserDao()
    user = user_dao.fetchUserById(session, user_id)
    if user is None:
        raise AppError("User not found", 404)
    if email is not None:
        owner = user_dao.fetchUserByEmail(session, email)
        if owner is not None and owner.id != user.id:
            raise AppError("Email already taken", 409)
    user_dao.updateProfile(session, user, utcnow(), name=name, email=email)
    changes = [field for field, value in (("name", name), ("email", email)) if value is not None]
    logger.info("User profile updated: id=%s changes=%s", user.id, changes)
    return serialize_user(user)


@transactional
def change_password(session: Session, user_id: UUID, current_password: str, new_password: str, bcrypt_rounds: int = 12) -> None:
    user_dao = UserDao()
    user = user_dao.fetchUserById(session, user_id)
    if user is None:
        raise AppError("User not found", 404)
    enc = EncryptionDec(rounds=bcrypt_rounds)
    if not enc.check_passwords(current_password, user.password):
        raise AppError("Current password is incorrect", 401)
    user_dao.updatePassword(session, user, enc.hash_password(new_password), utcnow())
    logger.info("Password changed: id=%s", user.id)


# --------------------------------------------------------------------
# Chat sessions and messages
# --------------------------------------------------------------------

@transactional
def create_chat_session(session: Session, user_id: UUID, title: str | None = None) -> dict:
    chat_session = ChatSessionDao().createChatSession(session, ChatSession(user_id=user_id, title=title))
    logger.info("Chat session created: id=%s user=%s", chat_session.id, user_id)
    return serialize_chat_session(chat_session)


@transactional
def list_chat_sessions(session: Session, user_id: UUID) -> list[dict]:
    """
    The caller's sessions, most recent activity first, each with a preview of
    its latest message and its message count.
    """
    message_dao = UserMessagesDao()
    sessions = []
    for chat_session in ChatSessionDao().fetchChatSessionsByUserId(session, user_id):
        latest = message_dao.fetchLatestMessage(session, chat_session.id)
        sessions.append({
            "id": str(chat_session.id),
            "title": chat_session.title,
            "lastMessage": latest.content if latest is not None else NO_MESSAGES_PREVIEW,
            "timestamp": iso(chat_session.updated_at),
            "messageCount": message_dao.countMessagesByChatSessionId(session, chat_session.id),
        })
    return sessions


@transactional
def get_owned_chat_session(session: Session, chat_session_id: UUID, user_id: UUID) -> dict | None:
    chat_session = ChatSessionDao().fetchChatSessionByIdAndUserId(session, chat_session_id, user_id)
    return serialize_chat_session(chat_session) if chat_session is not None else None


@transactional
def delete_chat_session(session: Session, chat_session_id: UUID, user_id: UUID) -> None:
    chat_session_dao = ChatSessionDao()
    chat_session = chat_session_dao.fetchChatSessionByIdAndUserId(session, chat_session_id, user_id)
    if chat_session is None:
        raise AppError("Chat session not found", 404)
    chat_session_dao.deleteChatSession(session, chat_session)
    logger.info("Chat session deleted: id=%s user=%s", chat_session_id, user_id)


@transactional
def touch_chat_session(session: Session, chat_session_id: UUID, timestamp: datetime | None = None) -> None:
    ChatSessionDao().updateChatSessionByDate(session, chat_session_id, timestamp or utcnow())


@transactional
def create_message(
    session: Session,
    content: str,
    role: str,
    user_id: UUID,
    chat_session_id: UUID,
    file_id: UUID | None = None,
    created_at: datetime | None = None,
) -> dict:
    message = UserMessage(
        content=content,
        role=role,
        user_id=user_id,
        chat_session_id=chat_session_id,
        file_id=file_id,
        date_created_on=created_at,
    )
    UserMessagesDao().createMessage(session, message)
    return serialize_message(message)


@transactional
def fetch_recent_messages(session: Session, chat_session_id: UUID, user_id: UUID, limit: int) -> list[dict]:
    """Newest-first window of a session's messages for context assembly."""
    messages = UserMessagesDao().fetchRecentMessages(session, chat_session_id, user_id, limit)
    return [serialize_message(message) for message in messages]


@transactional
def list_messages(session: Session, chat_session_id: UUID, user_id: UUID, limit: int = 50, offset: int = 0) -> dict:
    """
    One chronological page of a session's messages.

    Raises
    ------
    AppError
        404 when the session is absent or owned by someone else.
    """
    if ChatSessionDao().fetchChatSessionByIdAndUserId(session, chat_session_id, user_id) is None:
        raise AppError("Chat session not found", 404)
    messages, total = UserMessagesDao().fetchMessagesByChatSessionId(session, chat_session_id, user_id, limit, offset)
    return {
        "messages": [serialize_message(message, include_file=True) for message in messages],
        "pagination": pagination(total, limit, offset),
    }


@transactional
def delete_message(session: Session, message_id: UUID, user_id: UUID) -> None:
    message_dao = UserMessagesDao()
    message = message_dao.fetchMessageByIdAndUserId(session, message_id, user_id)
    if message is None:
        raise AppError("Message not found", 404)
    message_dao.deleteMessage(session, message)
    logger.info("Message deleted: id=%s user=%s", message_id, user_id)


@transactional
def delete_all_messages(session: Session, user_id: UUID) -> int:
    deleted = UserMessagesDao().deleteMessagesByUserId(session, user_id)
    logger.info("All messages cleared: user=%s deleted=%s", user_id, deleted)
    return deleted


@transactional
def message_stats(session: Session, user_id: UUID) -> dict:
    message_dao = UserMessagesDao()
    return {
        "totalMessages": message_dao.countMessages(session, user_id),
        "messagesByRole": message_dao.countMessagesByRole(session, user_id),
        "firstMessageDate": iso(message_dao.fetchFirstMessageDate(session, user_id)),
    }


# --------------------------------------------------------------------
# Files
# --------------------------------------------------------------------

@transactional
def create_file_record(session: Session, user_id: UUID, name: str, file_type: str, size: int, url: str, s3_key: str) -> dict:
    stored_file = StoredFile(
        user_id=user_id,
        name=name,
        type=file_type,
        size=size,
        url=url,
        s3_key=s3_key,
        status=FileStatus.COMPLETED.value,
    )
    FileDao().createFile(session, stored_file)
    return serialize_file(stored_file)


@transactional
def get_completed_file(session: Session, file_id: UUID, user_id: UUID) -> dict | None:
    """A file owned by `user_id` that finished uploading, usable as chat context."""
    stored_file = FileDao().fetchFileByIdAndUserId(session, file_id, user_id, status=FileStatus.COMPLETED.value)
    return serialize_file(stored_file) if stored_file is not None else None


@transactional
def get_file(session: Session, file_id: UUID, user_id: UUID | None = None) -> dict:
    """
    File detail with its message count.

    `user_id=None` skips ownership scoping (administrators only).
    """
    file_dao = FileDao()
    if user_id is None:
        stored_file = file_dao.fetchFileById(session, file_id)
    else:
        stored_file = file_dao.fetchFileByIdAndUserId(session, file_id, user_id)
    if stored_file is None:
        raise AppError("File not found", 404)
    data = serialize_file(stored_file)
    data["_count"] = {"messages": file_dao.countMessagesByFileIds(session, [stored_file.id]).get(stored_file.id, 0)}
    if user_id is None:
        data["user"] = user_summary(stored_file.user)
    return data


@transactional
def list_files(
    session: Session,
    limit: int = 20,
    offset: int = 0,
    user_id: UUID | None = None,
    status: str | None = None,
    type_filter: str | None = None,
    include_owner: bool = False,
) -> dict:
    file_dao = FileDao()
    files, total = file_dao.fetchFiles(session, limit, offset, user_id=user_id, status=status, type_filter=type_filter)
    counts = file_dao.countMessagesByFileIds(session, [stored_file.id for stored_file in files])
    serialized = []
    for stored_file in files:
        data = serialize_file(stored_file)
        data["_count"] = {"messages": counts.get(stored_file.id, 0)}
        if include_owner:
            data["user"] = user_summary(stored_file.user)
        serialized.append(data)
    return {"files": serialized, "pagination": pagination(total, limit, offset)}


@transactional
def file_stats(session: Session, user_id: UUID) -> dict:
    file_dao = FileDao()
    return {
        "totalFiles": file_dao.countFiles(session, user_id),
        "totalSize": file_dao.sumFileSizes(session, user_id),
        "byStatus": {status: {"count": count, "size": size} for status, count, size in file_dao.countFilesByStatus(session, user_id)},
        "byType": {file_type: {"count": count, "size": size} for file_type, count, size in file_dao.countFilesByType(session, user_id)},
    }


@transactional
def delete_file_record(session: Session, file_id: UUID, user_id: UUID | None = None) -> None:
    """Remove the record; messages that referenced it keep existing with no file."""
    file_dao = FileDao()
    if user_id is None:
        stored_file = file_dao.fetchFileById(session, file_id)
    else:
        stored_file = file_dao.fetchFileByIdAndUserId(session, file_id, user_id)
    if stored_file is None:
        raise AppError("File not found", 404)
    file_dao.deleteFile(session, stored_file)


# --------------------------------------------------------------------
# Administration
# --------------------------------------------------------------------

@transactional
def list_users(session: Session, limit: int = 20, offset: int = 0, role: str | None = None, search: str | None = None) -> dict:
    users, total = UserDao().fetchUsers(session, limit, offset, role=role, search=search)
    serialized = []
    for user in users:
        data = serialize_user(user)
        data["_count"] = _user_counts(session, user)
        serialized.append(data)
    return {"users": serialized, "pagination": pagination(total, limit, offset)}


@transactional
def get_user_detail(session: Session, user_id: UUID) -> dict:
    """
    Everything an administrator sees about one user: profile, counts, the 10
    most recent files and messages, and all surveys.
    """
    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise AppError("User not found", 404)
    files, _ = FileDao().fetchFiles(session, 10, 0, user_id=user.id)
    data = serialize_user(user)
    data["files"] = [
        {key: value for key, value in serialize_file(stored_file).items() if key in ("id", "name", "type", "size", "status", "createdAt")}
        for stored_file in files
    ]
    data["messages"] = [
        {"id": str(message.id), "content": message.content, "role": message.role, "createdAt": iso(message.created_at)}
        for message in UserMessagesDao().fetchRecentMessagesByUserId(session, user.id, 10)
    ]
    data["surveys"] = [
        {"id": str(survey.id), "rating": survey.rating, "feedback": survey.feedback, "createdAt": iso(survey.created_at)}
        for survey in SurveyDao().fetchSurveysByUserId(session, user.id)
    ]
    data["_count"] = _user_counts(session, user)
    return data


@transactional
def update_user_role(session: Session, actor_id: UUID, user_id: UUID, role: str) -> dict:
    """
    Change a user's role.

    Raises
    ------
    AppError
        400 ``Cannot demote yourself`` when an administrator removes their
        own admin role, 404 when the user does not exist.
    """
    if user_id == actor_id and role != UserRole.ADMIN.value:
        raise AppError("Cannot demote yourself", 400)
    user_dao = UserDao()
    user = user_dao.fetchUserById(session, user_id)
    if user is None:
        raise AppError("User not found", 404)
    old_role = user.role
    user_dao.updateRole(session, user, role, utcnow())
    logger.warning("User role updated by admin=%s: target=%s %s -> %s", actor_id, user.id, old_role, role)
    return serialize_user(user)


@transactional
def delete_user(session: Session, actor_id: UUID, user_id: UUID) -> None:
    if user_id == actor_id:
        raise AppError("Cannot delete yourself", 400)
    user_dao = UserDao()
    user = user_dao.fetchUserById(session, user_id)
    if user is None:
        raise AppError("User not found", 404)
    email = user.email
    user_dao.deleteUser(session, user)
    logger.warning("User deleted by admin=%s: target=%s email=%s", actor_id, user_id, email)


@transactional
def admin_stats(session: Session) -> dict:
    user_dao = UserDao()
    file_dao = FileDao()
    message_dao = UserMessagesDao()
    return {
        "overview": {
            "totalUsers": user_dao.countUsers(session),
            "totalFiles": file_dao.countFiles(session),
            "totalMessages": message_dao.countMessages(session),
            "activeUsers": user_dao.countActiveUsersSince(session, utcnow() - ACTIVE_USER_WINDOW),
        },
        "usersByRole": user_dao.countUsersByRole(session),
        "filesByStatus": {
            status: {"count": count, "totalSize": size}
            for status, count, size in file_dao.countFilesByStatus(session)
        },
        "messagesByRole": message_dao.countMessagesByRole(session),
        "recent": {
            "users": [serialize_user(user) for user in user_dao.fetchRecentUsers(session, 5)],
            "files": [
                {**serialize_file(stored_file), "user": user_summary(stored_file.user)}
                for stored_file in file_dao.fetchRecentFiles(session, 5)
            ],
        },
    }


@transactional
def list_surveys(session: Session, limit: int = 20, offset: int = 0) -> dict:
    survey_dao = SurveyDao()
    surveys, total = survey_dao.fetchSurveys(session, limit, offset)
    return {
        "surveys": [{**serialize_survey(survey), "user": user_summary(survey.user)} for survey in surveys],
        "pagination": pagination(total, limit, offset),
        "averageRating": survey_dao.averageRating(session),
    }


# --------------------------------------------------------------------
# Surveys
# --------------------------------------------------------------------

@transactional
def submit_survey(session: Session, user_id: UUID, rating: int, feedback: str) -> dict:
    """
    Store a survey unless the user already submitted one in the last 24 hours.

    The check and the insert are two statements in one transaction, not a
    database constraint: two submissions racing each other can both pass
    the check and both be stored.

    Raises
    ------
    AppError
        429 within the cooldown window.
    """
    survey_dao = SurveyDao()
    now = utcnow()
    latest = survey_dao.fetchLatestSurveyByUserId(session, user_id)
    if latest is not None and as_utc(latest.created_at) > now - SURVEY_COOLDOWN:
        raise AppError("You can only submit one survey per day", 429)
    survey = survey_dao.createSurvey(session, Survey(user_id=user_id, rating=rating, feedback=feedback, date_created_on=now))
    logger.info("Survey submitted: id=%s rating=%s user=%s", survey.id, rating, user_id)
    return {**serialize_survey(survey), "user": user_summary(survey.user)}


@transactional
def list_user_surveys(session: Session, user_id: UUID) -> list[dict]:
    return [serialize_survey(survey) for survey in SurveyDao().fetchSurveysByUserId(session, user_id)]


@transactional
def survey_stats(session: Session) -> dict:
    survey_dao = SurveyDao()
    distribution = survey_dao.countSurveysByRating(session)
    return {
        "totalSurveys": survey_dao.countSurveys(session),
        "averageRating": round(survey_dao.averageRating(session), 2),
        "ratingDistribution": {str(rating): distribution[rating] for rating in sorted(distribution)},
    }
