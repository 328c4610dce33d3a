"""
FastAPI dependencies shared by the routers.

Process-wide resources (settings, session factory, S3 client, completion
service) are created by the application lifespan and stored on `app.state`;
the providers below hand them to route functions, which keeps them
overridable in tests through `app.dependency_overrides`.
"""

import logging
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from humanlenk.api.errors import AppError
from humanlenk.api.utils import parse_uuid, verify_token
from humanlenk.database.config.config import Settings
from humanlenk.database.core.funcs import get_user
from humanlenk.database.entities.enums import UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request):
    return request.app.state.session_factory


def get_storage_client(request: Request):
    """The S3 client, or None when no bucket is configured."""
    return request.app.state.storage_client


def get_completion_service(request: Request):
    return request.app.state.completion_service


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    session_factory=Depends(get_session_factory),
) -> dict:
    """
    Resolve the bearer token to the calling user.

    Raises
    ------
    AppError
        401 when the token is missing, invalid or expired, or when its user
        no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise AppError("Access token required", 401)
    subject = verify_token(credentials.credentials, settings)
    user_id = parse_uuid(subject) if subject else None
    if user_id is None:
        raise AppError("Invalid or expired access token", 401)
    user = get_user(user_id=user_id, session_factory=session_factory)
    if user is None:
        raise AppError("User not found", 401)
    return user


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != UserRole.ADMIN.value:
        logger.warning("Unauthorized admin access attempt by user=%s", user["id"])
        raise AppError("Admin access required", 403)
    return user


def current_user_id(user: dict) -> uuid.UUID:
    return parse_uuid(user["id"])


def resolve_id(value: str, not_found_message: str) -> uuid.UUID:
    """Parse a path or body id; malformed ids are reported like unknown ones."""
    parsed = parse_uuid(value)
    if parsed is None:
        raise AppError(not_found_message, 404)
    return parsed
