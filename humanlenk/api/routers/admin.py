"""
Admin Router: Users • Files • Dashboard • Surveys
==================================================

Every route requires an administrator (`require_admin`, 403 otherwise) and
bypasses ownership scoping. Each access is logged with the acting
administrator's id; destructive actions are logged at warning level.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from humanlenk.api.dependencies import (
    current_user_id,
    get_app_settings,
    get_session_factory,
    get_storage_client,
    require_admin,
    resolve_id,
)
from humanlenk.api.models import RoleUpdate
from humanlenk.api.routers.files import FILE_NOT_FOUND, remove_stored_file
from humanlenk.api.utils import parse_uuid
from humanlenk.api.errors import AppError
from humanlenk.database.config.config import Settings
from humanlenk.database.core.funcs import (
    admin_stats,
    delete_user,
    get_file,
    get_user_detail,
    list_files,
    list_surveys,
    list_users,
    update_user_role,
)
from humanlenk.database.entities.enums import FileStatus, UserRole

router = APIRouter(prefix="/api/admin", tags=["Admin"])
logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


@router.get("/users")
def get_users(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None),
    admin: dict = Depends(require_admin),
    session_factory=Depends(get_session_factory),
):
    """Users newest first; `search` matches email or name, case-insensitively."""
    page = list_users(
        limit=limit,
        offset=offset,
        role=role.value if role else None,
        search=search,
        session_factory=session_factory,
    )
    logger.info(
        "Admin accessed users list: admin=%s role=%s search=%s results=%s",
        admin["id"], role.value if role else None, search, len(page["users"]),
    )
    return {"success": True, "data": page}


@router.get("/users/{user_id}")
def get_user_details(user_id: str, admin: dict = Depends(require_admin), session_factory=Depends(get_session_factory)):
    detail = get_user_detail(user_id=resolve_id(user_id, USER_NOT_FOUND), session_factory=session_factory)
    logger.info("Admin accessed user details: admin=%s target=%s", admin["id"], user_id)
    return {"success": True, "data": detail}


@router.patch("/users/{user_id}/role")
def change_user_role(
    user_id: str,
    data: RoleUpdate,
    admin: dict = Depends(require_admin),
    session_factory=Depends(get_session_factory),
):
    """Grant or revoke the administrator role; administrators cannot demote themselves."""
    updated = update_user_role(
        actor_id=current_user_id(admin),
        user_id=resolve_id(user_id, USER_NOT_FOUND),
        role=data.role.value,
        session_factory=session_factory,
    )
    return {"success": True, "message": "User role updated successfully", "data": updated}


@router.delete("/users/{user_id}")
def remove_user(user_id: str, admin: dict = Depends(require_admin), session_factory=Depends(get_session_factory)):
    """Delete a user with everything they own; administrators cannot delete themselves."""
    actor_id = current_user_id(admin)
    target = parse_uuid(user_id)
    if target == actor_id:
        raise AppError("Cannot delete yourself", 400)
    if target is None:
        raise AppError(USER_NOT_FOUND, 404)
    delete_user(actor_id=actor_id, user_id=target, session_factory=session_factory)
    return {"success": True, "message": "User deleted successfully"}


@router.get("/files")
def get_all_files(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status: Optional[FileStatus] = Query(None),
    type_filter: Optional[str] = Query(None, alias="type"),
    user_id: Optional[str] = Query(None, alias="userId"),
    admin: dict = Depends(require_admin),
    session_factory=Depends(get_session_factory),
):
    owner: Optional[UUID] = None
    if user_id:
        owner = parse_uuid(user_id)
        if owner is None:
            raise AppError(USER_NOT_FOUND, 404)
    page = list_files(
        limit=limit,
        offset=offset,
        user_id=owner,
        status=status.value if status else None,
        type_filter=type_filter,
        include_owner=True,
        session_factory=session_factory,
    )
    logger.info(
        "Admin accessed files list: admin=%s status=%s type=%s user=%s results=%s",
        admin["id"], status.value if status else None, type_filter, user_id, len(page["files"]),
    )
    return {"success": True, "data": page}


@router.delete("/files/{file_id}")
def remove_any_file(
    file_id: str,
    admin: dict = Depends(require_admin),
    settings: Settings = Depends(get_app_settings),
    storage_client=Depends(get_storage_client),
    session_factory=Depends(get_session_factory),
):
    file = get_file(file_id=resolve_id(file_id, FILE_NOT_FOUND), session_factory=session_factory)
    remove_stored_file(file, storage_client, settings, session_factory)
    logger.warning(
        "File deleted by admin=%s: file=%s name=%s owner=%s",
        admin["id"], file["id"], file["name"], file["user"]["email"],
    )
    return {"success": True, "message": "File deleted successfully"}


@router.get("/stats")
def get_dashboard_stats(admin: dict = Depends(require_admin), session_factory=Depends(get_session_factory)):
    stats = admin_stats(session_factory=session_factory)
    logger.info("Admin accessed dashboard stats: admin=%s", admin["id"])
    return {"success": True, "data": stats}


@router.get("/surveys")
def get_surveys(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: dict = Depends(require_admin),
    session_factory=Depends(get_session_factory),
):
    page = list_surveys(limit=limit, offset=offset, session_factory=session_factory)
    logger.info("Admin accessed surveys: admin=%s results=%s", admin["id"], len(page["surveys"]))
    return {"success": True, "data": page}
