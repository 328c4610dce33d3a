"""
Files Router: Upload • List • Stats • Detail • Download • Delete
=================================================================

Uploads go to S3 under ``<userId>/<uuid>.<ext>`` with AES256 server-side
encryption; the database keeps the metadata. Only PDF, DOC, DOCX and plain
text files up to `MAX_UPLOAD_BYTES` are accepted.

When no bucket is configured (or S3 fails) the storage-backed routes answer
503 instead of crashing.
"""

import io
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from humanlenk.api.aws_bucket_funcs.funcs import (
    DOWNLOAD_URL_EXPIRY,
    STORAGE_ERRORS,
    build_object_key,
    delete,
    download,
    upload,
)
from humanlenk.api.dependencies import (
    current_user_id,
    get_app_settings,
    get_current_user,
    get_session_factory,
    get_storage_client,
    resolve_id,
)
from humanlenk.api.errors import AppError
from humanlenk.database.config.config import Settings
from humanlenk.database.core.funcs import create_file_record, delete_file_record, file_stats, get_file, list_files
from humanlenk.database.entities.enums import FileStatus

router = APIRouter(prefix="/api/files", tags=["Files"])
logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = (
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "text/plain",
)

FILE_NOT_FOUND = "File not found"
UPLOAD_UNAVAILABLE = "File upload service unavailable"


def remove_stored_file(file: dict, storage_client, settings: Settings, session_factory, user_id: Optional[UUID] = None) -> None:
    """
    Delete the S3 object of `file`, then its record.

    `user_id=None` skips the ownership filter on the record (administrators).
    """
    if storage_client is None:
        raise AppError("File storage service unavailable", 503)
    try:
        delete(file["s3Key"], storage_client, settings)
    except STORAGE_ERRORS as e:
        logger.error("File deletion failed: file=%s error=%s", file["id"], e)
        raise AppError("Failed to delete file", 500)
    delete_file_record(file_id=UUID(file["id"]), user_id=user_id, session_factory=session_factory)


@router.post("/upload", status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    storage_client=Depends(get_storage_client),
    session_factory=Depends(get_session_factory),
):
    """Upload one file (multipart field `file`).

    Response:
        201: stored file record (status `completed`)
        400: disallowed type or too large
        503: storage not configured or failing
    """
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise AppError("Invalid file type. Only PDF, DOCX, DOC, and TXT files are allowed.", 400)

    # Read at most one byte past the limit; anything longer is rejected unread.
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise AppError(f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB", 400)

    user_id = current_user_id(user)
    filename = file.filename or "upload"
    if storage_client is None:
        logger.error("File upload rejected, storage is not configured: user=%s", user_id)
        raise AppError(UPLOAD_UNAVAILABLE, 503)

    key = build_object_key(user_id, filename)
    try:
        url = await run_in_threadpool(
            upload, io.BytesIO(content), key, storage_client, settings, file.content_type, user_id, filename
        )
    except STORAGE_ERRORS as e:
        logger.error("File upload failed: name=%s user=%s error=%s", filename, user_id, e)
        raise AppError(UPLOAD_UNAVAILABLE, 503)

    saved = create_file_record(
        user_id=user_id,
        name=filename,
        file_type=file.content_type,
        size=len(content),
        url=url,
        s3_key=key,
        session_factory=session_factory,
    )
    logger.info("File uploaded: id=%s name=%s size=%s user=%s", saved["id"], filename, len(content), user_id)
    return {"success": True, "message": "File uploaded successfully", "data": saved}


@router.get("")
def get_files(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status: Optional[FileStatus] = Query(None),
    type_filter: Optional[str] = Query(None, alias="type"),
    user: dict = Depends(get_current_user),
    session_factory=Depends(get_session_factory),
):
    """The caller's files, newest first; `type` matches a substring of the MIME type."""
    page = list_files(
        limit=limit,
        offset=offset,
        user_id=current_user_id(user),
        status=status.value if status else None,
        type_filter=type_filter,
        session_factory=session_factory,
    )
    return {"success": True, "data": page}


@router.get("/stats")
def get_file_stats(user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    stats = file_stats(user_id=current_user_id(user), session_factory=session_factory)
    return {"success": True, "data": stats}


@router.get("/{file_id}")
def get_file_detail(file_id: str, user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    detail = get_file(
        file_id=resolve_id(file_id, FILE_NOT_FOUND),
        user_id=current_user_id(user),
        session_factory=session_factory,
    )
    return {"success": True, "data": detail}


@router.get("/{file_id}/download")
def get_download_link(
    file_id: str,
    user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    storage_client=Depends(get_storage_client),
    session_factory=Depends(get_session_factory),
):
    """Presigned, one-hour download URL served as an attachment."""
    user_id = current_user_id(user)
    file = get_file(file_id=resolve_id(file_id, FILE_NOT_FOUND), user_id=user_id, session_factory=session_factory)
    if storage_client is None:
        raise AppError("File storage service unavailable", 503)
    try:
        url = download(file["s3Key"], storage_client, settings, file["name"])
    except STORAGE_ERRORS as e:
        logger.error("Failed to generate signed URL: file=%s user=%s error=%s", file["id"], user_id, e)
        raise AppError("Failed to generate download link", 500)
    logger.info("Signed URL generated: file=%s user=%s", file["id"], user_id)
    return {"success": True, "data": {"downloadUrl": url, "expiresIn": DOWNLOAD_URL_EXPIRY}}


@router.delete("/{file_id}")
def remove_file(
    file_id: str,
    user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    storage_client=Depends(get_storage_client),
    session_factory=Depends(get_session_factory),
):
    user_id = current_user_id(user)
    file = get_file(file_id=resolve_id(file_id, FILE_NOT_FOUND), user_id=user_id, session_factory=session_factory)
    remove_stored_file(file, storage_client, settings, session_factory, user_id=user_id)
    logger.info("File deleted: id=%s name=%s user=%s", file["id"], file["name"], user_id)
    return {"success": True, "message": "File deleted successfully"}
