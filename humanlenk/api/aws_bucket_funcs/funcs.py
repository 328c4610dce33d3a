"""
S3 Utilities: Client Init • Upload • Delete • Presigned Download
=================================================================

Purpose
-------
Small helper module for interacting with Amazon S3:
- Initialize an S3 client with Signature V4
- Upload user files (content type, AES256 server-side encryption, metadata)
- Delete objects
- Generate presigned URLs for downloads

Configuration (from `Settings`)
-------------------------------
- AWS_ACCESS_KEY : Access key ID
- AWS_SECRET_KEY : Secret access key
- REGION         : AWS region (e.g., "eu-central-1")
- BUCKET_NAME    : Target S3 bucket; storage counts as "not configured" without it

Security Notes
--------------
- Credentials are never logged.
- Presigned URLs grant temporary access; they expire after one hour by default.
"""

import logging
import uuid
from datetime import datetime, timezone
from urllib.parse import quote

import boto3
import botocore
from botocore.config import Config

from humanlenk.database.config.config import Settings

logger = logging.getLogger(__name__)

DOWNLOAD_URL_EXPIRY = 3600
"""Lifetime of presigned download URLs, in seconds."""


def get_client(settings: Settings):
    """
    Initialize and return a low-level S3 client configured for Signature V4.

    Returns:
        botocore.client.S3: An S3 client ready for object operations.
    """
    s3_client = boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY,
        aws_secret_access_key=settings.AWS_SECRET_KEY,
        region_name=settings.REGION,
        config=Config(signature_version="s3v4"),
    )
    return s3_client


def build_object_key(user_id, filename: str) -> str:
    """`<userId>/<uuid>.<ext>`, the extension taken from the original name."""
    extension = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    return f"{user_id}/{uuid.uuid4()}.{extension}"


def object_url(settings: Settings, key: str) -> str:
    return f"https://{settings.BUCKET_NAME}.s3.{settings.REGION}.amazonaws.com/{key}"


def upload(fileobj, key: str, s3_client, settings: Settings, content_type: str, user_id, original_name: str) -> str:
    """
    Upload an in-memory file to S3.

    Args:
        fileobj: Binary file-like object positioned at the start.
        key (str): Object key (destination path/name in the bucket).
        s3_client (botocore.client.S3): Client returned by `get_client()`.
        settings (Settings): Supplies bucket and region.
        content_type (str): MIME type stored with the object.
        user_id: Owner, recorded in the object metadata.
        original_name (str): Client-side filename, recorded (URL-quoted) in the metadata.

    Returns:
        str: The object's URL.

    Raises:
        botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError
    """
    s3_client.upload_fileobj(
        fileobj, settings.BUCKET_NAME, key,
        ExtraArgs={
            "ContentType": content_type,
            "ServerSideEncryption": "AES256",
            "Metadata": {
                "userId": str(user_id),
                "originalName": quote(original_name),
                "uploadedAt": datetime.now(timezone.utc).isoformat(),
            },
        },
    )
    return object_url(settings, key)


def delete(key: str, s3_client, settings: Settings) -> None:
    s3_client.delete_object(Bucket=settings.BUCKET_NAME, Key=key)


def download(key: str, s3_client, settings: Settings, filename: str, expires: int = DOWNLOAD_URL_EXPIRY) -> str:
    """
    Generate a presigned URL for downloading an object as an attachment.

    Args:
        key (str): Object key in the bucket.
        s3_client (botocore.client.S3): Client returned by `get_client()`.
        settings (Settings): Supplies the bucket.
        filename (str): Name suggested to the browser.
        expires (int, optional): URL expiration in seconds (default: 3600).

    Returns:
        str: A presigned URL that allows temporary GET access.
    """
    response = s3_client.generate_presigned_url(
        "get_object",
        Params={
            "Bucket": settings.BUCKET_NAME,
            "Key": key,
            "ResponseContentDisposition": f'attachment; filename="{quote(filename)}"',
        },
        ExpiresIn=expires,
    )
    return response


STORAGE_ERRORS = (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError)
"""Exceptions that mean the object store could not serve the request."""
