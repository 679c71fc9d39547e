import asyncio
import logging
import os
import uuid

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError

from ..config import settings
from ..errors import UploadError

logger = logging.getLogger(__name__)


def resource_type_for(content_type: str | None) -> str:
    if content_type and content_type.startswith("video/"):
        return "video"
    return "image"


async def upload_to_cloudinary(
    content: bytes,
    filename: str,
    content_type: str | None,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Single unsigned upload POST; returns the asset's secure URL."""
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_UPLOAD_PRESET:
        raise UploadError("Cloudinary is not configured")

    url = (
        f"{settings.CLOUDINARY_API}/{settings.CLOUDINARY_CLOUD_NAME}"
        f"/{resource_type_for(content_type)}/upload"
    )
    files = {"file": (filename, content, content_type or "application/octet-stream")}
    data = {"upload_preset": settings.CLOUDINARY_UPLOAD_PRESET}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.UPLOAD_TIMEOUT) as own_client:
                resp = await own_client.post(url, files=files, data=data)
        else:
            resp = await client.post(url, files=files, data=data)
        resp.raise_for_status()
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error(f"Upload failed: {exc}")
        raise UploadError(f"Upload failed: {exc}", details={"filename": filename}) from exc

    secure_url = payload.get("secure_url")
    if not secure_url:
        raise UploadError("Media host response had no secure_url", details={"filename": filename})
    return secure_url


def _s3_client():
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
    )


async def upload_to_s3(content: bytes, filename: str, content_type: str | None, s3_client=None) -> str:
    if not settings.S3_BUCKET:
        raise UploadError("S3 bucket is not configured")

    ext = os.path.splitext(filename)[1].lower()
    key = f"gallery/{uuid.uuid4()}{ext}"
    s3 = s3_client or _s3_client()
    try:
        await asyncio.to_thread(
            s3.put_object,
            Bucket=settings.S3_BUCKET,
            Key=key,
            Body=content,
            ContentType=content_type or "application/octet-stream",
        )
    except (ClientError, BotoCoreError) as exc:
        logger.error(f"S3 upload failed: {exc}")
        raise UploadError(f"Upload failed: {exc}", details={"filename": filename}) from exc

    return f"https://{settings.S3_BUCKET}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


async def upload_media(content: bytes, filename: str, content_type: str | None) -> str:
    """Upload to the configured media host and return a stable URL."""
    if not content:
        raise UploadError("File is empty - nothing to upload", details={"filename": filename})

    if settings.UPLOAD_BACKEND == "cloudinary":
        url = await upload_to_cloudinary(content, filename, content_type)
    elif settings.UPLOAD_BACKEND == "s3":
        url = await upload_to_s3(content, filename, content_type)
    else:
        raise UploadError(f"Invalid UPLOAD_BACKEND: {settings.UPLOAD_BACKEND}")

    logger.info(f"Uploaded {filename} -> {url}")
    return url


def get_uploader():
    return upload_media
