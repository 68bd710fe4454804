from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from app.domain.ports.object_storage import ObjectStoragePort
from app.settings import Settings

logger = logging.getLogger(__name__)

_client: Optional[Any] = None


def get_s3_client(settings: Settings) -> Any:
    """
    Lazy singleton S3 client for an S3-compatible endpoint (Backblaze B2).
    Path-style addressing; the region is required by the SDK but ignored by B2.
    """
    global _client
    if _client is None:
        if not settings.b2_key_id or not settings.b2_application_key:
            raise RuntimeError(
                "B2 credentials not configured. Set B2_KEY_ID and B2_APPLICATION_KEY."
            )
        logger.info("configuring S3 client", extra={"endpoint": settings.b2_endpoint})
        _client = boto3.client(
            "s3",
            endpoint_url=settings.b2_endpoint,
            region_name=settings.b2_region,
            aws_access_key_id=settings.b2_key_id,
            aws_secret_access_key=settings.b2_application_key,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
    return _client


class S3AvatarStorage(ObjectStoragePort):
    """boto3 is blocking; every call runs in a worker thread."""

    def __init__(self, client: Any, *, bucket: str, public_cdn_base: str) -> None:
        self._s3 = client
        self._bucket = bucket
        self._cdn = public_cdn_base.rstrip("/")

    async def presign_put(
        self, key: str, content_type: str, expires_in_seconds: int
    ) -> str:
        return await asyncio.to_thread(
            self._s3.generate_presigned_url,
            "put_object",
            Params={"Bucket": self._bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=expires_in_seconds,
        )

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self._s3.head_object, Bucket=self._bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._s3.delete_object, Bucket=self._bucket, Key=key)

    def public_url(self, key: str) -> str:
        return f"{self._cdn}/{key}"
