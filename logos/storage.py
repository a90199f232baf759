"""
Image storage for uploaded logos: S3-compatible buckets and an in-memory double.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from logos.config import Settings
from logos.errors import UploadError


class ImageStorage(Protocol):
    """Defines the operations uploads need from object storage."""

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` and return its public URL."""
        ...

    def public_url(self, path: str) -> str:
        ...


@dataclass
class InMemoryImageStorage:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self.stored_objects[path] = (data, content_type)
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"


@dataclass
class S3ImageStorage:
    """
    Bucket storage through boto3. Works with AWS S3 and S3-compatible
    services (Tencent COS, MinIO, GCS interop) by pointing ``endpoint`` at them.
    """

    bucket: str
    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: str = ""

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"Could not store image: {exc}") from exc
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{path}"
        return f"https://{self.bucket}.s3.amazonaws.com/{path}"


def build_image_storage(settings: Settings) -> ImageStorage:
    if not settings.cloud_bucket:
        return InMemoryImageStorage()
    return S3ImageStorage(
        bucket=settings.cloud_bucket,
        region=settings.storage_region or "",
        endpoint=settings.storage_endpoint or "",
        access_key_id=settings.aws_access_key_id or "",
        secret_access_key=settings.aws_secret_access_key or "",
        public_base_url=settings.storage_public_url or "",
    )


def object_name(filename: Optional[str], timestamp_ms: int) -> str:
    """Prefix the upload's filename with a millisecond timestamp."""
    safe = (filename or "upload").replace("/", "_").replace("\\", "_")
    return f"{timestamp_ms}{safe}"
