"""S3 image storage for item photos."""

from __future__ import annotations

import asyncio
import pathlib
import uuid
from typing import BinaryIO, NamedTuple

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from journey_forward.errors import ServiceError, ValidationError

logger = structlog.get_logger()

UPLOAD_PREFIX = "items"
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif", "image/heic"}


class UploadedImage(NamedTuple):
    url: str
    key: str


class ImageStorage:
    """Uploads item photos to a public S3 bucket."""

    def __init__(self, bucket_name: str, region: str, base_url: str):
        self.bucket_name = bucket_name
        self.base_url = base_url.rstrip("/")
        self.s3 = boto3.client("s3", region_name=region or None)

    def _key(self, filename: str) -> str:
        suffix = pathlib.Path(filename or "").suffix.lower()
        return f"{UPLOAD_PREFIX}/{uuid.uuid4().hex}{suffix}"

    async def upload(self, file: BinaryIO, filename: str, content_type: str) -> UploadedImage:
        """Store an image and return its public URL.

        Raises:
            ValidationError: for non-image content types
            ServiceError: when the bucket is unavailable
        """
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Only image uploads are allowed")
        if not self.bucket_name:
            raise ServiceError("Image uploads are not configured")

        key = self._key(filename)
        try:
            # boto3 is synchronous, run in thread pool
            await asyncio.to_thread(
                self.s3.upload_fileobj,
                file,
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type, "ACL": "public-read"},
            )
        except NoCredentialsError:
            logger.error("s3_credentials_missing", bucket=self.bucket_name)
            raise ServiceError("Failed to upload image")
        except (BotoCoreError, ClientError) as e:
            logger.error("s3_upload_failed", bucket=self.bucket_name, key=key, error=str(e))
            raise ServiceError("Failed to upload image")

        url = f"{self.base_url}/{key}"
        logger.info("image_uploaded", key=key, content_type=content_type)
        return UploadedImage(url=url, key=key)
