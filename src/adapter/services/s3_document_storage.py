"""S3 Document Storage

Stores signed agreements and verification media in an S3 bucket.
"""

import asyncio
import logging
import os
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.app.services.document_storage import DocumentStorage, DocumentStorageError

logger = logging.getLogger(__name__)

CONTENT_TYPES_BY_EXTENSION = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".mp4": "video/mp4",
}


class S3DocumentStorage(DocumentStorage):
    """
    DocumentStorage backed by an S3 bucket

    Objects are written with put_object; the returned URL is built from
    ``public_base_url`` when set (CDN or custom domain), otherwise the
    bucket's virtual-hosted URL.
    """

    def __init__(
        self,
        bucket_name: str,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        self.bucket_name = bucket_name
        self.region = region
        # Empty credentials fall through to the default boto3 credential chain
        self.s3_client = client or boto3.client(
            "s3",
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            region_name=region or None,
        )
        self.public_base_url = (public_base_url or "").rstrip("/")

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.region:
            return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket_name}.s3.amazonaws.com/{key}"

    async def save(self, path: str, content: bytes, content_type: str = "application/pdf") -> str:
        if not self.bucket_name:
            raise DocumentStorageError("S3 bucket not configured")

        key = path.lstrip("/")
        if not key or ".." in key.split("/"):
            raise DocumentStorageError(f"Invalid storage key: {path}")

        if not content_type:
            extension = os.path.splitext(key)[1].lower()
            content_type = CONTENT_TYPES_BY_EXTENSION.get(extension, "application/octet-stream")

        try:
            await asyncio.to_thread(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading {key} to S3: {e}")
            raise DocumentStorageError(f"Failed to store {path}: {e}") from e

        logger.info(f"Stored {content_type} document s3://{self.bucket_name}/{key} ({len(content)} bytes)")
        return self.public_url(key)
