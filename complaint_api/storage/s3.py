"""MinIO (S3-compatible) attachment storage.

Returns object keys instead of filesystem paths to prevent path traversal attacks.
"""

import logging
from datetime import timedelta
from io import BytesIO
from typing import Optional

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from complaint_api.storage.service import AttachmentStore, build_stored_name

logger = logging.getLogger(__name__)

KEY_PREFIX = "attachments"


class MinioAttachmentStore(AttachmentStore):
    """Stores attachments in a MinIO/S3 bucket."""

    backend = "minio"

    def __init__(self, settings, client: Optional[Minio] = None):
        """Initialize storage service with MinIO client."""
        self.bucket = settings.minio_bucket
        self.url_ttl = settings.attachment_signed_url_ttl
        self.client = client or Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_use_ssl,
        )
        self._ensure_bucket()

    def _ensure_bucket(self):
        """Ensure bucket exists."""
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
                logger.info(f"Created bucket: {self.bucket}")
        except S3Error as e:
            logger.error(f"Error ensuring bucket exists: {e}")

    def save(self, original_name: str, data: bytes, content_type: str) -> str:
        object_key = f"{KEY_PREFIX}/{build_stored_name(original_name)}"
        try:
            self.client.put_object(
                self.bucket,
                object_key,
                BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except (S3Error, HTTPError) as e:
            logger.error(f"Failed to upload object {object_key}: {e}")
            raise OSError(f"Failed to store attachment {original_name}") from e
        logger.debug(f"Uploaded object: {object_key} ({len(data)} bytes)")
        return object_key

    def delete(self, stored_path: str) -> None:
        try:
            self.client.remove_object(self.bucket, stored_path)
        except (S3Error, HTTPError) as e:
            logger.warning(f"Failed to remove object {stored_path}: {e}")

    def url_for(self, stored_path: str) -> Optional[str]:
        try:
            return self.client.presigned_get_object(
                self.bucket,
                stored_path,
                expires=timedelta(seconds=self.url_ttl),
            )
        except Exception as e:
            logger.error(f"Failed to generate signed URL for {stored_path}: {e}")
            return None

    def is_available(self) -> bool:
        try:
            return self.client.bucket_exists(self.bucket)
        except Exception as e:
            logger.error(f"Object storage check failed: {e}")
            return False
