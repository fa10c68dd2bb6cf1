"""Attachment storage backends.

The lifecycle service only talks to the ``AttachmentStore`` interface, so
the backend (local disk served under ``/uploads``, or MinIO/S3) can be
swapped through configuration without touching complaint logic.
"""

import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from complaint_api.settings import get_settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(original_name: str) -> str:
    """Reduce an uploaded file name to a safe basename."""
    # Drop any client-side directory components
    base = re.split(r"[\\/]", original_name or "")[-1]
    base = _UNSAFE_CHARS.sub("_", base).strip("._")
    return base or "attachment"


def build_stored_name(original_name: str) -> str:
    """Build a unique stored file name: ``<epoch-millis>-<random hex>-<safe original name>``."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}-{safe_file_name(original_name)}"


class AttachmentStore(ABC):
    """Capability for persisting attachment blobs."""

    backend = "abstract"

    @abstractmethod
    def save(self, original_name: str, data: bytes, content_type: str) -> str:
        """Persist a blob and return its stored path/key."""

    @abstractmethod
    def delete(self, stored_path: str) -> None:
        """Remove a previously stored blob; missing blobs are ignored."""

    @abstractmethod
    def url_for(self, stored_path: str) -> Optional[str]:
        """Return a URL clients can fetch the blob from."""

    def is_available(self) -> bool:
        """Check whether the backend can accept writes."""
        return True


class LocalAttachmentStore(AttachmentStore):
    """Stores attachments on local disk, served statically by the API."""

    backend = "local"

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        """Initialize store rooted at ``upload_dir``."""
        self.root = Path(upload_dir)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, original_name: str, data: bytes, content_type: str) -> str:
        stored_name = build_stored_name(original_name)
        target = self.root / stored_name
        # Exclusive create; stored blobs are never overwritten
        with open(target, "xb") as handle:
            handle.write(data)
        logger.debug(f"Stored attachment: {target} ({len(data)} bytes, {content_type})")
        return f"{self.root.name}/{stored_name}"

    def delete(self, stored_path: str) -> None:
        target = self.root / Path(stored_path).name
        try:
            target.unlink()
        except FileNotFoundError:
            pass

    def url_for(self, stored_path: str) -> Optional[str]:
        return f"{self.url_prefix}/{Path(stored_path).name}"

    def is_available(self) -> bool:
        return self.root.is_dir()


# Global instance
_attachment_store: Optional[AttachmentStore] = None


def create_attachment_store(settings=None) -> AttachmentStore:
    """Build the backend selected by ``STORAGE_BACKEND``."""
    settings = settings or get_settings()
    if settings.storage_backend == "minio":
        from complaint_api.storage.s3 import MinioAttachmentStore

        return MinioAttachmentStore(settings)
    return LocalAttachmentStore(settings.upload_dir, settings.upload_url_prefix)


def get_attachment_store() -> AttachmentStore:
    """Get or create attachment store instance."""
    global _attachment_store
    if _attachment_store is None:
        _attachment_store = create_attachment_store()
    return _attachment_store
