"""Validation of uploaded attachment parts."""

import os
from dataclasses import dataclass

from complaint_api.exceptions import ValidationError

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf", ".doc", ".docx"}

ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@dataclass(frozen=True)
class NewAttachment:
    """An uploaded file held in memory until the complaint is committed."""

    file_name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_attachments(attachments: list[NewAttachment], max_files: int, max_bytes: int) -> None:
    """Reject uploads by count, type, or size.

    Raises:
        ValidationError: On the first attachment that breaks a rule
    """
    if len(attachments) > max_files:
        raise ValidationError(f"At most {max_files} attachments are allowed")

    for attachment in attachments:
        extension = os.path.splitext(attachment.file_name or "")[1].lower()
        content_type = (attachment.content_type or "").split(";")[0].strip().lower()
        if extension not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Invalid file type. Only JPEG, PNG, PDF, DOC, DOCX allowed.")
        if attachment.size > max_bytes:
            raise _too_large(attachment.file_name, max_bytes)


def _too_large(file_name: str, max_bytes: int) -> ValidationError:
    return ValidationError(f"File {file_name} exceeds the {max_bytes // (1024 * 1024)}MB limit")


async def read_upload(upload, max_bytes: int) -> NewAttachment:
    """Read an uploaded part, stopping one byte past ``max_bytes``.

    Raises:
        ValidationError: If the part is larger than ``max_bytes``
    """
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise _too_large(upload.filename, max_bytes)
    return NewAttachment(
        file_name=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )
