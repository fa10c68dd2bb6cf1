"""Database models - import all models here for Alembic discovery."""

from complaint_api.models.complaint import Attachment, Complaint, ComplaintUpdate
from complaint_api.models.user import Category, User

__all__ = [
    "User",
    "Category",
    "Complaint",
    "ComplaintUpdate",
    "Attachment",
]
