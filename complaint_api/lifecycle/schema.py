"""Response schemas for complaint endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from complaint_api.lifecycle.service import ComplaintDetail, DashboardStats
from complaint_api.models import Attachment, Complaint, ComplaintUpdate
from complaint_api.storage.service import AttachmentStore


class ComplaintSummary(BaseModel):
    """Complaint row joined with its category and owner."""

    complaint_id: int
    complaint_number: str
    user_id: int
    category_id: int
    category_name: Optional[str] = None
    subject: str
    description: str
    priority: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None  # Set on entering resolved/closed
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None  # Only populated for admin listings and detail


class StatusUpdateResponse(BaseModel):
    """One ledger entry."""

    update_id: int
    complaint_id: int
    updated_by: int
    updated_by_name: Optional[str] = None
    old_status: Optional[str] = None  # None for the submission entry
    new_status: str
    note: Optional[str] = None
    created_at: datetime


class AttachmentResponse(BaseModel):
    """Attachment metadata with a fetchable URL."""

    attachment_id: int
    complaint_id: int
    file_name: str
    file_path: str
    file_type: str
    file_size: int
    url: Optional[str] = None


class ComplaintDetailResponse(ComplaintSummary):
    """Complaint with ledger history (newest first) and attachments."""

    updates: list[StatusUpdateResponse] = Field(default_factory=list)
    attachments: list[AttachmentResponse] = Field(default_factory=list)


class ComplaintCreatedResponse(BaseModel):
    """Result of a successful submission."""

    message: str = "Complaint submitted successfully"
    complaintId: int
    complaintNumber: str


class StatusUpdateRequest(BaseModel):
    """Admin status transition request."""

    status: Optional[str] = None
    note: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class DashboardSummary(BaseModel):
    total: int
    pending: int
    in_progress: int
    resolved: int
    closed: int
    high_priority: int


class CategoryCount(BaseModel):
    category_name: str
    count: int


class DashboardResponse(BaseModel):
    summary: DashboardSummary
    by_category: list[CategoryCount] = Field(default_factory=list)


def to_summary(complaint: Complaint, include_phone: bool = False) -> ComplaintSummary:
    owner = complaint.owner
    return ComplaintSummary(
        complaint_id=complaint.id,
        complaint_number=complaint.complaint_number,
        user_id=complaint.user_id,
        category_id=complaint.category_id,
        category_name=complaint.category.name if complaint.category else None,
        subject=complaint.subject,
        description=complaint.description,
        priority=complaint.priority,
        status=complaint.status,
        created_at=complaint.created_at,
        updated_at=complaint.updated_at,
        resolved_at=complaint.resolved_at,
        user_name=owner.name if owner else None,
        user_email=owner.email if owner else None,
        user_phone=owner.phone if owner and include_phone else None,
    )


def to_update(update: ComplaintUpdate) -> StatusUpdateResponse:
    return StatusUpdateResponse(
        update_id=update.id,
        complaint_id=update.complaint_id,
        updated_by=update.updated_by,
        updated_by_name=update.updater.name if update.updater else None,
        old_status=update.old_status,
        new_status=update.new_status,
        note=update.note,
        created_at=update.created_at,
    )


def to_attachment(attachment: Attachment, store: Optional[AttachmentStore]) -> AttachmentResponse:
    return AttachmentResponse(
        attachment_id=attachment.id,
        complaint_id=attachment.complaint_id,
        file_name=attachment.file_name,
        file_path=attachment.file_path,
        file_type=attachment.file_type,
        file_size=attachment.file_size,
        url=store.url_for(attachment.file_path) if store else None,
    )


def to_detail(detail: ComplaintDetail, store: Optional[AttachmentStore]) -> ComplaintDetailResponse:
    summary = to_summary(detail.complaint, include_phone=True)
    return ComplaintDetailResponse(
        **summary.model_dump(),
        updates=[to_update(update) for update in detail.updates],
        attachments=[to_attachment(attachment, store) for attachment in detail.attachments],
    )


def to_dashboard(stats: DashboardStats) -> DashboardResponse:
    return DashboardResponse(
        summary=DashboardSummary(
            total=stats.total,
            pending=stats.pending,
            in_progress=stats.in_progress,
            resolved=stats.resolved,
            closed=stats.closed,
            high_priority=stats.high_priority,
        ),
        by_category=[
            CategoryCount(category_name=name, count=count) for name, count in stats.by_category
        ],
    )
