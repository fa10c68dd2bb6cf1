"""Complaint endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session

from complaint_api.auth.dependencies import get_current_identity
from complaint_api.auth.tokens import Identity
from complaint_api.db.session import get_db
from complaint_api.exceptions import ComplaintNumberConflict, ValidationError
from complaint_api.lifecycle.schema import (
    ComplaintCreatedResponse,
    ComplaintDetailResponse,
    ComplaintSummary,
    DashboardResponse,
    MessageResponse,
    StatusUpdateRequest,
    to_dashboard,
    to_detail,
    to_summary,
)
from complaint_api.lifecycle.service import ComplaintLifecycleService
from complaint_api.settings import get_settings
from complaint_api.storage.service import AttachmentStore, get_attachment_store
from complaint_api.storage.uploads import NewAttachment, read_upload, validate_attachments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/complaints", tags=["complaints"])


async def _read_uploads(uploads: Optional[list[UploadFile]], settings) -> list[NewAttachment]:
    # Browsers send an empty part when no file was chosen
    chosen = [upload for upload in uploads or [] if upload.filename]
    if len(chosen) > settings.max_attachments:
        raise ValidationError(f"At most {settings.max_attachments} attachments are allowed")
    return [await read_upload(upload, settings.max_attachment_bytes) for upload in chosen]


@router.post("", response_model=ComplaintCreatedResponse, status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    request: Request,
    category_id: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    attachments: Optional[list[UploadFile]] = File(None),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
):
    """Submit a complaint with up to five attachments."""
    settings = get_settings()
    new_attachments = await _read_uploads(attachments, settings)
    validate_attachments(new_attachments, settings.max_attachments, settings.max_attachment_bytes)

    service = ComplaintLifecycleService(db, store=store)
    attempts = max(1, settings.complaint_number_attempts)
    for attempt in range(1, attempts + 1):
        try:
            complaint = service.create(
                identity,
                category_id=category_id,
                subject=subject,
                description=description,
                priority=priority,
                attachments=new_attachments,
            )
            break
        except ComplaintNumberConflict as e:
            if attempt == attempts:
                raise
            logger.warning(
                f"Retrying submission after number collision ({attempt}/{attempts})",
                extra={
                    "complaint_number": e.complaint_number,
                    "correlation_id": getattr(request.state, "correlation_id", None),
                },
            )

    return ComplaintCreatedResponse(
        complaintId=complaint.id,
        complaintNumber=complaint.complaint_number,
    )


@router.get("/my-complaints", response_model=list[ComplaintSummary])
async def my_complaints(
    status: Optional[str] = None,
    search: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """List the caller's complaints."""
    complaints = ComplaintLifecycleService(db).list_for_user(
        identity.user_id, status=status, search=search
    )
    return [to_summary(complaint) for complaint in complaints]


@router.get("/stats/dashboard", response_model=DashboardResponse)
async def dashboard_stats(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Aggregate complaint counts (admin only)."""
    return to_dashboard(ComplaintLifecycleService(db).dashboard_stats(identity))


@router.get("", response_model=list[ComplaintSummary])
async def list_complaints(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """List all complaints (admin only)."""
    complaints = ComplaintLifecycleService(db).list_all(
        identity, status=status, priority=priority, search=search
    )
    return [to_summary(complaint, include_phone=True) for complaint in complaints]


@router.get("/{complaint_id}", response_model=ComplaintDetailResponse)
async def get_complaint(
    complaint_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
):
    """Get a complaint with its status history and attachments."""
    detail = ComplaintLifecycleService(db, store=store).get(complaint_id, identity)
    return to_detail(detail, store)


@router.put("/{complaint_id}/status", response_model=MessageResponse)
async def update_complaint_status(
    complaint_id: int,
    request_data: StatusUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Change a complaint's status (admin only)."""
    ComplaintLifecycleService(db).update_status(
        complaint_id, identity, request_data.status, request_data.note
    )
    return MessageResponse(message="Complaint status updated successfully")
