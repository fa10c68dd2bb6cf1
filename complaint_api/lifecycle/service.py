"""Complaint lifecycle service.

Creation, retrieval, listing and status transitions of complaints. The two
write operations (``create`` and ``update_status``) each run as a single
transaction: the complaint row, its attachment rows and its ledger entries
are committed together or not at all.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from complaint_api.auth.tokens import Identity
from complaint_api.exceptions import (
    ComplaintNumberConflict,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from complaint_api.ledger.service import StatusLedger
from complaint_api.lifecycle import statuses
from complaint_api.lifecycle.numbering import generate_complaint_number
from complaint_api.models import Attachment, Category, Complaint, ComplaintUpdate
from complaint_api.services.base import BaseService
from complaint_api.storage.service import AttachmentStore
from complaint_api.storage.uploads import NewAttachment
from complaint_api.utils.metrics import (
    attachments_stored,
    complaint_number_conflicts,
    complaints_submitted,
    status_transitions,
)

logger = logging.getLogger(__name__)

SUBMITTED_NOTE = "Complaint submitted"


@dataclass
class ComplaintDetail:
    """A complaint with its ledger history (newest first) and attachments."""

    complaint: Complaint
    updates: list[ComplaintUpdate] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)


@dataclass
class DashboardStats:
    """Aggregate counts computed from current table contents."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    high_priority: int = 0
    by_category: list[tuple[str, int]] = field(default_factory=list)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _filter_value(value: Optional[str]) -> Optional[str]:
    """Normalize a query filter; empty and ``all`` mean no filter."""
    value = _clean(value)
    if not value or value == statuses.ALL:
        return None
    return value


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ComplaintLifecycleService(BaseService):
    """Enforces creation, read, and transition rules for complaints."""

    def __init__(
        self,
        db: Session,
        store: Optional[AttachmentStore] = None,
        number_factory: Callable[[], str] = generate_complaint_number,
    ):
        """Initialize with a session, attachment store, and number generator."""
        super().__init__(db)
        self.store = store
        self.number_factory = number_factory
        self.ledger = StatusLedger(db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        owner: Identity,
        category_id,
        subject: Optional[str],
        description: Optional[str],
        priority: Optional[str] = None,
        attachments: Iterable[NewAttachment] = (),
    ) -> Complaint:
        """Submit a complaint with its attachments and initial ledger entry.

        Raises:
            ValidationError: Missing category/subject/description, unknown
                category or priority
            ComplaintNumberConflict: Generated number already taken; retry
            PersistenceError: Any other storage failure
        """
        subject = _clean(subject)
        description = _clean(description)
        if category_id in (None, "") or not subject or not description:
            raise ValidationError("Category, subject, and description are required")
        try:
            category_id = int(category_id)
        except (TypeError, ValueError) as e:
            raise ValidationError("Category must be a numeric id") from e

        priority = _clean(priority).lower() or statuses.DEFAULT_PRIORITY
        if priority not in statuses.PRIORITIES:
            raise ValidationError(f"Priority must be one of: {', '.join(statuses.PRIORITIES)}")

        if self.db.query(Category.id).filter(Category.id == category_id).first() is None:
            raise ValidationError(f"Category {category_id} does not exist")

        attachments = list(attachments)
        if attachments and self.store is None:
            raise PersistenceError("Attachment storage is not configured")

        complaint_number = self.number_factory()
        stored_paths: list[str] = []
        try:
            complaint = Complaint(
                complaint_number=complaint_number,
                user_id=owner.user_id,
                category_id=category_id,
                subject=subject,
                description=description,
                priority=priority,
                status=statuses.PENDING,
            )
            self.db.add(complaint)
            self.db.flush()

            for attachment in attachments:
                stored_path = self.store.save(
                    attachment.file_name, attachment.data, attachment.content_type
                )
                stored_paths.append(stored_path)
                self.db.add(
                    Attachment(
                        complaint_id=complaint.id,
                        file_name=attachment.file_name,
                        file_path=stored_path,
                        file_type=attachment.content_type,
                        file_size=attachment.size,
                    )
                )

            self.ledger.append(
                complaint,
                updated_by=owner.user_id,
                old_status=None,
                new_status=statuses.PENDING,
                note=SUBMITTED_NOTE,
            )
            self.db.commit()
        except IntegrityError as e:
            self._abort_submission(stored_paths)
            if self._number_taken(complaint_number):
                complaint_number_conflicts.inc()
                logger.warning(
                    "Complaint number collision",
                    extra={"complaint_number": complaint_number},
                )
                raise ComplaintNumberConflict(complaint_number) from e
            logger.error(f"Error submitting complaint: {e}", exc_info=True)
            raise PersistenceError("Failed to submit complaint") from e
        except (SQLAlchemyError, OSError) as e:
            self._abort_submission(stored_paths)
            logger.error(f"Error submitting complaint: {e}", exc_info=True)
            raise PersistenceError("Failed to submit complaint") from e
        except Exception:
            self._abort_submission(stored_paths)
            raise

        self.db.refresh(complaint)
        complaints_submitted.labels(priority=priority).inc()
        if stored_paths:
            attachments_stored.labels(backend=self.store.backend).inc(len(stored_paths))
        logger.info(
            "Complaint submitted",
            extra={
                "complaint_id": complaint.id,
                "complaint_number": complaint.complaint_number,
                "user_id": owner.user_id,
                "attachments": len(stored_paths),
            },
        )
        return complaint

    def update_status(
        self,
        complaint_id: int,
        requester: Identity,
        new_status: Optional[str],
        note: Optional[str] = None,
    ) -> Complaint:
        """Move a complaint to ``new_status`` and record the transition.

        Any transition between known statuses is accepted, including skips
        such as ``pending -> closed``.

        Raises:
            AuthorizationError: Requester is not an admin
            ValidationError: ``new_status`` is not a known status
            NotFoundError: Complaint does not exist
            PersistenceError: Storage failure (nothing is written)
        """
        self._enforce_admin(requester)
        new_status = _clean(new_status)
        if new_status not in statuses.STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(statuses.STATUSES)}")

        try:
            complaint = (
                self.db.query(Complaint)
                .filter(Complaint.id == complaint_id)
                .with_for_update()
                .first()
            )
            if complaint is None:
                self.db.rollback()
                raise NotFoundError("Complaint not found")

            old_status = complaint.status
            now = datetime.utcnow()
            complaint.status = new_status
            complaint.updated_at = now
            if new_status in statuses.TERMINAL_STATUSES:
                complaint.resolved_at = now

            self.ledger.append(
                complaint,
                updated_by=requester.user_id,
                old_status=old_status,
                new_status=new_status,
                note=_clean(note) or f"Status changed from {old_status} to {new_status}",
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Error updating complaint: {e}",
                exc_info=True,
                extra={"complaint_id": complaint_id},
            )
            raise PersistenceError("Failed to update complaint status") from e

        status_transitions.labels(old_status=old_status, new_status=new_status).inc()
        logger.info(
            "Complaint status updated",
            extra={
                "complaint_id": complaint_id,
                "old_status": old_status,
                "new_status": new_status,
                "user_id": requester.user_id,
            },
        )
        return complaint

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, complaint_id: int, requester: Identity) -> ComplaintDetail:
        """Return a complaint with its full history and attachments."""
        complaint = (
            self._complaint_query()
            .filter(Complaint.id == complaint_id)
            .first()
        )
        if complaint is None:
            raise NotFoundError("Complaint not found")
        self._enforce_owner_or_admin(requester, complaint.user_id)

        attachments = (
            self.db.query(Attachment)
            .filter(Attachment.complaint_id == complaint.id)
            .order_by(Attachment.id)
            .all()
        )
        return ComplaintDetail(
            complaint=complaint,
            updates=self.ledger.history(complaint.id),
            attachments=attachments,
        )

    def list_for_user(
        self,
        owner_id: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Complaint]:
        """List the owner's complaints, newest first."""
        query = self._complaint_query().filter(Complaint.user_id == owner_id)
        return self._apply_filters(query, status=status, search=search).all()

    def list_all(
        self,
        requester: Identity,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Complaint]:
        """List every complaint with owner identity; admin only."""
        self._enforce_admin(requester)
        query = self._complaint_query()
        return self._apply_filters(query, status=status, priority=priority, search=search).all()

    def dashboard_stats(self, requester: Identity) -> DashboardStats:
        """Compute aggregate counts; admin only."""
        self._enforce_admin(requester)

        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        row = self.db.query(
            func.count(Complaint.id),
            count_where(Complaint.status == statuses.PENDING),
            count_where(Complaint.status == statuses.IN_PROGRESS),
            count_where(Complaint.status == statuses.RESOLVED),
            count_where(Complaint.status == statuses.CLOSED),
            count_where(Complaint.priority == statuses.HIGH),
        ).one()

        complaint_count = func.count(Complaint.id).label("count")
        by_category = (
            self.db.query(Category.name, complaint_count)
            .join(Complaint, Complaint.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(complaint_count.desc(), Category.name)
            .all()
        )

        return DashboardStats(
            total=int(row[0] or 0),
            pending=int(row[1]),
            in_progress=int(row[2]),
            resolved=int(row[3]),
            closed=int(row[4]),
            high_priority=int(row[5]),
            by_category=[(name, int(count)) for name, count in by_category],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _complaint_query(self):
        return self.db.query(Complaint).options(
            joinedload(Complaint.category),
            joinedload(Complaint.owner),
        )

    def _apply_filters(self, query, status=None, priority=None, search=None):
        status = _filter_value(status)
        if status:
            query = query.filter(Complaint.status == status)

        priority = _filter_value(priority)
        if priority:
            query = query.filter(Complaint.priority == priority)

        search = _clean(search)
        if search:
            pattern = _like_pattern(search)
            query = query.join(Category, Complaint.category_id == Category.id).filter(
                or_(
                    Complaint.complaint_number.ilike(pattern, escape="\\"),
                    Complaint.subject.ilike(pattern, escape="\\"),
                    Category.name.ilike(pattern, escape="\\"),
                )
            )

        return query.order_by(Complaint.created_at.desc(), Complaint.id.desc())

    def _abort_submission(self, stored_paths: list[str]) -> None:
        """Roll back the transaction and discard blobs written for it."""
        self.db.rollback()
        for stored_path in stored_paths:
            try:
                self.store.delete(stored_path)
            except OSError as e:
                logger.warning(f"Failed to discard attachment {stored_path}: {e}")

    def _number_taken(self, complaint_number: str) -> bool:
        try:
            return (
                self.db.query(Complaint.id)
                .filter(Complaint.complaint_number == complaint_number)
                .first()
                is not None
            )
        except SQLAlchemyError:
            self.db.rollback()
            return False
