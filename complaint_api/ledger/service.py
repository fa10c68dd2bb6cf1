"""Complaint status ledger."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from complaint_api.models import Complaint, ComplaintUpdate

logger = logging.getLogger(__name__)


class StatusLedger:
    """Append-only history of complaint status transitions.

    The ledger is authoritative: a complaint row's ``status`` must always
    equal the ``new_status`` of its most recent entry.
    """

    def __init__(self, db: Session):
        """Initialize ledger service."""
        self.db = db

    def append(
        self,
        complaint: Complaint,
        updated_by: int,
        old_status: Optional[str],
        new_status: str,
        note: Optional[str] = None,
    ) -> ComplaintUpdate:
        """Append an entry inside the caller's transaction."""
        entry = ComplaintUpdate(
            complaint_id=complaint.id,
            updated_by=updated_by,
            old_status=old_status,
            new_status=new_status,
            note=note,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def history(self, complaint_id: int) -> list[ComplaintUpdate]:
        """Return all entries for a complaint, newest first."""
        return (
            self.db.query(ComplaintUpdate)
            .filter(ComplaintUpdate.complaint_id == complaint_id)
            .order_by(ComplaintUpdate.created_at.desc(), ComplaintUpdate.id.desc())
            .all()
        )

    def verify(self, complaint_id: int) -> tuple[bool, Optional[str]]:
        """Check that the ledger is continuous and matches the complaint row.

        Returns:
            ``(is_valid, error)`` where ``error`` describes the first violation
        """
        complaint = self.db.query(Complaint).filter(Complaint.id == complaint_id).first()
        if complaint is None:
            return False, f"Complaint {complaint_id} not found"

        entries = (
            self.db.query(ComplaintUpdate)
            .filter(ComplaintUpdate.complaint_id == complaint_id)
            .order_by(ComplaintUpdate.created_at.asc(), ComplaintUpdate.id.asc())
            .all()
        )
        if not entries:
            return False, "Ledger is empty"

        first = entries[0]
        if first.old_status is not None:
            return False, f"First entry {first.id} has old_status {first.old_status!r}"

        previous_status = None
        for entry in entries:
            if entry.old_status != previous_status:
                return False, (
                    f"Entry {entry.id} starts from {entry.old_status!r}, "
                    f"expected {previous_status!r}"
                )
            previous_status = entry.new_status

        if complaint.status != previous_status:
            return False, (
                f"Complaint status {complaint.status!r} does not match "
                f"latest ledger entry {previous_status!r}"
            )
        return True, None
