"""Base service class with requester guardrails."""

from typing import Optional

from sqlalchemy.orm import Session

from complaint_api.auth.tokens import Identity
from complaint_api.exceptions import AuthorizationError


class BaseService:
    """Base service holding the session and role checks."""

    def __init__(self, db: Session):
        """Initialize service with a request-scoped session."""
        self.db = db

    def _enforce_admin(self, requester: Optional[Identity]) -> Identity:
        """Enforce requester is an admin and return it."""
        if requester is None or not requester.is_admin:
            raise AuthorizationError("Admin access required")
        return requester

    def _enforce_owner_or_admin(self, requester: Identity, owner_id: int) -> None:
        """Enforce requester owns the record or is an admin."""
        if not requester.is_admin and requester.user_id != owner_id:
            raise AuthorizationError("Access denied")
