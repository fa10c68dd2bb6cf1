"""Credential store: registration and login."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from complaint_api.auth.passwords import hash_password, verify_password
from complaint_api.auth.tokens import issue_token
from complaint_api.exceptions import AuthenticationError, PersistenceError, ValidationError
from complaint_api.lifecycle.statuses import ROLE_USER, ROLES
from complaint_api.models import User
from complaint_api.services.base import BaseService
from complaint_api.utils.metrics import login_attempts

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AccountService(BaseService):
    """Registers users and exchanges credentials for bearer tokens."""

    def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        phone: Optional[str] = None,
        role: str = ROLE_USER,
    ) -> User:
        """Create a user with a bcrypt-hashed password."""
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")

        if self.db.query(User.id).filter(User.email == email).first():
            raise ValidationError("User already exists with this email")

        user = User(
            name=name,
            email=email,
            phone=(phone or "").strip() or None,
            password_hash=hash_password(password),
            role=role,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise ValidationError("User already exists with this email") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Registration failed: {e}", exc_info=True)
            raise PersistenceError("Server error during registration") from e

        self.db.refresh(user)
        logger.info("User registered", extra={"user_id": user.id, "role": user.role})
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> tuple[str, User]:
        """Verify credentials and mint a token.

        Returns:
            ``(token, user)``
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.db.query(User).filter(User.email == email).first()
        if user is None or not verify_password(password, user.password_hash):
            login_attempts.labels(outcome="rejected").inc()
            raise AuthenticationError.bad_credentials()

        login_attempts.labels(outcome="accepted").inc()
        token = issue_token(user.id, user.email, user.role)
        logger.info("User logged in", extra={"user_id": user.id})
        return token, user

    def set_role(self, user_id: int, role: str) -> User:
        """Change a user's role; reachable from the CLI only."""
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise ValidationError(f"User {user_id} not found")
        user.role = role
        self.db.commit()
        return user
