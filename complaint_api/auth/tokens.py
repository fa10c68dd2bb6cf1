"""Bearer token issuance and verification."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from complaint_api.exceptions import AuthenticationError
from complaint_api.lifecycle.statuses import ROLE_ADMIN
from complaint_api.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, scoped to a single request."""

    user_id: int
    email: str
    role: str
    expires_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def issue_token(user_id: int, email: str, role: str, now: Optional[datetime] = None) -> str:
    """Mint a signed token embedding identity and role."""
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "user_id": user_id,
        "email": email,
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(hours=settings.jwt_expiration_hours)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Identity:
    """Verify a token and return the identity it encodes.

    Raises:
        AuthenticationError: If the token is missing, malformed, forged, or expired
    """
    if not token:
        raise AuthenticationError.missing_token()

    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info(f"Token rejected: {e}")
        raise AuthenticationError.invalid_token() from e

    try:
        return Identity(
            user_id=int(claims["user_id"]),
            email=claims["email"],
            role=claims["role"],
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Token missing identity claims: {e}")
        raise AuthenticationError.invalid_token() from e
