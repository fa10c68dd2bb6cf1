"""FastAPI dependencies gating protected endpoints."""

import logging
from typing import Optional

from fastapi import Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from complaint_api.auth.tokens import Identity, decode_token
from complaint_api.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Identity:
    """Decode the bearer token into a request-scoped identity."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError.missing_token()

    identity = decode_token(credentials.credentials)

    request.state.user_id = identity.user_id
    logger.info(
        "Authenticated request",
        extra={
            "user_id": identity.user_id,
            "correlation_id": getattr(request.state, "correlation_id", None),
            "path": request.url.path,
        },
    )
    return identity

