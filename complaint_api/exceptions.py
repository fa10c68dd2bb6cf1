"""Domain exceptions and their HTTP mapping."""

from fastapi import status


class ComplaintSystemError(Exception):
    """Base exception for the complaint system."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ComplaintSystemError):
    """Raised when input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(ComplaintSystemError):
    """Raised when a bearer credential is missing, invalid, or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"

    def __init__(self, message: str = None, status_code: int = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code

    @classmethod
    def missing_token(cls) -> "AuthenticationError":
        return cls("Access token required", status.HTTP_401_UNAUTHORIZED)

    @classmethod
    def invalid_token(cls) -> "AuthenticationError":
        return cls("Invalid or expired token", status.HTTP_403_FORBIDDEN)

    @classmethod
    def bad_credentials(cls) -> "AuthenticationError":
        return cls("Invalid email or password", status.HTTP_401_UNAUTHORIZED)


class AuthorizationError(ComplaintSystemError):
    """Raised when the requester's role or ownership does not permit the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(ComplaintSystemError):
    """Raised when a requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PersistenceError(ComplaintSystemError):
    """Raised when storage fails; the client only sees the generic message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage failure"


class ComplaintNumberConflict(PersistenceError):
    """Raised when a generated complaint number already exists."""

    def __init__(self, complaint_number: str):
        self.complaint_number = complaint_number
        super().__init__("Failed to submit complaint")
