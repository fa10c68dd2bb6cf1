"""Complaint Management Python SDK."""

__version__ = "0.1.0"

from complaint_sdk.client import ComplaintAPIError, ComplaintClient

__all__ = ["ComplaintClient", "ComplaintAPIError"]
