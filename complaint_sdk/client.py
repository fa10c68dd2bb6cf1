"""Complaint Management API client."""

import mimetypes
import os
from typing import Any, BinaryIO, Iterable, Optional, Union

import requests

# A path on disk, or (file_name, file object or bytes, content type)
AttachmentInput = Union[str, os.PathLike, tuple]


class ComplaintAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class ComplaintClient:
    """Client for the Complaint Management API.

    Session state (token and signed-in user) lives on the instance, so
    several clients can act as different users side by side.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        """Initialize client."""
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self.user: Optional[dict] = None
        if token:
            self._set_token(token)

    # Auth

    def _set_token(self, token: Optional[str]) -> None:
        self.token = token
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})
        else:
            self.session.headers.pop("Authorization", None)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.get("role") == "admin")

    def register(
        self, name: str, email: str, password: str, phone: Optional[str] = None
    ) -> dict:
        """Register a new account."""
        payload = {"name": name, "email": email, "password": password}
        if phone:
            payload["phone"] = phone
        return self._request("POST", "/api/auth/register", json=payload)

    def login(self, email: str, password: str) -> dict:
        """Log in and keep the token on this client."""
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self._set_token(data["token"])
        self.user = data["user"]
        return data

    def logout(self) -> None:
        """Forget the token and user."""
        self._set_token(None)
        self.user = None

    # Categories

    def list_categories(self) -> list[dict]:
        return self._request("GET", "/api/categories")

    # Complaints

    def submit_complaint(
        self,
        category_id: int,
        subject: str,
        description: str,
        priority: str = "medium",
        attachments: Iterable[AttachmentInput] = (),
    ) -> dict:
        """Submit a complaint with optional attachments."""
        data = {
            "category_id": str(category_id),
            "subject": subject,
            "description": description,
            "priority": priority,
        }
        opened: list[BinaryIO] = []
        try:
            files = []
            for attachment in attachments:
                files.append(("attachments", self._file_part(attachment, opened)))
            return self._request("POST", "/api/complaints", data=data, files=files or None)
        finally:
            for handle in opened:
                handle.close()

    def my_complaints(self, status: Optional[str] = None, search: Optional[str] = None) -> list[dict]:
        return self._request(
            "GET", "/api/complaints/my-complaints", params=_params(status=status, search=search)
        )

    def all_complaints(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict]:
        """List all complaints (admin only)."""
        return self._request(
            "GET",
            "/api/complaints",
            params=_params(status=status, priority=priority, search=search),
        )

    def get_complaint(self, complaint_id: int) -> dict:
        return self._request("GET", f"/api/complaints/{complaint_id}")

    def update_status(self, complaint_id: int, status: str, note: Optional[str] = None) -> dict:
        """Change a complaint's status (admin only)."""
        payload = {"status": status}
        if note:
            payload["note"] = note
        return self._request("PUT", f"/api/complaints/{complaint_id}/status", json=payload)

    def dashboard_stats(self) -> dict:
        return self._request("GET", "/api/complaints/stats/dashboard")

    def attachment_url(self, attachment: dict) -> str:
        """Absolute URL for an attachment entry from ``get_complaint``."""
        url = attachment.get("url") or f"/{attachment['file_path'].lstrip('/')}"
        if url.startswith("http://") or url.startswith("https://"):
            return url
        return f"{self.base_url}{url}"

    # Internals

    def _file_part(self, attachment: AttachmentInput, opened: list) -> tuple:
        if isinstance(attachment, tuple):
            return attachment
        path = os.fspath(attachment)
        content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        handle = open(path, "rb")
        opened.append(handle)
        return (os.path.basename(path), handle, content_type)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.session.request(
            method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
        )
        if not response.ok:
            raise ComplaintAPIError(response.status_code, _error_message(response))
        if not response.content:
            return None
        return response.json()


def _params(**values) -> dict:
    return {key: value for key, value in values.items() if value}


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or "Request failed"
    if isinstance(body, dict):
        return body.get("detail") or body.get("error") or str(body)
    return str(body)
