"""End-to-end tests for the complaint endpoints."""

import re
from functools import partial
from unittest.mock import patch

from complaint_api.exceptions import ComplaintNumberConflict
from complaint_api.lifecycle.service import ComplaintLifecycleService

COMPLAINT_FORM = {
    "category_id": "2",
    "subject": "Leaking pipe",
    "description": "Kitchen pipe leaking",
    "priority": "high",
}


def _submit(client, headers, data=None, files=None):
    return client.post("/api/complaints", data=data or COMPLAINT_FORM, files=files, headers=headers)


def test_example_scenario(client, categories, admin_headers):
    """Test register, submit, admin triage and resolution end to end."""
    response = client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@example.com", "password": "alice-pw"},
    )
    assert response.status_code == 201

    response = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "alice-pw"}
    )
    alice_headers = {"Authorization": f"Bearer {response.json()['token']}"}

    response = _submit(client, alice_headers)
    assert response.status_code == 201
    created = response.json()
    assert re.fullmatch(r"CMP\d+", created["complaintNumber"])
    complaint_id = created["complaintId"]

    response = client.get("/api/complaints", params={"priority": "high"}, headers=admin_headers)
    assert response.status_code == 200
    assert complaint_id in [c["complaint_id"] for c in response.json()]

    response = client.put(
        f"/api/complaints/{complaint_id}/status",
        json={"status": "resolved"},
        headers=admin_headers,
    )
    assert response.status_code == 200

    detail = client.get(f"/api/complaints/{complaint_id}", headers=alice_headers).json()
    assert detail["status"] == "resolved"
    assert detail["resolved_at"] is not None
    assert len(detail["updates"]) == 2
    assert detail["updates"][0]["old_status"] == "pending"
    assert detail["updates"][0]["new_status"] == "resolved"
    assert detail["updates"][1]["old_status"] is None


def test_submit_requires_fields(client, categories, user_headers):
    """Test missing subject is a 400."""
    response = _submit(client, user_headers, data={"category_id": "2", "description": "x"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Category, subject, and description are required"


def test_submit_requires_token(client, categories):
    """Test anonymous submission is a 401."""
    assert _submit(client, {}).status_code == 401


def test_submit_with_attachments(client, categories, user_headers, store):
    """Test attachments are stored and listed on the detail view."""
    files = [
        ("attachments", ("leak.png", b"\x89PNG fake", "image/png")),
        ("attachments", ("report.pdf", b"%PDF-1.4 fake", "application/pdf")),
    ]
    response = _submit(client, user_headers, files=files)
    assert response.status_code == 201

    detail = client.get(
        f"/api/complaints/{response.json()['complaintId']}", headers=user_headers
    ).json()
    names = [a["file_name"] for a in detail["attachments"]]
    assert names == ["leak.png", "report.pdf"]
    first = detail["attachments"][0]
    assert first["file_type"] == "image/png"
    assert first["file_size"] == len(b"\x89PNG fake")
    assert first["url"].startswith("/uploads/")
    assert first["url"].endswith("-leak.png")
    assert len(list(store.root.iterdir())) == 2


def test_same_named_attachments_keep_their_own_bytes(client, categories, user_headers, store):
    """Test two same-named uploads in the same millisecond are stored separately."""
    files = [
        ("attachments", ("photo.jpg", b"FIRST", "image/jpeg")),
        ("attachments", ("photo.jpg", b"SECOND", "image/jpeg")),
    ]
    with patch("complaint_api.storage.service.time.time", return_value=1700000000.0):
        response = _submit(client, user_headers, files=files)
    assert response.status_code == 201

    detail = client.get(
        f"/api/complaints/{response.json()['complaintId']}", headers=user_headers
    ).json()
    paths = [a["file_path"] for a in detail["attachments"]]
    assert len(set(paths)) == 2
    contents = [(store.root / path.split("/")[-1]).read_bytes() for path in paths]
    assert contents == [b"FIRST", b"SECOND"]


def test_submit_rejects_disallowed_type(client, categories, user_headers):
    """Test non image/PDF/Word uploads are rejected."""
    files = [("attachments", ("run.exe", b"MZ", "application/octet-stream"))]
    response = _submit(client, user_headers, files=files)
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]


def test_submit_rejects_too_many_files(client, categories, user_headers):
    """Test more than five attachments are rejected."""
    files = [
        ("attachments", (f"p{i}.png", b"\x89PNG", "image/png")) for i in range(6)
    ]
    response = _submit(client, user_headers, files=files)
    assert response.status_code == 400


def test_submit_rejects_oversized_file(client, categories, user_headers):
    """Test files over 5MB are rejected."""
    files = [("attachments", ("big.pdf", b"0" * (5 * 1024 * 1024 + 1), "application/pdf"))]
    response = _submit(client, user_headers, files=files)
    assert response.status_code == 400


def test_submit_retries_on_number_collision(client, categories, user_headers):
    """Test a number collision is retried with a fresh number."""
    numbers = iter(["CMP1", "CMP1", "CMP2"])
    service_cls = partial(ComplaintLifecycleService, number_factory=lambda: next(numbers))
    with patch("complaint_api.routes.complaints.ComplaintLifecycleService", service_cls):
        first = _submit(client, user_headers)
        second = _submit(client, user_headers)

    assert first.status_code == 201
    assert first.json()["complaintNumber"] == "CMP1"
    assert second.status_code == 201
    assert second.json()["complaintNumber"] == "CMP2"


def test_submit_gives_up_after_repeated_collisions(client, categories, user_headers):
    """Test persistent collisions surface as a generic 500."""
    with patch(
        "complaint_api.lifecycle.service.ComplaintLifecycleService.create",
        side_effect=ComplaintNumberConflict("CMP1"),
    ) as mock_create:
        response = _submit(client, user_headers)

    assert response.status_code == 500
    assert mock_create.call_count == 3
    assert "CMP1" not in response.json()["detail"]


def test_my_complaints_filters(client, categories, user_headers, other_headers):
    """Test callers only see their own complaints and filters apply."""
    _submit(client, user_headers)
    _submit(client, user_headers, data={**COMPLAINT_FORM, "category_id": "1", "subject": "Power cut"})
    _submit(client, other_headers)

    response = client.get("/api/complaints/my-complaints", headers=user_headers)
    assert response.status_code == 200
    subjects = [c["subject"] for c in response.json()]
    assert subjects == ["Power cut", "Leaking pipe"]

    response = client.get(
        "/api/complaints/my-complaints", params={"search": "electric"}, headers=user_headers
    )
    assert [c["subject"] for c in response.json()] == ["Power cut"]

    response = client.get(
        "/api/complaints/my-complaints", params={"status": "resolved"}, headers=user_headers
    )
    assert response.json() == []


def test_list_all_requires_admin(client, categories, user_headers):
    """Test the all-complaints listing is admin only."""
    response = client.get("/api/complaints", headers=user_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"


def test_list_all_includes_owner_identity(client, categories, user_headers, admin_headers):
    """Test admin listings are joined with owner identity."""
    _submit(client, user_headers)
    complaint = client.get("/api/complaints", headers=admin_headers).json()[0]
    assert complaint["user_name"] == "Alice"
    assert complaint["user_email"] == "alice@example.com"
    assert complaint["category_name"] == "Plumbing"


def test_detail_authorization(client, categories, user_headers, other_headers, admin_headers):
    """Test owner and admin can read a complaint, strangers cannot."""
    complaint_id = _submit(client, user_headers).json()["complaintId"]
    url = f"/api/complaints/{complaint_id}"

    assert client.get(url, headers=user_headers).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 200
    response = client.get(url, headers=other_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied"


def test_detail_missing_is_404(client, user_headers):
    """Test a missing complaint is a 404."""
    response = client.get("/api/complaints/999", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Complaint not found"


def test_detail_is_stable_without_writes(client, categories, user_headers):
    """Test two reads without writes return identical history and attachments."""
    files = [("attachments", ("leak.jpg", b"\xff\xd8 fake", "image/jpeg"))]
    complaint_id = _submit(client, user_headers, files=files).json()["complaintId"]
    url = f"/api/complaints/{complaint_id}"

    first = client.get(url, headers=user_headers).json()
    second = client.get(url, headers=user_headers).json()
    assert first["updates"] == second["updates"]
    assert first["attachments"] == second["attachments"]


def test_status_update_requires_admin(client, categories, user_headers):
    """Test owners cannot update status."""
    complaint_id = _submit(client, user_headers).json()["complaintId"]
    response = client.put(
        f"/api/complaints/{complaint_id}/status",
        json={"status": "resolved"},
        headers=user_headers,
    )
    assert response.status_code == 403


def test_status_update_missing_complaint(client, admin_headers):
    """Test updating a missing complaint is a 404."""
    response = client.put(
        "/api/complaints/999/status", json={"status": "resolved"}, headers=admin_headers
    )
    assert response.status_code == 404


def test_status_update_rejects_unknown_status(client, categories, user_headers, admin_headers):
    """Test arbitrary status strings are rejected."""
    complaint_id = _submit(client, user_headers).json()["complaintId"]
    response = client.put(
        f"/api/complaints/{complaint_id}/status",
        json={"status": "teleported"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_status_update_with_note(client, categories, user_headers, admin_headers):
    """Test the admin's note is recorded and attributed."""
    complaint_id = _submit(client, user_headers).json()["complaintId"]
    client.put(
        f"/api/complaints/{complaint_id}/status",
        json={"status": "in-progress", "note": "Plumber dispatched"},
        headers=admin_headers,
    )
    latest = client.get(f"/api/complaints/{complaint_id}", headers=user_headers).json()["updates"][0]
    assert latest["note"] == "Plumber dispatched"
    assert latest["updated_by_name"] == "Admin"


def test_dashboard(client, categories, user_headers, admin_headers):
    """Test dashboard counts and admin gating."""
    _submit(client, user_headers)
    _submit(client, user_headers, data={**COMPLAINT_FORM, "priority": "low"})

    assert client.get("/api/complaints/stats/dashboard", headers=user_headers).status_code == 403

    response = client.get("/api/complaints/stats/dashboard", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == {
        "total": 2,
        "pending": 2,
        "in_progress": 0,
        "resolved": 0,
        "closed": 0,
        "high_priority": 1,
    }
    assert data["by_category"] == [{"category_name": "Plumbing", "count": 2}]
