"""Tests for CLI commands."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from complaint_api.cli import cli
from complaint_api.db.seed import DEFAULT_CATEGORIES
from complaint_api.lifecycle.service import ComplaintLifecycleService
from complaint_api.models import Category, Complaint, User
from conftest import identity_for


@pytest.fixture
def runner(session_factory):
    with patch("complaint_api.cli.SessionLocal", session_factory):
        yield CliRunner()


def test_seed_is_idempotent(runner, session_factory):
    result = runner.invoke(cli, ["seed"])
    assert result.exit_code == 0
    assert f"{len(DEFAULT_CATEGORIES)} new categories" in result.output

    result = runner.invoke(cli, ["seed"])
    assert result.exit_code == 0
    assert "0 new categories" in result.output

    with session_factory() as session:
        assert session.query(Category).count() == len(DEFAULT_CATEGORIES)


def test_create_admin(runner, session_factory):
    result = runner.invoke(
        cli,
        ["create-admin", "--name", "Root", "--email", "Root@Example.com"],
        input="s3cret\ns3cret\n",
    )
    assert result.exit_code == 0, result.output

    with session_factory() as session:
        user = session.query(User).filter(User.email == "root@example.com").one()
        assert user.role == "admin"


def test_create_admin_duplicate_email(runner, test_user):
    result = runner.invoke(
        cli,
        ["create-admin", "--name", "Alice", "--email", test_user.email, "--password", "pw"],
    )
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_set_role(runner, session_factory, test_user):
    result = runner.invoke(cli, ["set-role", "--email", test_user.email, "--role", "admin"])
    assert result.exit_code == 0

    with session_factory() as session:
        assert session.get(User, test_user.id).role == "admin"


def test_set_role_unknown_user(runner):
    result = runner.invoke(cli, ["set-role", "--email", "nobody@example.com", "--role", "admin"])
    assert result.exit_code == 1


def test_verify_ledger(runner, db, categories, test_user, admin_user):
    service = ComplaintLifecycleService(db)
    complaint = service.create(
        identity_for(test_user), category_id=1, subject="Power cut", description="Dark"
    )
    service.update_status(complaint.id, identity_for(admin_user), "in-progress")

    result = runner.invoke(cli, ["verify-ledger"])
    assert result.exit_code == 0
    assert "Checked 1 complaints, 0 inconsistent." in result.output

    db.query(Complaint).filter(Complaint.id == complaint.id).update({"status": "closed"})
    db.commit()

    result = runner.invoke(cli, ["verify-ledger"])
    assert result.exit_code == 1
    assert f"Complaint {complaint.id}" in result.output


def test_serve_uses_configured_address(runner):
    with patch("complaint_api.cli.uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--port", "8080"])

    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "complaint_api.main:app", host="0.0.0.0", port=8080, reload=False
    )
