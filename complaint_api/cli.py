"""CLI commands for the Complaint Management API."""

import click
import uvicorn

from complaint_api.db.seed import seed_all
from complaint_api.db.session import SessionLocal
from complaint_api.exceptions import ComplaintSystemError
from complaint_api.ledger.service import StatusLedger
from complaint_api.lifecycle.statuses import ROLE_ADMIN, ROLES
from complaint_api.models import Complaint, User
from complaint_api.services.accounts import AccountService, normalize_email
from complaint_api.settings import get_settings


@click.group()
def cli():
    """Complaint Management API CLI."""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to API_HOST)")
@click.option("--port", type=int, default=None, help="Port (defaults to API_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host, port, reload):
    """Run the API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    click.echo(f"Serving Complaint Management API on {host}:{port}")
    uvicorn.run("complaint_api.main:app", host=host, port=port, reload=reload)


@cli.command()
def seed():
    """Seed reference data (categories)."""
    click.echo("Seeding initial data...")
    db = SessionLocal()
    try:
        result = seed_all(db)
        click.echo(f"✓ Seed data created ({len(result['categories'])} new categories).")
    except Exception as e:
        click.echo(f"✗ Error seeding data: {e}", err=True)
        db.rollback()
        raise SystemExit(1)
    finally:
        db.close()


@cli.command("create-admin")
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--phone", default=None)
def create_admin(name, email, password, phone):
    """Create an administrator account."""
    db = SessionLocal()
    try:
        user = AccountService(db).register(
            name=name, email=email, password=password, phone=phone, role=ROLE_ADMIN
        )
        click.echo(f"✓ Created admin {user.email} (ID: {user.id})")
    except ComplaintSystemError as e:
        click.echo(f"✗ {e.message}", err=True)
        raise SystemExit(1)
    finally:
        db.close()


@cli.command("set-role")
@click.option("--email", required=True)
@click.option("--role", type=click.Choice(ROLES), required=True)
def set_role(email, role):
    """Change an existing user's role."""
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if user is None:
            click.echo(f"✗ No user with email {email}", err=True)
            raise SystemExit(1)
        AccountService(db).set_role(user.id, role)
        click.echo(f"✓ {user.email} is now {role}")
    finally:
        db.close()


@cli.command("verify-ledger")
def verify_ledger():
    """Check every complaint's status against its ledger."""
    db = SessionLocal()
    try:
        ledger = StatusLedger(db)
        complaint_ids = [row.id for row in db.query(Complaint.id).order_by(Complaint.id)]
        failures = 0
        for complaint_id in complaint_ids:
            is_valid, error = ledger.verify(complaint_id)
            if not is_valid:
                failures += 1
                click.echo(f"✗ Complaint {complaint_id}: {error}", err=True)
        click.echo(f"Checked {len(complaint_ids)} complaints, {failures} inconsistent.")
        if failures:
            raise SystemExit(1)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
