"""Pytest configuration and fixtures."""

import os
import tempfile

# Settings are cached on first import; point them at throwaway resources first
_UPLOAD_ROOT = tempfile.mkdtemp(prefix="complaint-uploads-")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_UPLOAD_ROOT, "uploads"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from complaint_api.auth.passwords import hash_password
from complaint_api.auth.tokens import Identity, issue_token
from complaint_api.db.base import Base
from complaint_api.db.seed import seed_categories
from complaint_api.db.session import get_db
from complaint_api.main import app
from complaint_api.models import Category, User
from complaint_api.storage.service import LocalAttachmentStore, get_attachment_store

# Use test database URL from environment or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")

TEST_CATEGORIES = ["Electricity", "Plumbing", "Roads"]


@pytest.fixture(scope="function")
def engine():
    """Create a fresh schema per test."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL)

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Session:
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def categories(db: Session) -> list[Category]:
    """Seed categories; ids follow list order (1=Electricity, 2=Plumbing, 3=Roads)."""
    seed_categories(db, TEST_CATEGORIES)
    return db.query(Category).order_by(Category.id).all()


@pytest.fixture
def store(tmp_path) -> LocalAttachmentStore:
    return LocalAttachmentStore(str(tmp_path / "uploads"), "/uploads")


@pytest.fixture
def client(session_factory, store):
    """Test client whose requests each get their own session on the test engine."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_attachment_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _create_user(db: Session, name: str, email: str, password: str, role: str) -> User:
    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session) -> User:
    return _create_user(db, "Alice", "alice@example.com", "alice-password", "user")


@pytest.fixture
def other_user(db: Session) -> User:
    return _create_user(db, "Bob", "bob@example.com", "bob-password", "user")


@pytest.fixture
def admin_user(db: Session) -> User:
    return _create_user(db, "Admin", "admin@example.com", "admin-password", "admin")


def identity_for(user: User) -> Identity:
    return Identity(user_id=user.id, email=user.email, role=user.role)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user.id, user.email, user.role)}"}


@pytest.fixture
def user_headers(test_user: User) -> dict:
    return auth_headers(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers(admin_user)
