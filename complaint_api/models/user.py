"""User and category models."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from complaint_api.db.base import Base


class User(Base):
    """Registered account; role is admin-managed."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(50), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user", nullable=False)  # user, admin
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    complaints = relationship("Complaint", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Category(Base):
    """Complaint category reference data."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)

    # Relationships
    complaints = relationship("Complaint", back_populates="category")
