"""Seed data for development and testing."""

import logging

from sqlalchemy.orm import Session

from complaint_api.models import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Billing",
    "Electricity",
    "Infrastructure",
    "Noise",
    "Roads",
    "Sanitation",
    "Service Quality",
    "Water Supply",
    "Other",
]


def seed_categories(db: Session, names: list[str] = None) -> list[Category]:
    """Insert any missing categories; existing names are left untouched."""
    created = []
    for name in names or DEFAULT_CATEGORIES:
        if db.query(Category.id).filter(Category.name == name).first():
            continue
        category = Category(name=name)
        db.add(category)
        created.append(category)
    db.commit()
    for category in created:
        logger.info(f"Created category: {category.name} (ID: {category.id})")
    return created


def seed_all(db: Session) -> dict:
    """Seed all reference data."""
    return {"categories": seed_categories(db)}
