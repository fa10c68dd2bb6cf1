"""Category catalog."""

from complaint_api.models import Category
from complaint_api.services.base import BaseService


class CategoryService(BaseService):
    """Read-only access to complaint categories."""

    def list_categories(self) -> list[Category]:
        return self.db.query(Category).order_by(Category.name).all()
