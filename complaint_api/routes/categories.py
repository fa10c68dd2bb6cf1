"""Category catalog endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from complaint_api.db.session import get_db
from complaint_api.services.categories import CategoryService

router = APIRouter(prefix="/api", tags=["categories"])


class CategoryResponse(BaseModel):
    category_id: int
    category_name: str


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: Session = Depends(get_db)):
    """List complaint categories ordered by name."""
    return [
        CategoryResponse(category_id=category.id, category_name=category.name)
        for category in CategoryService(db).list_categories()
    ]
