# pos_app/routers/categories.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.core.auth import get_current_user
from pos_app.schemas.category import CategoryCreate, CategoryResponse
from pos_app.services import catalog

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return catalog.list_categories(db)


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return catalog.create_category(db, category_data)
