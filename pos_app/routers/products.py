# pos_app/routers/products.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.core.auth import get_current_user
from pos_app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    StockResponse,
)
from pos_app.services import catalog
from pos_app.services.sale_commit import get_stock

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return catalog.create_product(db, product_data)


@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return catalog.list_products(db)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return catalog.get_product(db, product_id)


@router.get("/{product_id}/stock", response_model=StockResponse)
def product_stock(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return {"product_id": product_id, "quantity": get_stock(db, product_id)}


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return catalog.update_product(db, product_id, product_data)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    catalog.delete_product(db, product_id)
    return None
