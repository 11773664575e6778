from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime

from pos_app.schemas.category import CategoryResponse
from pos_app.schemas.supplier import SupplierResponse


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    brand: str | None = None

    cost_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        decimal_places=2,
        description="Cost price must be below 100 million"
    )

    sell_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        decimal_places=2,
        description="Selling price must be below 100 million"
    )

    quantity: int = Field(0, ge=0)

    category_id: int | None = None
    supplier_id: int | None = None


# Full-field replace
class ProductUpdate(ProductCreate):
    pass


class ProductResponse(BaseModel):
    id: int
    name: str
    brand: str | None
    cost_price: Decimal
    sell_price: Decimal
    quantity: int
    category_id: int | None
    supplier_id: int | None
    category: CategoryResponse | None = None
    supplier: SupplierResponse | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class StockResponse(BaseModel):
    product_id: int
    quantity: int
