# schemas/sale.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List
from decimal import Decimal


class SaleItemCreate(BaseModel):
    product_id: int
    quantity_sold: int = Field(..., gt=0)
    # Optional client view of the price; the catalog price is authoritative
    sell_price: Decimal | None = Field(None, ge=0)
    unit_discount: Decimal = Field(Decimal("0.00"), ge=0)


class CustomerInfo(BaseModel):
    name: str
    phone: str
    address: str | None = None


class SaleCreate(BaseModel):
    items: List[SaleItemCreate]

    customer_name: str
    customer_phone: str
    customer_address: str | None = None

    # Client-computed totals, checked against the server's figures
    subtotal: Decimal | None = None
    discount_amount: Decimal | None = None
    total_amount: Decimal | None = None

    idempotency_token: str | None = Field(None, max_length=128)


class ProductSummary(BaseModel):
    id: int
    name: str
    brand: str | None = None

    class Config:
        from_attributes = True


class SaleItemResponse(BaseModel):
    id: int
    product_id: int
    sell_price: Decimal
    unit_discount: Decimal
    net_price: Decimal
    quantity_sold: int
    total_price: Decimal
    cost_price_at_sale: Decimal | None = None
    product: ProductSummary | None = None

    class Config:
        from_attributes = True


class SaleResponse(BaseModel):
    id: int
    customer_name: str
    customer_phone: str
    customer_address: str | None
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    idempotency_token: str | None = None
    created_at: datetime
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True


class ShareLinkResponse(BaseModel):
    sale_id: int
    url: str
