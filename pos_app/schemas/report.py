# schemas/report.py

from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List


class BestSellerResponse(BaseModel):
    product_id: int | None
    name: str
    total_sold: int


class DailySalesResponse(BaseModel):
    date: date
    total: Decimal


class DashboardResponse(BaseModel):
    total_sales: Decimal
    total_cost: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    total_orders: int
    best_selling_products: List[BestSellerResponse]
    sales_by_date: List[DailySalesResponse]
