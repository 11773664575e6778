# =========================================================
# SALES ANALYTICS
#
# Pure fold over sales history (sales with nested items and
# joined products). Never raises on malformed rows: missing
# joins and non-numeric values count as zero so the dashboard
# always renders.
# =========================================================

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

BEST_SELLER_LIMIT = 5
UNKNOWN_PRODUCT = "Unknown"


@dataclass
class BestSeller:
    product_id: int | None
    name: str
    total_sold: int


@dataclass
class DailySales:
    date: date
    total: Decimal


@dataclass
class SalesSummary:
    total_sales: Decimal = Decimal("0.00")
    total_cost: Decimal = Decimal("0.00")
    net_profit: Decimal = Decimal("0.00")
    profit_margin: Decimal = Decimal("0.00")
    total_orders: int = 0
    best_selling_products: list[BestSeller] = field(default_factory=list)
    sales_by_date: list[DailySales] = field(default_factory=list)


def _field(record, name):
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _decimal(value) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def _int(value) -> int:
    try:
        return int(_decimal(value))
    except (InvalidOperation, ValueError):
        return 0


def _sale_date(sale) -> date | None:
    value = _field(sale, "created_at")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def item_cost(item) -> Decimal:
    """Unit cost for an item: the snapshot taken at sale time, else current catalog cost."""
    snapshot = _field(item, "cost_price_at_sale")
    if snapshot is not None:
        return _decimal(snapshot)
    return _decimal(_field(_field(item, "product"), "cost_price"))


def total_sales(sales) -> Decimal:
    return sum((_decimal(_field(sale, "total_amount")) for sale in sales), Decimal("0"))


def total_cost(sales) -> Decimal:
    cost = Decimal("0")
    for sale in sales:
        for item in _field(sale, "items") or []:
            cost += item_cost(item) * _int(_field(item, "quantity_sold"))
    return cost


def best_selling_products(sales, limit: int = BEST_SELLER_LIMIT) -> list[BestSeller]:
    # dicts keep insertion order, and sorted() is stable, so ties stay first-seen
    totals: dict = {}
    for sale in sales:
        for item in _field(sale, "items") or []:
            product = _field(item, "product")
            product_id = _field(product, "id") if product is not None else None
            name = _field(product, "name") or UNKNOWN_PRODUCT

            # Rows without a product id fall back to grouping by name
            key = product_id if product_id is not None else name
            entry = totals.setdefault(key, BestSeller(product_id, name, 0))
            entry.total_sold += _int(_field(item, "quantity_sold"))

    ranked = sorted(totals.values(), key=lambda entry: entry.total_sold, reverse=True)
    return ranked[:limit]


def sales_by_date(sales) -> list[DailySales]:
    buckets: dict[date, Decimal] = {}
    for sale in sales:
        day = _sale_date(sale)
        if day is None:
            continue
        buckets[day] = buckets.get(day, Decimal("0")) + _decimal(_field(sale, "total_amount"))

    return [DailySales(day, buckets[day]) for day in sorted(buckets)]


def summarize_sales(sales) -> SalesSummary:
    sales = list(sales or [])

    revenue = total_sales(sales)
    cost = total_cost(sales)
    profit = revenue - cost

    if revenue == 0:
        margin = Decimal("0.00")
    else:
        margin = ((profit / revenue) * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    return SalesSummary(
        total_sales=revenue,
        total_cost=cost,
        net_profit=profit,
        profit_margin=margin,
        total_orders=len(sales),
        best_selling_products=best_selling_products(sales),
        sales_by_date=sales_by_date(sales),
    )
