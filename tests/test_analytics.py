from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from pos_app.services.analytics import (
    best_selling_products,
    sales_by_date,
    summarize_sales,
    total_cost,
)


def _product(product_id, name, cost_price):
    return SimpleNamespace(id=product_id, name=name, cost_price=cost_price)


def _item(product, quantity_sold, cost_price_at_sale=None):
    return SimpleNamespace(
        product=product,
        product_id=product.id if product else None,
        quantity_sold=quantity_sold,
        cost_price_at_sale=cost_price_at_sale,
    )


def _sale(total_amount, created_at, items):
    return SimpleNamespace(total_amount=total_amount, created_at=created_at, items=items)


LIPSTICK = _product(1, "Lipstick", Decimal("40.00"))
COMB = _product(2, "Comb", Decimal("5.00"))


def _history():
    return [
        _sale(Decimal("500.00"), datetime(2026, 3, 2, 10, 30), [_item(LIPSTICK, 5), _item(COMB, 3)]),
        _sale(Decimal("700.00"), datetime(2026, 3, 1, 18, 0), [_item(LIPSTICK, 7)]),
        _sale(Decimal("30.00"), datetime(2026, 3, 2, 19, 45), [_item(COMB, 2)]),
    ]


def test_summary_totals():
    summary = summarize_sales(_history())

    assert summary.total_sales == Decimal("1230.00")
    # 12 lipsticks at 40 + 5 combs at 5
    assert summary.total_cost == Decimal("505.00")
    assert summary.net_profit == Decimal("725.00")
    assert summary.profit_margin == Decimal("58.94")
    assert summary.total_orders == 3


def test_best_sellers_ranked_by_quantity():
    ranked = best_selling_products(_history())

    assert [(entry.name, entry.total_sold) for entry in ranked] == [("Lipstick", 12), ("Comb", 5)]


def test_best_sellers_limited_to_five_with_stable_ties():
    products = [_product(i, f"P{i}", Decimal("1")) for i in range(1, 8)]
    sale = _sale(Decimal("0"), datetime(2026, 1, 1), [_item(p, 2) for p in products])

    ranked = best_selling_products([sale])

    assert [entry.name for entry in ranked] == ["P1", "P2", "P3", "P4", "P5"]


def test_sales_by_date_buckets_ascending_and_skips_bad_dates():
    history = _history() + [
        _sale(Decimal("99.00"), None, []),
        _sale(Decimal("99.00"), "not-a-date", []),
        _sale(Decimal("10.00"), "2026-02-28T23:00:00Z", []),
    ]

    series = sales_by_date(history)

    assert [(row.date, row.total) for row in series] == [
        (date(2026, 2, 28), Decimal("10.00")),
        (date(2026, 3, 1), Decimal("700.00")),
        (date(2026, 3, 2), Decimal("530.00")),
    ]


def test_cost_prefers_snapshot_over_current_catalog_cost():
    sale = _sale(Decimal("100.00"), datetime(2026, 1, 1), [_item(LIPSTICK, 2, cost_price_at_sale=Decimal("30.00"))])

    assert total_cost([sale]) == Decimal("60.00")


def test_malformed_rows_count_as_zero():
    orphan = _item(None, 4)
    garbage = SimpleNamespace(product=COMB, quantity_sold="lots", cost_price_at_sale=None)
    sales = [
        _sale("abc", datetime(2026, 1, 1), [orphan, garbage]),
        {"total_amount": "25.50", "created_at": "2026-01-01", "items": None},
    ]

    summary = summarize_sales(sales)

    assert summary.total_sales == Decimal("25.50")
    assert summary.total_cost == Decimal("0")
    assert summary.best_selling_products[0].name == "Unknown"
    assert summary.best_selling_products[0].total_sold == 4


def test_best_sellers_without_product_ids_group_by_name():
    sales = [
        {
            "total_amount": "1275.00",
            "created_at": "2026-03-01T10:00:00",
            "items": [
                {"product": {"name": "Lipstick"}, "quantity_sold": 12},
                {"product": {"name": "Comb"}, "quantity_sold": 5},
                {"product": None, "quantity_sold": 1},
            ],
        },
    ]

    ranked = best_selling_products(sales)

    assert [(entry.name, entry.total_sold) for entry in ranked] == [
        ("Lipstick", 12),
        ("Comb", 5),
        ("Unknown", 1),
    ]


def test_empty_history():
    summary = summarize_sales([])

    assert summary.total_sales == 0
    assert summary.profit_margin == Decimal("0.00")
    assert summary.best_selling_products == []
    assert summary.sales_by_date == []
