from decimal import Decimal
from io import BytesIO
from urllib.parse import unquote

from openpyxl import load_workbook
from sqlalchemy.exc import SQLAlchemyError

from pos_app.routers import reports


def _checkout(client, items, headers=None, **extra):
    payload = {
        "items": items,
        "customer_name": "Asha",
        "customer_phone": "98765 43210",
        "customer_address": "12 Market Road",
    }
    payload.update(extra)
    return client.post("/sales", json=payload, headers=headers or {})


def test_checkout_creates_sale(client, make_product):
    product = make_product(sell_price="100.00", quantity=5)

    response = _checkout(
        client,
        [{"product_id": product.id, "quantity_sold": 3, "sell_price": "100.00", "unit_discount": "20.00"}],
        subtotal="300.00",
        discount_amount="60.00",
        total_amount="240.00",
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert Decimal(body["total_amount"]) == Decimal("240.00")
    assert Decimal(body["items"][0]["net_price"]) == Decimal("80.00")
    assert Decimal(body["items"][0]["total_price"]) == Decimal("240.00")
    assert body["items"][0]["product"]["name"] == "Lipstick"

    assert client.get(f"/products/{product.id}/stock").json()["quantity"] == 2


def test_insufficient_stock_response(client, make_product):
    product = make_product(name="Comb", quantity=2)

    response = _checkout(client, [{"product_id": product.id, "quantity_sold": 3}])

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "insufficient_stock"
    assert body["product_id"] == product.id
    assert body["product_name"] == "Comb"
    assert body["requested"] == 3
    assert body["available"] == 2
    assert body["stage"] == "reserving"

    assert client.get("/sales").json() == []


def test_inconsistent_totals_response(client, make_product):
    product = make_product(sell_price="100.00", quantity=5)

    response = _checkout(
        client,
        [{"product_id": product.id, "quantity_sold": 1}],
        total_amount="80.00",
    )

    assert response.status_code == 400
    assert response.json()["error"] == "inconsistent_totals"
    assert response.json()["expected"] == "100.00"


def test_idempotency_key_header(client, make_product):
    product = make_product(quantity=5)
    items = [{"product_id": product.id, "quantity_sold": 2}]

    first = _checkout(client, items, headers={"Idempotency-Key": "till-1-0042"})
    second = _checkout(client, items, headers={"Idempotency-Key": "till-1-0042"})

    assert first.json()["id"] == second.json()["id"]
    assert len(client.get("/sales").json()) == 1
    assert client.get(f"/products/{product.id}/stock").json()["quantity"] == 3


def test_oversized_idempotency_key_rejected(client, make_product):
    product = make_product(quantity=5)

    response = _checkout(
        client,
        [{"product_id": product.id, "quantity_sold": 1}],
        headers={"Idempotency-Key": "k" * 129},
    )

    assert response.status_code == 422
    assert client.get(f"/products/{product.id}/stock").json()["quantity"] == 5


def test_zero_quantity_rejected_by_schema(client, make_product):
    product = make_product()

    response = _checkout(client, [{"product_id": product.id, "quantity_sold": 0}])

    assert response.status_code == 422


def test_missing_sale_is_not_found(client):
    assert client.get("/sales/404").status_code == 404


def test_share_link(client, make_product):
    product = make_product(sell_price="100.00", quantity=5)
    sale_id = _checkout(client, [{"product_id": product.id, "quantity_sold": 2}]).json()["id"]

    response = client.get(f"/sales/{sale_id}/share-link")

    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("https://wa.me/919876543210?text=")
    message = unquote(url.split("?text=", 1)[1])
    assert "Dear Asha," in message
    assert "1. Lipstick x2" in message
    assert "Total Amount: ₹200.00" in message


def test_dashboard(client, make_product):
    lipstick = make_product(name="Lipstick", cost_price="40.00", sell_price="100.00", quantity=20)
    comb = make_product(name="Comb", cost_price="5.00", sell_price="15.00", quantity=20)

    _checkout(client, [{"product_id": lipstick.id, "quantity_sold": 12}, {"product_id": comb.id, "quantity_sold": 2}])
    _checkout(client, [{"product_id": comb.id, "quantity_sold": 3}])

    response = client.get("/reports/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["total_sales"]) == Decimal("1275.00")
    assert Decimal(body["total_cost"]) == Decimal("505.00")
    assert Decimal(body["net_profit"]) == Decimal("770.00")
    assert body["total_orders"] == 2
    assert [(p["name"], p["total_sold"]) for p in body["best_selling_products"]] == [
        ("Lipstick", 12),
        ("Comb", 5),
    ]
    assert len(body["sales_by_date"]) == 1
    assert Decimal(body["sales_by_date"][0]["total"]) == Decimal("1275.00")


def test_export_workbook(client, make_product):
    product = make_product(name="Lipstick", cost_price="40.00", sell_price="100.00", quantity=10)
    sale_id = _checkout(client, [{"product_id": product.id, "quantity_sold": 3}]).json()["id"]

    response = client.get("/exports/sales")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "attachment" in response.headers["content-disposition"]

    workbook = load_workbook(BytesIO(response.content))
    assert workbook.sheetnames == [
        "Sold Items",
        "Best Selling Products",
        "Sales By Date",
        "Financial Summary",
    ]

    rows = list(workbook["Sold Items"].iter_rows(values_only=True))
    assert rows[0][0] == "Invoice No"
    assert rows[1][0] == sale_id
    assert rows[1][1] == "Lipstick"
    assert rows[1][3:] == (40.0, 100.0, 3, 300.0)

    summary = {row[0]: row[1] for row in workbook["Financial Summary"].iter_rows(min_row=2, values_only=True)}
    assert summary["Total Sales"] == 300.0
    assert summary["Net Profit"] == 180.0
    assert summary["Profit Margin %"] == 60.0


def test_sales_require_authentication(anon_client):
    assert anon_client.get("/sales").status_code == 401
    assert anon_client.get("/reports/dashboard").status_code == 401
    assert anon_client.get("/exports/sales").status_code == 401


def test_dashboard_degrades_to_zero_on_store_failure(client, monkeypatch):
    def broken(db):
        raise SQLAlchemyError("store unavailable")

    monkeypatch.setattr(reports, "list_sales", broken)

    response = client.get("/reports/dashboard")

    assert response.status_code == 200
    assert Decimal(response.json()["total_sales"]) == 0
    assert response.json()["best_selling_products"] == []
