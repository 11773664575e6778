# =========================================================
# SALES REPORT WORKBOOK
#
# Sheets:
#   1. Sold Items            (one row per sale item)
#   2. Best Selling Products
#   3. Sales By Date
#   4. Financial Summary
# =========================================================

from io import BytesIO

from openpyxl import Workbook

from pos_app.services.analytics import SalesSummary, item_cost

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _money(value) -> float:
    return float(value or 0)


def build_sales_workbook(sales, summary: SalesSummary) -> bytes:
    workbook = Workbook()

    # =======================
    # SHEET 1 - SOLD ITEMS
    # =======================
    sheet = workbook.active
    sheet.title = "Sold Items"

    sheet.append([
        "Invoice No",
        "Name",
        "Date of Item Sold",
        "Cost Price",
        "Selling Price",
        "Quantity",
        "Total Price",
    ])

    for sale in sales:
        sold_on = sale.created_at.strftime("%Y-%m-%d") if sale.created_at else ""

        for item in sale.items:
            sheet.append([
                sale.id,
                item.product.name if item.product else "Unknown",
                sold_on,
                _money(item_cost(item)),
                _money(item.sell_price),
                item.quantity_sold,
                _money(item.total_price),
            ])

    # =======================
    # SHEET 2 - BEST SELLERS
    # =======================
    best = workbook.create_sheet(title="Best Selling Products")
    best.append(["Name", "UnitsSold"])
    for product in summary.best_selling_products:
        best.append([product.name, product.total_sold])

    # =======================
    # SHEET 3 - SALES BY DATE
    # =======================
    by_date = workbook.create_sheet(title="Sales By Date")
    by_date.append(["Date", "Total"])
    for row in summary.sales_by_date:
        by_date.append([row.date.isoformat(), _money(row.total)])

    # =======================
    # SHEET 4 - FINANCIAL SUMMARY
    # =======================
    financial = workbook.create_sheet(title="Financial Summary")
    financial.append(["Financial Summary"])
    financial.append(["Total Sales", _money(summary.total_sales)])
    financial.append(["Total Cost", _money(summary.total_cost)])
    financial.append(["Net Profit", _money(summary.net_profit)])
    financial.append(["Profit Margin %", _money(summary.profit_margin)])

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()
