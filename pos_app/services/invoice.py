# pos_app/services/invoice.py
#
# Builds the chat share link for a committed sale. Delivery is
# left to the customer's messaging app.

import re
from urllib.parse import quote

from pos_app.core.config import settings
from pos_app.core.errors import ValidationError

SHARE_BASE_URL = "https://wa.me"


def normalize_phone(phone: str, country_code: str | None = None) -> str:
    country_code = country_code or settings.INVOICE_COUNTRY_CODE
    digits = re.sub(r"\D", "", phone or "")

    if len(digits) == 10 and not digits.startswith(country_code):
        digits = country_code + digits

    if len(digits) < 10:
        raise ValidationError("Invalid phone number format", field="customer_phone")

    return digits


def build_invoice_message(sale) -> str:
    currency = settings.CURRENCY_SYMBOL
    lines = []
    for index, item in enumerate(sale.items, start=1):
        name = item.product.name if item.product else "Item"
        gross = item.sell_price * item.quantity_sold
        lines.append(
            f"{index}. {name} x{item.quantity_sold} @ {currency}{item.sell_price:.2f} = {currency}{gross:.2f}"
        )

    sold_on = sale.created_at.strftime("%d/%m/%Y") if sale.created_at else ""

    return "\n".join([
        f"Dear {sale.customer_name},",
        "Thank you for shopping with us",
        f"Invoice No: {sale.id}",
        f"Date: {sold_on}",
        "",
        "Items:",
        *lines,
        "",
        f"SubTotal: {currency}{sale.subtotal:.2f}",
        f"Discount: {currency}{sale.discount_amount:.2f}",
        f"Total Amount: {currency}{sale.total_amount:.2f}",
        "",
        "For any queries, reply to this message.",
    ])


def build_share_link(sale) -> str:
    phone = normalize_phone(sale.customer_phone)
    return f"{SHARE_BASE_URL}/{phone}?text={quote(build_invoice_message(sale))}"
