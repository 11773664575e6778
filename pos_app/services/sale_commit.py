# =========================================================
# SALE COMMIT WORKFLOW
#
# Converts a cart + customer info into a Sale with its
# SaleItems and decrements stock, all in one transaction.
#
#   VALIDATING -> RESERVING -> PERSISTING -> ADJUSTING_STOCK -> COMMITTED
#                                   any failure -> ROLLED_BACK
#
# - Product rows are locked (SELECT ... FOR UPDATE) in id order
# - Stock is decremented with a conditional UPDATE so it can
#   never go below zero, even where row locks are a no-op
# - Money is recomputed server side; client totals are a check
# - An idempotency token makes retried checkouts safe
# - Transient lock errors retry the whole commit
# =========================================================

import enum
import logging
import time
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from pos_app.core.config import settings
from pos_app.core.errors import (
    InconsistentTotalsError,
    InsufficientStockError,
    NotFoundError,
    PosError,
    StoreError,
    ValidationError,
)
from pos_app.models.products import Product
from pos_app.models.sales import Sale
from pos_app.models.sale_items import SaleItem
from pos_app.schemas.sale import CustomerInfo, SaleItemCreate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
TOTALS_EPSILON = Decimal("0.01")


class CommitStage(str, enum.Enum):
    VALIDATING = "validating"
    RESERVING = "reserving"
    PERSISTING = "persisting"
    ADJUSTING_STOCK = "adjusting_stock"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class LineAmounts:
    product_id: int
    quantity_sold: int
    sell_price: Decimal
    unit_discount: Decimal
    net_price: Decimal
    total_price: Decimal
    cost_price_at_sale: Decimal


@dataclass
class CartTotals:
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal


def to_money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}")


def compute_line(product: Product, item: SaleItemCreate) -> LineAmounts:
    """Price one cart line from the catalog row.

    net_price = sell_price - unit_discount
    total_price = net_price * quantity_sold
    """
    sell_price = to_money(product.sell_price)
    unit_discount = to_money(item.unit_discount or 0)

    if unit_discount > sell_price:
        raise ValidationError(
            f"Discount for {product.name} exceeds its price",
            field="unit_discount",
        )

    net_price = sell_price - unit_discount

    return LineAmounts(
        product_id=product.id,
        quantity_sold=item.quantity_sold,
        sell_price=sell_price,
        unit_discount=unit_discount,
        net_price=net_price,
        total_price=to_money(net_price * item.quantity_sold),
        cost_price_at_sale=to_money(product.cost_price),
    )


def compute_totals(lines: list[LineAmounts]) -> CartTotals:
    subtotal = sum((line.sell_price * line.quantity_sold for line in lines), Decimal("0"))
    discount = sum((line.unit_discount * line.quantity_sold for line in lines), Decimal("0"))
    total = max(Decimal("0"), subtotal - discount)

    return CartTotals(
        subtotal=to_money(subtotal),
        discount_amount=to_money(discount),
        total_amount=to_money(total),
    )


def check_supplied_totals(computed: CartTotals, supplied: dict | None):
    if not supplied:
        return

    for field in ("subtotal", "discount_amount", "total_amount"):
        received = supplied.get(field)
        if received is None:
            continue
        received = to_money(received)
        expected = getattr(computed, field)
        if abs(received - expected) > TOTALS_EPSILON:
            raise InconsistentTotalsError(field, expected, received)


# =========================================================
# STOCK BOUNDARY
# =========================================================
def get_stock(db: Session, product_id: int) -> int:
    quantity = (
        db.query(Product.quantity)
        .filter(Product.id == product_id, Product.is_deleted.is_(False))
        .scalar()
    )
    if quantity is None:
        raise NotFoundError("Product", product_id)
    return quantity


def adjust_stock(db: Session, product_id: int, delta: int) -> None:
    """Apply ``delta`` to a product's stock inside the caller's transaction.

    Decrements use ``quantity = quantity - n WHERE quantity >= n`` so two
    concurrent writers cannot both overdraw the row. Nothing is committed.
    """
    stmt = update(Product).where(Product.id == product_id, Product.is_deleted.is_(False))
    if delta < 0:
        stmt = stmt.where(Product.quantity >= -delta)

    result = db.execute(
        stmt.values(quantity=Product.quantity + delta).execution_options(synchronize_session=False)
    )

    if result.rowcount == 1:
        return

    product = db.query(Product.name, Product.quantity).filter(
        Product.id == product_id, Product.is_deleted.is_(False)
    ).first()
    if product is None:
        raise NotFoundError("Product", product_id)
    raise InsufficientStockError(product_id, product.name, -delta, product.quantity)


# =========================================================
# COMMIT
# =========================================================
def _find_by_token(db: Session, token: str | None) -> Sale | None:
    if not token:
        return None
    return (
        db.query(Sale)
        .options(joinedload(Sale.items).joinedload(SaleItem.product))
        .filter(Sale.idempotency_token == token)
        .first()
    )


def _validate_cart(items: list[SaleItemCreate], customer: CustomerInfo):
    if not items:
        raise ValidationError("Sale must contain items", field="items")

    product_ids = [item.product_id for item in items]
    if len(product_ids) != len(set(product_ids)):
        raise ValidationError("Duplicate products in sale are not allowed", field="items")

    for item in items:
        if item.quantity_sold is None or item.quantity_sold <= 0:
            raise ValidationError("Item quantity must be greater than zero", field="quantity_sold")

    if not customer.name.strip():
        raise ValidationError("Customer name is required", field="customer_name")
    if not customer.phone.strip():
        raise ValidationError("Customer phone is required", field="customer_phone")


def _lock_products(db: Session, product_ids: list[int]) -> dict[int, Product]:
    # Ascending id order keeps two carts from locking the same rows in opposite order
    products = (
        db.query(Product)
        .filter(Product.id.in_(product_ids), Product.is_deleted.is_(False))
        .order_by(Product.id)
        .populate_existing()
        .with_for_update()
        .all()
    )
    return {product.id: product for product in products}


def _attempt_commit(
    db: Session,
    items: list[SaleItemCreate],
    customer: CustomerInfo,
    totals: dict | None,
    idempotency_token: str | None,
) -> Sale:
    stage = CommitStage.VALIDATING
    try:
        _validate_cart(items, customer)

        stage = CommitStage.RESERVING
        products = _lock_products(db, sorted(item.product_id for item in items))

        lines = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise NotFoundError("Product", item.product_id)

            if product.quantity < item.quantity_sold:
                raise InsufficientStockError(
                    product.id, product.name, item.quantity_sold, product.quantity
                )

            if item.sell_price is not None and abs(to_money(item.sell_price) - to_money(product.sell_price)) > TOTALS_EPSILON:
                raise InconsistentTotalsError(
                    f"sell_price[{product.id}]",
                    to_money(product.sell_price),
                    to_money(item.sell_price),
                )

            lines.append(compute_line(product, item))

        computed = compute_totals(lines)
        check_supplied_totals(computed, totals)

        stage = CommitStage.PERSISTING
        sale = Sale(
            idempotency_token=idempotency_token or None,
            customer_name=customer.name.strip(),
            customer_phone=customer.phone.strip(),
            customer_address=customer.address,
            subtotal=computed.subtotal,
            discount_amount=computed.discount_amount,
            total_amount=computed.total_amount,
        )
        db.add(sale)
        db.flush()
        sale_id = sale.id

        db.add_all([
            SaleItem(
                sale_id=sale_id,
                product_id=line.product_id,
                sell_price=line.sell_price,
                unit_discount=line.unit_discount,
                net_price=line.net_price,
                quantity_sold=line.quantity_sold,
                total_price=line.total_price,
                cost_price_at_sale=line.cost_price_at_sale,
            )
            for line in lines
        ])
        db.flush()

        stage = CommitStage.ADJUSTING_STOCK
        for line in lines:
            adjust_stock(db, line.product_id, -line.quantity_sold)

        db.commit()
        stage = CommitStage.COMMITTED

    except PosError as exc:
        db.rollback()
        exc.stage = exc.stage or stage.value
        logger.warning("Sale commit rolled back at %s: %s", exc.stage, exc.message)
        raise

    except (IntegrityError, OperationalError):
        db.rollback()
        logger.warning("Sale commit rolled back at %s: store conflict", stage.value)
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Sale commit rolled back at %s", stage.value)
        raise StoreError("Unable to complete sale", stage=stage.value)

    logger.info(
        "Sale %s %s: %d item(s), total %s",
        sale_id, stage.value, len(lines), computed.total_amount,
    )
    return get_sale(db, sale_id)


def commit_sale(
    db: Session,
    items: list[SaleItemCreate],
    customer: CustomerInfo,
    totals: dict | None = None,
    idempotency_token: str | None = None,
) -> Sale:
    """Persist a cart as a Sale and decrement stock as one unit.

    Returns the existing sale when ``idempotency_token`` was already
    committed. Raises a ``PosError`` subclass naming the failed stage.
    """
    existing = _find_by_token(db, idempotency_token)
    if existing:
        logger.info("Idempotent replay of sale %s", existing.id)
        return existing

    max_attempts = max(1, settings.SALE_COMMIT_MAX_RETRIES)

    for attempt in range(1, max_attempts + 1):
        try:
            return _attempt_commit(db, items, customer, totals, idempotency_token)

        except IntegrityError:
            # Lost the race to a concurrent commit with the same token
            existing = _find_by_token(db, idempotency_token)
            if existing:
                logger.info("Concurrent duplicate resolved to sale %s", existing.id)
                return existing
            raise StoreError("Unable to complete sale", stage=CommitStage.PERSISTING.value)

        except OperationalError:
            if attempt == max_attempts:
                logger.error("Sale commit failed after %d attempts", attempt)
                raise StoreError("Unable to complete sale", stage=CommitStage.ROLLED_BACK.value)

            delay = settings.SALE_COMMIT_RETRY_BACKOFF * (2 ** (attempt - 1))
            logger.info("Sale commit conflict, retrying in %.2fs (attempt %d)", delay, attempt)
            time.sleep(delay)

            # A replay that committed meanwhile wins
            existing = _find_by_token(db, idempotency_token)
            if existing:
                return existing


# =========================================================
# READ PATH
# =========================================================
def list_sales(db: Session) -> list[Sale]:
    return (
        db.query(Sale)
        .options(joinedload(Sale.items).joinedload(SaleItem.product))
        .order_by(Sale.id.desc())
        .all()
    )


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = (
        db.query(Sale)
        .options(joinedload(Sale.items).joinedload(SaleItem.product))
        .filter(Sale.id == sale_id)
        .first()
    )
    if not sale:
        raise NotFoundError("Sale", sale_id)
    return sale
