# =========================================================
# CATALOG SERVICE
#
# CRUD over categories, suppliers and products.
# Lists are newest first (id descending) with no pagination.
# Products and suppliers are soft-deleted so historical sale
# items keep their joins.
# =========================================================

import logging

from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from pos_app.core.errors import NotFoundError, StoreError, ValidationError
from pos_app.models.categories import Category
from pos_app.models.suppliers import Supplier
from pos_app.models.products import Product
from pos_app.schemas.category import CategoryCreate
from pos_app.schemas.supplier import SupplierCreate, SupplierUpdate
from pos_app.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def _save(db: Session, entity, action: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to %s %s", action, type(entity).__name__)
        raise StoreError(f"Unable to {action} {type(entity).__name__.lower()}")
    db.refresh(entity)
    return entity


def _require_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required", field="name")
    return name


# =========================================================
# CATEGORIES
# =========================================================
def create_category(db: Session, data: CategoryCreate) -> Category:
    category = Category(name=_require_name(data.name))
    db.add(category)
    return _save(db, category, "create")


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.id.desc()).all()


# =========================================================
# SUPPLIERS
# =========================================================
def create_supplier(db: Session, data: SupplierCreate) -> Supplier:
    supplier = Supplier(
        name=_require_name(data.name),
        contact=data.contact,
        address=data.address,
    )
    db.add(supplier)
    return _save(db, supplier, "create")


def list_suppliers(db: Session) -> list[Supplier]:
    return (
        db.query(Supplier)
        .filter(Supplier.is_deleted.is_(False))
        .order_by(Supplier.id.desc())
        .all()
    )


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = (
        db.query(Supplier)
        .filter(Supplier.id == supplier_id, Supplier.is_deleted.is_(False))
        .first()
    )
    if not supplier:
        raise NotFoundError("Supplier", supplier_id)
    return supplier


def update_supplier(db: Session, supplier_id: int, data: SupplierUpdate) -> Supplier:
    supplier = get_supplier(db, supplier_id)

    supplier.name = _require_name(data.name)
    supplier.contact = data.contact
    supplier.address = data.address

    return _save(db, supplier, "update")


def delete_supplier(db: Session, supplier_id: int) -> None:
    supplier = get_supplier(db, supplier_id)
    supplier.is_deleted = True
    _save(db, supplier, "delete")
    logger.info("Supplier %s soft-deleted", supplier_id)


# =========================================================
# PRODUCTS
# =========================================================
def _check_references(db: Session, data: ProductCreate, current: Product | None = None):
    if data.category_id is not None:
        if not db.query(Category.id).filter(Category.id == data.category_id).first():
            raise ValidationError("Unknown category", field="category_id")

    # A product may keep a supplier that was deleted after it was assigned
    keeps_supplier = current is not None and data.supplier_id == current.supplier_id
    if data.supplier_id is not None and not keeps_supplier:
        supplier = (
            db.query(Supplier.id)
            .filter(Supplier.id == data.supplier_id, Supplier.is_deleted.is_(False))
            .first()
        )
        if not supplier:
            raise ValidationError("Unknown supplier", field="supplier_id")


def _product_query(db: Session):
    return (
        db.query(Product)
        .options(joinedload(Product.category), joinedload(Product.supplier))
        .filter(Product.is_deleted.is_(False))
    )


def create_product(db: Session, data: ProductCreate) -> Product:
    _check_references(db, data)

    product = Product(
        name=_require_name(data.name),
        brand=data.brand,
        cost_price=data.cost_price,
        sell_price=data.sell_price,
        quantity=data.quantity,
        category_id=data.category_id,
        supplier_id=data.supplier_id,
    )
    db.add(product)
    return _save(db, product, "create")


def list_products(db: Session) -> list[Product]:
    return _product_query(db).order_by(Product.id.desc()).all()


def get_product(db: Session, product_id: int) -> Product:
    product = _product_query(db).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product", product_id)
    return product


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    product = get_product(db, product_id)
    _check_references(db, data, current=product)

    product.name = _require_name(data.name)
    product.brand = data.brand
    product.cost_price = data.cost_price
    product.sell_price = data.sell_price
    product.quantity = data.quantity
    product.category_id = data.category_id
    product.supplier_id = data.supplier_id

    return _save(db, product, "update")


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    product.is_deleted = True
    _save(db, product, "delete")
    logger.info("Product %s soft-deleted", product_id)
