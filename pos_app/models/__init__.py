from pos_app.database import Base
from pos_app.models.categories import Category
from pos_app.models.suppliers import Supplier
from pos_app.models.products import Product
from pos_app.models.sales import Sale
from pos_app.models.sale_items import SaleItem
from pos_app.models.users import User

__all__ = ["Base", "Category", "Supplier", "Product", "Sale", "SaleItem", "User"]
