# models/sale_items.py

from sqlalchemy import CheckConstraint, Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from pos_app.database import Base


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)

    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    sell_price = Column(Numeric(10, 2), nullable=False)
    unit_discount = Column(Numeric(10, 2), nullable=False, default=0)
    net_price = Column(Numeric(10, 2), nullable=False)
    quantity_sold = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    # Snapshot of product cost when sold; null on rows recorded before snapshots
    cost_price_at_sale = Column(Numeric(10, 2), nullable=True)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity_sold > 0", name="ck_sale_item_quantity_positive"),
    )
