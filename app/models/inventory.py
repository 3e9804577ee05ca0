from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Index, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.config import settings
from app.core.database import Base

PRODUCT_STATUSES = ("active", "inactive", "discontinued")

OUT_OF_STOCK = "out_of_stock"
LOW_STOCK = "low_stock"
IN_STOCK = "in_stock"
STOCK_BUCKETS = (OUT_OF_STOCK, LOW_STOCK, IN_STOCK)

# Largest value a 64-bit INTEGER column can hold
MAX_INTEGER = 2**63 - 1

PRODUCT_NAME_CONSTRAINT = "uq_products_name"

def stock_bucket(stock: int) -> str:
    """Derived stock level; unrelated to the stored lifecycle status"""
    if stock <= 0:
        return OUT_OF_STOCK
    if stock <= settings.LOW_STOCK_THRESHOLD:
        return LOW_STOCK
    return IN_STOCK

def utcnow() -> datetime:
    # Naive UTC; SQLite stores datetimes without an offset
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=utcnow)

class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        UniqueConstraint("name", name=PRODUCT_NAME_CONSTRAINT),
        Index("idx_products_category", "category"),
        Index("idx_products_status", "status"),
        Index("idx_products_name", "name"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(50))
    category = Column(String(100))
    brand = Column(String(100))
    stock = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    image = Column(String)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # History rows are removed explicitly before the product, never by cascade
    history = relationship("InventoryHistory", back_populates="product", passive_deletes="all")

    @property
    def stock_status(self) -> str:
        return stock_bucket(self.stock)

    def __repr__(self) -> str:
        return f"<Product {self.id}: {self.name} stock={self.stock}>"

class InventoryHistory(Base):
    __tablename__ = "inventory_history"
    __table_args__ = (
        Index("idx_inventory_history_product_id", "product_id"),
        Index("idx_inventory_history_change_date", "change_date"),
    )

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    old_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    change_amount = Column(Integer, nullable=False)
    change_date = Column(DateTime, nullable=False, default=utcnow)
    user_info = Column(String)
    reason = Column(String)

    product = relationship("Product", back_populates="history")

    @classmethod
    def record(cls, product_id: int, old_quantity: int, new_quantity: int, reason: str, user_info=None):
        """Build a history row; change_amount is always new - old"""
        return cls(
            product_id=product_id,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            change_amount=new_quantity - old_quantity,
            reason=reason,
            user_info=user_info,
        )
