from app.models.inventory import (
    Product, Category, InventoryHistory,
    PRODUCT_STATUSES, STOCK_BUCKETS, OUT_OF_STOCK, LOW_STOCK, IN_STOCK, MAX_INTEGER, stock_bucket,
)

__all__ = [
    "Product", "Category", "InventoryHistory",
    "PRODUCT_STATUSES", "STOCK_BUCKETS", "OUT_OF_STOCK", "LOW_STOCK", "IN_STOCK", "MAX_INTEGER", "stock_bucket",
]
