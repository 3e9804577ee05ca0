from app.schemas.inventory import (
    ProductCreate, ProductUpdate, ProductResponse, Pagination,
    HistoryEntryResponse, HistoryListEntry, InventorySummary, ImportResult,
)

__all__ = [
    "ProductCreate", "ProductUpdate", "ProductResponse", "Pagination",
    "HistoryEntryResponse", "HistoryListEntry", "InventorySummary", "ImportResult",
]
