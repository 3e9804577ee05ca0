from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.core.database import get_db
from app.schemas.inventory import (
    HistoryEntryResponse, HistoryListEntry, ProductRef, InventorySummary,
    ProductHistoryEnvelope, HistoryListEnvelope, SummaryEnvelope,
)
from app.services import inventory_service
from app.api.v1.dependencies import PageParams, page_params

router = APIRouter()

def _entry_fields(entry) -> dict:
    return {
        "id": entry.id,
        "old_quantity": entry.old_quantity,
        "new_quantity": entry.new_quantity,
        "change_amount": entry.change_amount,
        "change_date": entry.change_date,
        "user_info": entry.user_info,
        "reason": entry.reason,
    }

@router.get("/product/{product_id}", response_model=ProductHistoryEnvelope)
def get_product_history(product_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Stock changes for one product, newest first"""
    product, entries = inventory_service.get_product_history(db, product_id)
    return {
        "success": True,
        "data": {
            "product": ProductRef(id=product.id, name=product.name),
            "history": [HistoryEntryResponse(**_entry_fields(e)) for e in entries],
        },
    }

@router.get("", response_model=HistoryListEnvelope)
def list_history(
    product_id: Optional[int] = Query(None, alias="productId", ge=1),
    start_date: Optional[str] = Query(None, alias="startDate", description="Inclusive lower bound (ISO 8601)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Inclusive upper bound; a bare date covers the whole day"),
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, total = inventory_service.list_history(
        db,
        product_id=product_id,
        start_date=inventory_service.parse_date_bound(start_date),
        end_date=inventory_service.parse_date_bound(end_date, end_of_day=True),
        page=paging.page,
        limit=paging.limit,
    )
    return {
        "success": True,
        "data": [
            HistoryListEntry(**_entry_fields(entry), product_id=entry.product_id, product_name=product_name)
            for entry, product_name in rows
        ],
        "pagination": inventory_service.pagination(paging.page, paging.limit, total),
    }

@router.get("/summary", response_model=SummaryEnvelope)
def get_summary(
    category: Optional[str] = Query(None, max_length=100),
    stock_status: Optional[str] = Query(None, description="out_of_stock, low_stock or in_stock"),
    db: Session = Depends(get_db),
):
    summary = inventory_service.get_summary(db, category=category, stock_status=stock_status)
    return {"success": True, "data": InventorySummary(**summary)}
