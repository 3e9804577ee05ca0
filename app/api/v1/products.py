from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.core.database import get_db
from app.schemas.inventory import (
    ProductCreate, ProductUpdate, ProductResponse,
    ProductListEnvelope, ProductEnvelope, ProductMutationEnvelope,
    MessageEnvelope, CategoryListEnvelope,
)
from app.services import inventory_service
from app.api.v1.dependencies import PageParams, page_params

router = APIRouter()

@router.get("", response_model=ProductListEnvelope)
def list_products(
    name: Optional[str] = Query(None, max_length=255, description="Case-insensitive substring of the name"),
    category: Optional[str] = Query(None, max_length=100),
    stock_status: Optional[str] = Query(None, description="out_of_stock, low_stock or in_stock"),
    sort: Optional[str] = Query("name", description="Unknown fields sort by name"),
    order: Optional[str] = Query("asc"),
    paging: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    items, total = inventory_service.list_products(
        db,
        name=name,
        category=category,
        stock_status=stock_status,
        sort=sort,
        order=order,
        page=paging.page,
        limit=paging.limit,
    )
    return {
        "success": True,
        "data": [ProductResponse.model_validate(p) for p in items],
        "pagination": inventory_service.pagination(paging.page, paging.limit, total),
    }

@router.get("/categories/all", response_model=CategoryListEnvelope)
def list_categories(db: Session = Depends(get_db)):
    """Distinct categories currently used by products"""
    return {"success": True, "data": inventory_service.list_categories(db)}

@router.get("/{product_id}", response_model=ProductEnvelope)
def get_product(product_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    product = inventory_service.get_product(db, product_id)
    return {"success": True, "data": ProductResponse.model_validate(product)}

@router.post("", response_model=ProductMutationEnvelope, status_code=status.HTTP_201_CREATED)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    db_product = inventory_service.create_product(db, product)
    return {
        "success": True,
        "message": "Product created successfully",
        "data": ProductResponse.model_validate(db_product),
    }

@router.put("/{product_id}", response_model=ProductMutationEnvelope)
def update_product(
    product_update: ProductUpdate,
    product_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    """Partial update; a stock change is recorded in the inventory history"""
    product = inventory_service.update_product(db, product_id, product_update)
    return {
        "success": True,
        "message": "Product updated successfully",
        "data": ProductResponse.model_validate(product),
    }

@router.delete("/{product_id}", response_model=MessageEnvelope)
def delete_product(product_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Delete a product together with its inventory history"""
    inventory_service.delete_product(db, product_id)
    return {"success": True, "message": "Product deleted successfully"}
