"""
Inventory engine: product mutations, the stock history audit trail, and the
derived listings and summaries built on top of them.

Every stock change is written together with its history row inside a single
transaction (see ``transaction``), so the products table and the audit trail
can't drift apart.
"""
import math
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import DuplicateName, NotFound, StorageError, ValidationError
from app.core.logging_config import get_logger
from app.models.inventory import (
    IN_STOCK, LOW_STOCK, MAX_INTEGER, OUT_OF_STOCK, PRODUCT_NAME_CONSTRAINT, PRODUCT_STATUSES,
    STOCK_BUCKETS, InventoryHistory, Product, utcnow,
)
from app.schemas.inventory import ProductCreate, ProductUpdate

logger = get_logger(__name__)

INITIAL_STOCK_REASON = "Initial stock"
MANUAL_UPDATE_REASON = "Manual update"
CSV_IMPORT_REASON = "Imported from CSV"

# Columns a listing may be ordered by; anything else falls back to name
SORTABLE_COLUMNS = {
    "name": Product.name,
    "category": Product.category,
    "brand": Product.brand,
    "stock": Product.stock,
    "status": Product.status,
    "created_at": Product.created_at,
    "updated_at": Product.updated_at,
}
DEFAULT_SORT = "name"


def _is_duplicate_name(e: IntegrityError) -> bool:
    """Whether a unique violation came from the product name constraint"""
    diag = getattr(e.orig, "diag", None)
    if getattr(diag, "constraint_name", None) == PRODUCT_NAME_CONSTRAINT:
        return True
    # SQLite reports the column, MySQL the constraint name
    message = str(e.orig)
    return PRODUCT_NAME_CONSTRAINT in message or "products.name" in message


@contextmanager
def transaction(db: Session):
    """Commit everything done inside the block at once, or nothing"""
    try:
        yield
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_duplicate_name(e):
            raise DuplicateName(error=str(e.orig)) from e
        logger.error(f"Integrity error: {e.orig}")
        raise StorageError("Database constraint violated", error=str(e.orig)) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {e}")
        raise StorageError("Database error", error=str(e)) from e
    except Exception:
        db.rollback()
        raise


def _escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def stock_bucket_clause(bucket: str):
    threshold = settings.LOW_STOCK_THRESHOLD
    if bucket == OUT_OF_STOCK:
        return Product.stock == 0
    if bucket == LOW_STOCK:
        return and_(Product.stock > 0, Product.stock <= threshold)
    if bucket == IN_STOCK:
        return Product.stock > threshold
    raise ValidationError(
        "Invalid stock status",
        error=f"Stock status must be one of: {', '.join(STOCK_BUCKETS)}",
    )


def product_filters(
    name: Optional[str] = None,
    category: Optional[str] = None,
    stock_status: Optional[str] = None,
) -> list:
    """WHERE clauses shared by a listing and its count query"""
    clauses = []
    if name:
        clauses.append(Product.name.ilike(f"%{_escape_like(name)}%", escape="\\"))
    if category:
        clauses.append(Product.category == category)
    if stock_status:
        clauses.append(stock_bucket_clause(stock_status))
    return clauses


def page_offset(page: int, limit: int) -> Optional[int]:
    """Row offset for a page, or None when it lies beyond any storable row"""
    offset = (page - 1) * limit
    return offset if offset <= MAX_INTEGER else None


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.name == name)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


# Products

def get_product(db: Session, product_id: int) -> Product:
    if product_id > MAX_INTEGER:
        raise NotFound("Product not found")
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise NotFound("Product not found")
    return product


def add_product(db: Session, data: ProductCreate, reason: str = INITIAL_STOCK_REASON,
                record_empty_stock: bool = True) -> Product:
    """Stage a product and its opening history row without committing.

    Callers own the transaction. The opening row is skipped for zero stock
    only when ``record_empty_stock`` is False (CSV import).
    """
    if _name_taken(db, data.name):
        raise DuplicateName()

    product = Product(**data.model_dump())
    db.add(product)
    db.flush()

    if product.stock > 0 or record_empty_stock:
        db.add(InventoryHistory.record(product.id, 0, product.stock, reason))
    return product


def create_product(db: Session, data: ProductCreate) -> Product:
    with transaction(db):
        product = add_product(db, data)
    db.refresh(product)
    logger.info(f"Created product {product.id} '{product.name}' with stock {product.stock}")
    return product


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    # Presence, not truthiness: stock=0 or category="" are real changes
    changes = data.model_dump(exclude_unset=True)

    with transaction(db):
        product = get_product(db, product_id)

        new_name = changes.get("name")
        if new_name is not None and new_name != product.name:
            if _name_taken(db, new_name, exclude_id=product.id):
                raise DuplicateName()

        if "stock" in changes and changes["stock"] != product.stock:
            db.add(InventoryHistory.record(product.id, product.stock, changes["stock"], MANUAL_UPDATE_REASON))
            db.flush()

        for field, value in changes.items():
            setattr(product, field, value)
        product.updated_at = utcnow()

    db.refresh(product)
    logger.info(f"Updated product {product.id} fields={sorted(changes)}")
    return product


def delete_product(db: Session, product_id: int) -> None:
    with transaction(db):
        product = get_product(db, product_id)
        removed = (
            db.query(InventoryHistory)
            .filter(InventoryHistory.product_id == product.id)
            .delete(synchronize_session=False)
        )
        db.delete(product)
    logger.info(f"Deleted product {product_id} and {removed} history entries")


def list_products(
    db: Session,
    name: Optional[str] = None,
    category: Optional[str] = None,
    stock_status: Optional[str] = None,
    sort: Optional[str] = DEFAULT_SORT,
    order: Optional[str] = "asc",
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> Tuple[List[Product], int]:
    filters = product_filters(name=name, category=category, stock_status=stock_status)

    sort_col = SORTABLE_COLUMNS.get(sort or DEFAULT_SORT, SORTABLE_COLUMNS[DEFAULT_SORT])
    descending = (order or "").lower() == "desc"
    ordering = sort_col.desc() if descending else sort_col.asc()

    total = db.query(func.count(Product.id)).filter(*filters).scalar()
    offset = page_offset(page, limit)
    if offset is None:
        return [], total
    items = (
        db.query(Product)
        .filter(*filters)
        .order_by(ordering, Product.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def list_categories(db: Session) -> List[str]:
    rows = (
        db.query(Product.category)
        .filter(Product.category.isnot(None))
        .distinct()
        .order_by(Product.category)
        .all()
    )
    return [category for (category,) in rows]


# History

def parse_date_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse an ISO date/datetime query value into naive UTC.

    A bare date used as an upper bound covers that whole day.
    """
    if not value:
        return None
    try:
        # fromisoformat only accepts a trailing Z from Python 3.11
        parsed = datetime.fromisoformat(value[:-1] + "+00:00" if value[-1] in "Zz" else value)
    except ValueError:
        raise ValidationError("Invalid date", error=f"'{value}' is not an ISO 8601 date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    if end_of_day and len(value) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def get_product_history(db: Session, product_id: int) -> Tuple[Product, List[InventoryHistory]]:
    product = get_product(db, product_id)
    entries = (
        db.query(InventoryHistory)
        .filter(InventoryHistory.product_id == product.id)
        .order_by(InventoryHistory.change_date.desc(), InventoryHistory.id.desc())
        .all()
    )
    return product, entries


def list_history(
    db: Session,
    product_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> Tuple[List[Tuple[InventoryHistory, str]], int]:
    """History rows joined with their product's name, newest first"""
    if product_id is not None and product_id > MAX_INTEGER:
        return [], 0

    filters = []
    if product_id is not None:
        filters.append(InventoryHistory.product_id == product_id)
    if start_date is not None:
        filters.append(InventoryHistory.change_date >= start_date)
    if end_date is not None:
        filters.append(InventoryHistory.change_date <= end_date)

    total = (
        db.query(func.count(InventoryHistory.id))
        .join(Product, InventoryHistory.product_id == Product.id)
        .filter(*filters)
        .scalar()
    )
    offset = page_offset(page, limit)
    if offset is None:
        return [], total
    rows = (
        db.query(InventoryHistory, Product.name)
        .join(Product, InventoryHistory.product_id == Product.id)
        .filter(*filters)
        .order_by(InventoryHistory.change_date.desc(), InventoryHistory.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [(entry, product_name) for entry, product_name in rows], total


# Summary

def get_summary(db: Session, category: Optional[str] = None, stock_status: Optional[str] = None) -> dict:
    filters = product_filters(category=category, stock_status=stock_status)

    total_products = db.query(func.count(Product.id)).filter(*filters).scalar()

    status_distribution = {status: 0 for status in PRODUCT_STATUSES}
    status_rows = (
        db.query(Product.status, func.count(Product.id))
        .filter(*filters)
        .group_by(Product.status)
        .all()
    )
    for status, count in status_rows:
        status_distribution[status] = count

    stock_levels = {
        bucket: db.query(func.count(Product.id)).filter(*filters, stock_bucket_clause(bucket)).scalar()
        for bucket in STOCK_BUCKETS
    }

    # Only the category filter narrows recent activity
    since = utcnow() - timedelta(days=settings.RECENT_ACTIVITY_DAYS)
    activity = db.query(func.count(InventoryHistory.id)).filter(InventoryHistory.change_date >= since)
    if category:
        activity = activity.filter(
            InventoryHistory.product_id.in_(select(Product.id).where(Product.category == category))
        )
    recent_activity = activity.scalar()

    total_units = db.query(func.coalesce(func.sum(Product.stock), 0)).filter(*filters).scalar()

    return {
        "total_products": total_products,
        "status_distribution": status_distribution,
        "stock_levels": stock_levels,
        "recent_activity": recent_activity,
        "total_inventory_value": total_units,
    }
