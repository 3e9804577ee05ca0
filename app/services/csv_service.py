"""
CSV import and export of products
"""
import csv
import io
from typing import List

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateName, NotFound, ValidationError
from app.core.logging_config import get_logger
from app.models.inventory import Product
from app.schemas.inventory import ImportResult, ImportRowError, ProductCreate
from app.services.inventory_service import CSV_IMPORT_REASON, add_product, transaction

logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "id", "name", "unit", "category", "brand", "stock",
    "status", "image", "created_at", "updated_at",
]
IMPORT_FIELDS = ["name", "unit", "category", "brand", "stock", "status", "image"]


def _parse_rows(content: bytes) -> List[dict]:
    """Decode and parse the whole upload up front, so a malformed file writes nothing"""
    try:
        text = content.decode("utf-8-sig")
        reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
        if reader.fieldnames is None:
            raise ValidationError("Error parsing CSV file", error="The file is empty")
        reader.fieldnames = [header.strip() for header in reader.fieldnames]
        rows = [
            {key: (value or "").strip() for key, value in row.items() if key is not None}
            for row in reader
        ]
    except (UnicodeDecodeError, csv.Error) as e:
        raise ValidationError("Error parsing CSV file", error=str(e))

    if "name" not in reader.fieldnames:
        raise ValidationError("Error parsing CSV file", error="Missing required column: name")
    return rows


def _first_error(e: PydanticValidationError) -> str:
    err = e.errors()[0]
    field = ".".join(str(part) for part in err["loc"])
    message = err["msg"].replace("Value error, ", "")
    return f"{field}: {message}" if field else message


def _row_to_product(row: dict) -> ProductCreate:
    fields = {field: row.get(field) or None for field in IMPORT_FIELDS}
    fields["stock"] = fields["stock"] or 0
    fields["status"] = fields["status"] or "active"
    return ProductCreate(**fields)


def import_products(db: Session, content: bytes) -> ImportResult:
    rows = _parse_rows(content)
    result = ImportResult()
    errors: List[ImportRowError] = []

    def skip(row_number: int, row: dict, message: str, action: str = None):
        errors.append(ImportRowError(row=row_number, error=message, data=row, action=action))
        result.skipped += 1

    with transaction(db):
        for row_number, row in enumerate(rows, start=1):
            result.processed += 1

            if not row.get("name"):
                skip(row_number, row, "Product name is required")
                continue

            try:
                data = _row_to_product(row)
            except PydanticValidationError as e:
                skip(row_number, row, _first_error(e))
                continue

            try:
                add_product(db, data, reason=CSV_IMPORT_REASON, record_empty_stock=False)
            except DuplicateName:
                skip(row_number, row, "Product with this name already exists", action="skipped")
                continue

            result.added += 1

    result.errors = errors or None
    logger.info(
        f"CSV import: processed={result.processed} added={result.added} skipped={result.skipped}"
    )
    return result


def _export_value(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat(sep=" ", timespec="seconds")
    return str(value)


def export_products(db: Session) -> str:
    products = db.query(Product).order_by(Product.name).all()
    if not products:
        raise NotFound("No products found to export")

    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for product in products:
        writer.writerow([_export_value(getattr(product, column)) for column in EXPORT_COLUMNS])

    logger.info(f"CSV export: {len(products)} products")
    return output.getvalue()
