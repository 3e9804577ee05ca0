from dataclasses import dataclass
from fastapi import File, Query, UploadFile
from app.core.config import settings
from app.core.exceptions import PayloadTooLarge, ValidationError

@dataclass
class PageParams:
    page: int
    limit: int

def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"),
) -> PageParams:
    return PageParams(page=page, limit=limit)

def read_csv_upload(csvFile: UploadFile = File(..., description="CSV file with at least a 'name' column")) -> bytes:
    """Read an uploaded CSV into memory, enforcing type and size limits"""
    try:
        if not (csvFile.filename or "").lower().endswith(".csv"):
            raise ValidationError("Only CSV files are allowed")

        # One byte past the limit is enough to know it's too big
        content = csvFile.file.read(settings.MAX_UPLOAD_SIZE + 1)
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise PayloadTooLarge(
                f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB"
            )
        return content
    finally:
        csvFile.file.close()
