from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.schemas.inventory import ImportEnvelope
from app.services import csv_service
from app.api.v1.dependencies import read_csv_upload

router = APIRouter()

@router.post("/products", response_model=ImportEnvelope, response_model_exclude_none=True)
def import_products(content: bytes = Depends(read_csv_upload), db: Session = Depends(get_db)):
    """
    Bulk-create products from an uploaded CSV (multipart field `csvFile`).

    Rows with a missing or duplicate name, or invalid values, are skipped and
    reported in `errors`; the rest are created. A file that cannot be parsed
    is rejected as a whole.
    """
    result = csv_service.import_products(db, content)
    return {"success": True, "message": "CSV import completed", "data": result}

@router.get("/products")
def export_products(db: Session = Depends(get_db)):
    """Download every product as CSV"""
    content = csv_service.export_products(db)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="products.csv"'},
    )
