from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.database import engine, init_db
from app.core.exceptions import InventoryError, StorageError
from app.core.logging_config import setup_logging, get_logger
from app.core.middleware import RequestIDMiddleware
from app.api.v1 import api_router

SERVICE_NAME = "Inventory Management API"
VERSION = "1.0.0"

# Setup logging
setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title=SERVICE_NAME,
    description="Products, stock history and inventory statistics",
    version=VERSION
)

if settings.LOG_REQUEST_ID:
    app.add_middleware(RequestIDMiddleware)

origins = ["http://localhost:3000", "http://localhost:3001"]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)

# Error envelope: {"success": false, "message": ..., "error"?: ..., "errors"?: [...]}

@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err["loc"]]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc), "message": err["msg"].replace("Value error, ", "")})
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = "API endpoint not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.method} {request.url.path}: {exc}")
    error = StorageError("Database error", error=str(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    error = StorageError("Internal server error", error=str(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

@app.get("/")
async def root():
    return {"message": SERVICE_NAME, "version": VERSION}

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "success": True,
        "message": f"{SERVICE_NAME} is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

@app.get("/health/detailed")
def health_detailed():
    """Health check including database connectivity"""
    health_info = {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": VERSION
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        health_info["database"] = "connected"
    except SQLAlchemyError as e:
        health_info["database"] = f"error: {str(e)}"
        health_info["status"] = "degraded"

    return health_info

@app.on_event("startup")
def startup():
    """Create tables and seed default categories"""
    init_db()
    logger.info(f"API available under {settings.API_PREFIX}")
