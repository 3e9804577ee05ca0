"""
Error taxonomy for the inventory engine.

Every error carries the HTTP status it maps to; the handlers registered in
app.main render them as ``{"success": false, "message": ..., "error"?: ...}``.
"""
from typing import Any, List, Optional


class InventoryError(Exception):
    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.error = error
        self.errors = errors

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(InventoryError):
    """Malformed or out-of-range input"""
    status_code = 400


class NotFound(InventoryError):
    status_code = 404


class DuplicateName(InventoryError):
    status_code = 409

    def __init__(self, message: str = "A product with this name already exists", **kwargs):
        super().__init__(message, **kwargs)


class PayloadTooLarge(InventoryError):
    status_code = 413


class StorageError(InventoryError):
    """The database failed underneath an operation"""
    status_code = 500
