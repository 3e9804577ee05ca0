from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.models.inventory import MAX_INTEGER

ProductStatus = Literal["active", "inactive", "discontinued"]

_url_adapter = TypeAdapter(AnyUrl)

def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value

def _check_image_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Image must be a valid URL")
    return value

def _reject_bool(value):
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(value, bool):
        raise ValueError("Stock must be an integer")
    return value

# Products
class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    unit: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    stock: int = Field(..., ge=0, le=MAX_INTEGER)
    status: ProductStatus = "active"
    image: Optional[str] = None

    blank_optionals = field_validator("unit", "category", "brand", "image", mode="before")(_blank_to_none)
    image_url_valid = field_validator("image")(_check_image_url)
    stock_not_bool = field_validator("stock", mode="before")(_reject_bool)

class ProductUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied;
    an empty string for unit/category/brand/image clears that field."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    unit: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    stock: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    status: Optional[ProductStatus] = None
    image: Optional[str] = None

    blank_optionals = field_validator("unit", "category", "brand", "image", mode="before")(_blank_to_none)
    image_url_valid = field_validator("image")(_check_image_url)
    stock_not_bool = field_validator("stock", mode="before")(_reject_bool)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for field in ("name", "stock", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

class ProductResponse(BaseModel):
    id: int
    name: str
    unit: Optional[str]
    category: Optional[str]
    brand: Optional[str]
    stock: int
    status: str
    stock_status: str
    image: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class ProductListEnvelope(BaseModel):
    success: bool = True
    data: List[ProductResponse]
    pagination: Pagination

class ProductEnvelope(BaseModel):
    success: bool = True
    data: ProductResponse

class ProductMutationEnvelope(BaseModel):
    success: bool = True
    message: str
    data: ProductResponse

class MessageEnvelope(BaseModel):
    success: bool = True
    message: str

class CategoryListEnvelope(BaseModel):
    success: bool = True
    data: List[str]

# History
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class ProductRef(CamelModel):
    id: int
    name: str

class HistoryEntryResponse(CamelModel):
    id: int
    old_quantity: int
    new_quantity: int
    change_amount: int
    change_date: datetime
    user_info: Optional[str] = None
    reason: Optional[str] = None

class HistoryListEntry(HistoryEntryResponse):
    product_id: int
    product_name: str

class ProductHistory(CamelModel):
    product: ProductRef
    history: List[HistoryEntryResponse]

class ProductHistoryEnvelope(BaseModel):
    success: bool = True
    data: ProductHistory

class HistoryListEnvelope(BaseModel):
    success: bool = True
    data: List[HistoryListEntry]
    pagination: Pagination

class InventorySummary(CamelModel):
    total_products: int
    status_distribution: Dict[str, int]
    stock_levels: Dict[str, int]
    recent_activity: int
    # Sum of units on hand, not a currency amount
    total_inventory_value: int

class SummaryEnvelope(BaseModel):
    success: bool = True
    data: InventorySummary

# CSV import
class ImportRowError(BaseModel):
    row: int
    error: str
    data: Dict[str, Any]
    action: Optional[str] = None

class ImportResult(BaseModel):
    processed: int = 0
    added: int = 0
    skipped: int = 0
    errors: Optional[List[ImportRowError]] = None

class ImportEnvelope(BaseModel):
    success: bool = True
    message: str
    data: ImportResult
