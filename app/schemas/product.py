from pydantic import BaseModel, Field, ConfigDict, ValidationError
from datetime import datetime
from typing import Optional, Any, Dict, Tuple


# Messages shown next to a field when its constraint fails.
CONSTRAINT_MESSAGES = {
    "name": "Name is required",
    "description": "Description must be text",
    "price": "Price must be greater than 0",
    "stock": "Stock cannot be negative",
}

# Messages shown when a value cannot be read as the field's type at all.
TYPE_MESSAGES = {
    "name": "Name is required",
    "description": "Description must be text",
    "price": "Price must be a number",
    "stock": "Stock must be a whole number",
}

# Messages shown when a value does not fit its column.
LIMIT_MESSAGES = {
    "price": "Price is too large",
    "stock": "Stock is too large",
}

CONSTRAINT_ERROR_TYPES = {"missing", "string_too_short", "greater_than_equal"}
LIMIT_ERROR_TYPES = {"less_than_equal"}

# Largest values the products table can hold: Numeric(10, 2) and a 32-bit INTEGER.
MAX_PRICE = 99999999.99
MAX_STOCK = 2**31 - 1


class ProductInput(BaseModel):
    """
    Editable fields of a product, as accepted on create and update.

    Price and stock are strict: booleans and numeric strings are rejected.
    Form input is converted to numbers before it gets here.
    """
    name: str = Field(..., min_length=1, description="Product name")
    description: Optional[str] = Field(None, description="Optional description")
    price: float = Field(
        ..., ge=0.01, le=MAX_PRICE, strict=True, allow_inf_nan=False,
        description="Price, at least 0.01"
    )
    stock: int = Field(
        ..., ge=0, le=MAX_STOCK, strict=True,
        description="Available stock (must be non-negative)"
    )


class ProductRead(BaseModel):
    """Schema for a listed product, with the stored price surfaced as a float."""
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ActionResult(BaseModel):
    """
    Outcome of a mutating action.

    Exactly one of ``success`` or ``error`` is set. Validation failures also
    carry ``field_errors``, mapping each invalid field to its message.
    """
    success: Optional[bool] = None
    error: Optional[str] = None
    field_errors: Optional[Dict[str, str]] = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: str, field_errors: Optional[Dict[str, str]] = None) -> "ActionResult":
        return cls(error=error, field_errors=field_errors)

    @property
    def is_validation_error(self) -> bool:
        return self.field_errors is not None


def _message_for(field: str, error_type: str) -> str:
    if error_type in CONSTRAINT_ERROR_TYPES:
        return CONSTRAINT_MESSAGES.get(field, "Invalid value")
    if error_type in LIMIT_ERROR_TYPES:
        return LIMIT_MESSAGES.get(field, "Invalid value")
    return TYPE_MESSAGES.get(field, "Invalid value")


def validate_product(data: Any) -> Tuple[Optional[ProductInput], Dict[str, str]]:
    """
    Validate an arbitrary input record against the product schema.

    Never raises and never touches the database.

    Args:
        data: Mapping of submitted values (JSON body or form fields)

    Returns:
        ``(ProductInput, {})`` when valid, otherwise ``(None, errors)`` where
        ``errors`` maps field name to the first message for that field
    """
    if not isinstance(data, dict):
        return None, {"__root__": "Expected an object"}

    try:
        return ProductInput.model_validate(data), {}
    except ValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "__root__"
            errors.setdefault(field, _message_for(field, error["type"]))
        return None, errors
