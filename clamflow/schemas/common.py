"""Common schema types and helpers used across the services."""

from typing import Literal, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from clamflow.exceptions import ValidationError

ProductType = Literal["shell-on", "meat"]
ReceiptStatus = Literal["pending", "assigned"]
LotStatus = Literal["pending", "processing", "completed"]
BatchStatus = Literal["pending", "completed"]

PRODUCT_TYPES: tuple[str, ...] = ("shell-on", "meat")

T = TypeVar("T", bound=BaseModel)


def validate_input(schema: type[T], **data) -> T:
    """Build a request schema, raising ValidationError on bad input.

    Usage:
        body = validate_input(ReceiptCreate, supplier_id=1, weight_kg=50.0)
    """
    try:
        return schema(**data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc
