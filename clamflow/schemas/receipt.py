"""Pydantic schemas for raw-material receipts."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from clamflow.schemas.common import ReceiptStatus
from clamflow.schemas.validators import sanitize_string


class ReceiptCreate(BaseModel):
    supplier_id: int
    weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    photo_url: str = ""
    date: datetime | None = None

    @field_validator("photo_url")
    @classmethod
    def _photo_url(cls, v: str) -> str:
        return sanitize_string(v, 2000)


class RawMaterialOut(BaseModel):
    id: int
    supplier_id: int
    weight_kg: float
    photo_url: str
    date: datetime
    lot_number: str | None
    status: ReceiptStatus
    created_at: datetime | None = None

    # Resolved names
    supplier_name: str | None = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_orm_with_names(cls, receipt) -> "RawMaterialOut":
        data = cls.model_validate(receipt)
        data.supplier_name = receipt.supplier.name if receipt.supplier else "Unknown"
        return data
