"""Pydantic schemas for sealed packages."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from clamflow.schemas.common import ProductType
from clamflow.schemas.validators import normalize_code, optional_text


class PackageCreate(BaseModel):
    lot_number: str = Field(..., max_length=50)
    box_number: str = Field(..., max_length=50)
    product_type: ProductType
    weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    grade: str = Field(..., max_length=20)
    qr_code: str | None = None
    date: datetime | None = None

    @field_validator("lot_number", "box_number")
    @classmethod
    def _codes(cls, v: str) -> str:
        return normalize_code(v, 50)

    @field_validator("grade")
    @classmethod
    def _grade(cls, v: str) -> str:
        return normalize_code(v, 20).upper()

    @field_validator("qr_code")
    @classmethod
    def _qr_code(cls, v: str | None) -> str | None:
        return optional_text(v, 2000)


class PackageOut(BaseModel):
    id: int
    lot_id: int
    box_id: int
    lot_number: str
    box_number: str
    product_type: ProductType
    weight_kg: float
    grade: str
    qr_code: str
    date: datetime

    model_config = {"from_attributes": True}
