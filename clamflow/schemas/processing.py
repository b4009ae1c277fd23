"""Pydantic schemas for processing batches and their graded boxes."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from clamflow.schemas.common import BatchStatus, ProductType
from clamflow.schemas.validators import normalize_code


# ── Submit ───────────────────────────────────────────────────

class BoxIn(BaseModel):
    """One weighed, graded box.  ``box_number`` is generated when omitted."""
    product_type: ProductType = Field(
        ..., validation_alias=AliasChoices("product_type", "type")
    )
    weight_kg: float = Field(
        ..., gt=0, allow_inf_nan=False,
        validation_alias=AliasChoices("weight_kg", "weight"),
    )
    grade: str = Field(..., max_length=20)
    box_number: str | None = Field(None, max_length=50)

    @field_validator("grade")
    @classmethod
    def _grade(cls, v: str) -> str:
        return normalize_code(v, 20).upper()

    @field_validator("box_number")
    @classmethod
    def _box_number(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return normalize_code(v, 50)


class ProcessingBatchCreate(BaseModel):
    lot_number: str = Field(..., max_length=50)
    boxes: list[BoxIn] = Field(..., min_length=1)

    @field_validator("lot_number")
    @classmethod
    def _lot_number(cls, v: str) -> str:
        return normalize_code(v, 50)

    @model_validator(mode="after")
    def _unique_box_numbers(self) -> "ProcessingBatchCreate":
        numbers = [b.box_number for b in self.boxes if b.box_number]
        if len(set(numbers)) != len(numbers):
            raise ValueError("Box numbers must be unique within a batch")
        return self


# ── Response ─────────────────────────────────────────────────

class BoxOut(BaseModel):
    id: int
    position: int
    product_type: ProductType
    weight_kg: float
    box_number: str
    grade: str

    model_config = {"from_attributes": True}


class ProcessingBatchOut(BaseModel):
    id: int
    lot_id: int
    lot_number: str
    shell_on_weight_kg: float
    meat_weight_kg: float
    yield_percentage: float
    date: datetime
    status: BatchStatus
    boxes: list[BoxOut]

    model_config = {"from_attributes": True}

    @property
    def total_output_kg(self) -> float:
        return self.shell_on_weight_kg + self.meat_weight_kg
