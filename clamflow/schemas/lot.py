"""Pydantic schemas for lot assembly and lot listings."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from clamflow.schemas.common import LotStatus
from clamflow.schemas.validators import normalize_code, optional_text


# ── Assemble ─────────────────────────────────────────────────

class LotCreate(BaseModel):
    """Group pending receipts into a new lot."""
    lot_number: str = Field(..., max_length=50)
    receipt_ids: list[int] = Field(..., min_length=1)
    notes: str | None = None

    @field_validator("lot_number")
    @classmethod
    def _lot_number(cls, v: str) -> str:
        return normalize_code(v, 50)

    @field_validator("receipt_ids")
    @classmethod
    def _unique_ids(cls, v: list[int]) -> list[int]:
        if len(set(v)) != len(v):
            raise ValueError("Receipt ids must not repeat")
        return v

    @field_validator("notes")
    @classmethod
    def _notes(cls, v: str | None) -> str | None:
        return optional_text(v)


# ── Response ─────────────────────────────────────────────────

class LotOut(BaseModel):
    id: int
    lot_number: str
    receipt_ids: list[int]
    total_weight_kg: float
    notes: str | None
    status: LotStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class LotReceiptOut(BaseModel):
    """A receipt inside a lot, with its supplier resolved for display."""
    id: int
    supplier_id: int
    supplier_name: str
    weight_kg: float
    date: datetime


class AvailableLotOut(LotOut):
    """A lot offered to the processing lot picker."""
    receipts: list[LotReceiptOut] = []

    @classmethod
    def from_orm_with_names(cls, lot) -> "AvailableLotOut":
        receipts = [
            LotReceiptOut(
                id=r.id,
                supplier_id=r.supplier_id,
                supplier_name=r.supplier.name if r.supplier else "Unknown",
                weight_kg=r.weight_kg,
                date=r.date,
            )
            for r in lot.receipts
        ]
        return cls(**LotOut.model_validate(lot).model_dump(), receipts=receipts)

    @property
    def supplier_names(self) -> list[str]:
        return sorted({r.supplier_name for r in self.receipts})
