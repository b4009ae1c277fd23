"""Pydantic schemas for the shell-weight ledger."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from clamflow.schemas.validators import optional_text


class ShellWeightCreate(BaseModel):
    weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    date: datetime | None = None
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def _notes(cls, v: str | None) -> str | None:
        return optional_text(v)


class ShellWeightOut(BaseModel):
    id: int
    weight_kg: float
    date: datetime
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
