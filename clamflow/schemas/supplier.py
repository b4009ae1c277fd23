"""Pydantic schemas for suppliers."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from clamflow.schemas.validators import require_text, sanitize_string


class SupplierCreate(BaseModel):
    name: str = Field(..., max_length=255)
    contact: str = Field("", max_length=255)
    license_number: str = Field("", max_length=100)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return require_text(v, 255)

    @field_validator("contact", "license_number")
    @classmethod
    def _strip(cls, v: str) -> str:
        return sanitize_string(v, 255)


class SupplierUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    name: str | None = Field(None, max_length=255)
    contact: str | None = Field(None, max_length=255)
    license_number: str | None = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return require_text(v, 255) if v is not None else None

    @field_validator("contact", "license_number")
    @classmethod
    def _strip(cls, v: str | None) -> str | None:
        return sanitize_string(v, 255) if v is not None else None


class SupplierOut(BaseModel):
    id: int
    name: str
    contact: str
    license_number: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
