"""Pydantic schemas for product grades."""

from pydantic import BaseModel, Field, field_validator

from clamflow.schemas.common import ProductType
from clamflow.schemas.validators import normalize_code, require_text, sanitize_string


class GradeCreate(BaseModel):
    code: str = Field(..., max_length=20)
    name: str = Field(..., max_length=100)
    description: str = ""
    product_type: ProductType

    @field_validator("code")
    @classmethod
    def _code(cls, v: str) -> str:
        return normalize_code(v, 20).upper()

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return require_text(v, 100)

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return sanitize_string(v)


class GradeUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    code: str | None = Field(None, max_length=20)
    name: str | None = Field(None, max_length=100)
    description: str | None = None
    product_type: ProductType | None = None

    @field_validator("code")
    @classmethod
    def _code(cls, v: str | None) -> str | None:
        return normalize_code(v, 20).upper() if v is not None else None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return require_text(v, 100) if v is not None else None


class GradeOut(BaseModel):
    id: int
    code: str
    name: str
    description: str
    product_type: ProductType

    model_config = {"from_attributes": True}
