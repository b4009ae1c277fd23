"""ProductGrade — quality grade codes per product type.

Seeded on first run with A (Premium) and B (Standard) for both shell-on
and meat.  Processed boxes and packages refer to a grade by its code
within their product type.
"""

from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clamflow.database import Base


class ProductGrade(Base):
    __tablename__ = "product_grades"
    __table_args__ = (
        UniqueConstraint("code", "product_type", name="uq_product_grades_code_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    # shell-on | meat
    product_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
