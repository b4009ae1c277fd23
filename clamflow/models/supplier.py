"""Supplier — a licensed harvester delivering raw shellfish.

Reference data: created by an admin, rarely deleted, and never deleted
while a receipt still points at it.
"""

from datetime import datetime

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clamflow.database import Base
from clamflow.models.types import Timestamp, utcnow


class Supplier(Base):
    __tablename__ = "suppliers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact: Mapped[str] = mapped_column(String(255), default="")
    license_number: Mapped[str] = mapped_column(String(100), default="", index=True)
    created_at: Mapped[datetime] = mapped_column(Timestamp, default=utcnow)

    receipts = relationship("RawMaterial", back_populates="supplier")
