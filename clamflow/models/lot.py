"""Lot — one or more receipts tracked and processed as a unit.

``total_weight_kg`` is the sum of the receipts' weights at assembly time.
It is a snapshot and is never recomputed from the receipts.

Lifecycle:  pending → processing → completed
"""

from datetime import datetime

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clamflow.database import Base
from clamflow.models.types import Timestamp, utcnow


class Lot(Base):
    __tablename__ = "lots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lot_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    total_weight_kg: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    # pending | processing | completed
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    created_at: Mapped[datetime] = mapped_column(Timestamp, default=utcnow, index=True)

    # ── Relationships ────────────────────────────────────────
    # Load explicitly with selectinload(); lazy loads are not available
    # on an AsyncSession.
    receipts = relationship(
        "RawMaterial", back_populates="lot", order_by="RawMaterial.id"
    )

    @property
    def receipt_ids(self) -> list[int]:
        return [r.id for r in self.receipts]
