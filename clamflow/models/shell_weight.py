"""ShellWeight — a standalone shell-weight observation.

Not tied to any lot.  Entries are created and deleted; never edited.
"""

from datetime import datetime

from sqlalchemy import Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from clamflow.database import Base
from clamflow.models.types import Timestamp, utcnow


class ShellWeight(Base):
    __tablename__ = "shell_weights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    weight_kg: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(Timestamp, default=utcnow, index=True)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(Timestamp, default=utcnow)
