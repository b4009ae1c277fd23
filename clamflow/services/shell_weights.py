"""Shell-weight ledger.

A running log of shell-weight observations, independent of lots.
Entries are recorded and deleted; never edited.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clamflow.exceptions import NotFoundError
from clamflow.models.shell_weight import ShellWeight
from clamflow.models.types import coerce_datetime, utcnow
from clamflow.schemas.common import validate_input
from clamflow.schemas.shell_weight import ShellWeightCreate, ShellWeightOut

logger = logging.getLogger(__name__)


async def record_shell_weight(
    db: AsyncSession,
    *,
    weight_kg: float,
    date: datetime | None = None,
    notes: str | None = None,
) -> ShellWeightOut:
    body = validate_input(ShellWeightCreate, weight_kg=weight_kg, date=date, notes=notes)
    now = utcnow()
    entry = ShellWeight(
        weight_kg=body.weight_kg,
        date=coerce_datetime(body.date) or now,
        notes=body.notes,
        created_at=now,
    )
    db.add(entry)
    await db.flush()
    logger.info("Recorded shell weight %d: %.2f kg", entry.id, entry.weight_kg)
    return ShellWeightOut.model_validate(entry)


async def delete_shell_weight(db: AsyncSession, shell_weight_id: int) -> None:
    """Remove one ledger entry.  Confirmation is the caller's concern."""
    entry = await db.get(ShellWeight, shell_weight_id)
    if not entry:
        raise NotFoundError("Shell weight", shell_weight_id)
    await db.delete(entry)
    await db.flush()
    logger.info("Deleted shell weight %d", shell_weight_id)


async def list_shell_weights(db: AsyncSession) -> list[ShellWeightOut]:
    """Ledger entries, newest first."""
    result = await db.execute(
        select(ShellWeight).order_by(ShellWeight.date.desc(), ShellWeight.id.desc())
    )
    return [ShellWeightOut.model_validate(e) for e in result.scalars().all()]
