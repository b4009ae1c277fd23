"""Processing service.

Turns a pending lot into graded output:
  - Validates every box (positive weight, grade defined for its type)
  - Numbers boxes that arrive without a box number
  - Totals shell-on and meat weight and computes yield against the lot's
    intake weight
  - Stores the batch and moves the lot to ``processing`` in one savepoint

A lot is processed exactly once: a second batch for the same lot is
rejected with ConflictError.

Lot lifecycle:  pending → processing (submit) → completed (complete_lot)
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clamflow.exceptions import ConflictError, NotFoundError, ValidationError
from clamflow.models.processing_batch import ProcessingBatch, ProcessingBox
from clamflow.models.product_grade import ProductGrade
from clamflow.models.types import utcnow
from clamflow.schemas.common import PRODUCT_TYPES, validate_input
from clamflow.schemas.lot import LotOut
from clamflow.schemas.processing import BoxIn, ProcessingBatchCreate, ProcessingBatchOut
from clamflow.services.lots import load_lot
from clamflow.utils.numbering import BOX_ENTITY_BY_TYPE, generate_code

logger = logging.getLogger(__name__)


def compute_yield_percentage(output_kg: float, intake_kg: float) -> float:
    """Output weight as a percentage of the lot's intake weight (2 dp)."""
    if intake_kg <= 0:
        return 0.0
    return round(output_kg / intake_kg * 100.0, 2)


async def _grade_codes_by_type(db: AsyncSession) -> dict[str, set[str]]:
    result = await db.execute(select(ProductGrade.product_type, ProductGrade.code))
    codes: dict[str, set[str]] = {t: set() for t in PRODUCT_TYPES}
    for product_type, code in result.all():
        codes.setdefault(product_type, set()).add(code)
    return codes


def _check_grades(boxes: list[BoxIn], codes: dict[str, set[str]]) -> None:
    errors = []
    for index, box in enumerate(boxes):
        if box.grade not in codes.get(box.product_type, set()):
            errors.append({
                "field": f"boxes -> {index} -> grade",
                "message": f"Grade {box.grade!r} is not defined for {box.product_type}",
                "type": "unknown_grade",
            })
    if errors:
        raise ValidationError(errors[0]["message"], details={"errors": errors})


async def _box_numbers(db: AsyncSession, boxes: list[BoxIn]) -> list[str]:
    """Keep supplied box numbers, generate the rest.

    Must run before anything is added to the session: the numbering query
    autoflushes.
    """
    used = {b.box_number for b in boxes if b.box_number}
    offsets = {entity: 0 for entity in BOX_ENTITY_BY_TYPE.values()}
    numbers = []
    for box in boxes:
        if box.box_number:
            numbers.append(box.box_number)
            continue
        entity = BOX_ENTITY_BY_TYPE[box.product_type]
        while True:
            code = await generate_code(db, entity, offset=offsets[entity])
            offsets[entity] += 1
            if code not in used:
                break
        used.add(code)
        numbers.append(code)
    return numbers


async def submit_processing_batch(
    db: AsyncSession,
    *,
    lot_number: str,
    boxes: list,
) -> ProcessingBatchOut:
    """Record the graded boxes produced from a lot.

    ``boxes`` items are dicts or BoxIn with product_type ("shell-on" or
    "meat"), weight_kg, grade and an optional box_number.

    Raises:
        ValidationError: no boxes, non-positive weight, missing or unknown grade
        NotFoundError: unknown lot
        ConflictError: the lot has already been processed
    """
    body = validate_input(ProcessingBatchCreate, lot_number=lot_number, boxes=boxes)

    lot = await load_lot(db, body.lot_number, with_receipts=False)
    _check_grades(body.boxes, await _grade_codes_by_type(db))
    if lot.status != "pending":
        raise ConflictError(
            f"Lot {lot.lot_number} is already {lot.status}; a lot is processed once",
            error_code="LOT_ALREADY_PROCESSED",
        )

    numbers = await _box_numbers(db, body.boxes)
    shell_on_kg = sum(b.weight_kg for b in body.boxes if b.product_type == "shell-on")
    meat_kg = sum(b.weight_kg for b in body.boxes if b.product_type == "meat")

    async with db.begin_nested():
        batch = ProcessingBatch(
            lot_id=lot.id,
            lot_number=lot.lot_number,
            shell_on_weight_kg=shell_on_kg,
            meat_weight_kg=meat_kg,
            yield_percentage=compute_yield_percentage(
                shell_on_kg + meat_kg, lot.total_weight_kg
            ),
            date=utcnow(),
            status="completed",
            boxes=[
                ProcessingBox(
                    position=position,
                    product_type=box.product_type,
                    weight_kg=box.weight_kg,
                    box_number=number,
                    grade=box.grade,
                )
                for position, (box, number) in enumerate(zip(body.boxes, numbers))
            ],
        )
        db.add(batch)
        lot.status = "processing"
        await db.flush()

    logger.info(
        "Processed lot %s: %d box(es), shell-on %.2f kg, meat %.2f kg, yield %.2f%%",
        lot.lot_number, len(batch.boxes), shell_on_kg, meat_kg, batch.yield_percentage,
    )
    return ProcessingBatchOut.model_validate(batch)


async def complete_lot(db: AsyncSession, lot_number: str) -> LotOut:
    """Close a processed lot (processing → completed)."""
    lot = await load_lot(db, lot_number)
    if lot.status != "processing":
        raise ConflictError(
            f"Lot {lot.lot_number} is {lot.status}, must be 'processing' to complete",
            error_code="INVALID_LOT_STATUS",
        )
    lot.status = "completed"
    await db.flush()
    logger.info("Completed lot %s", lot.lot_number)
    return LotOut.model_validate(lot)


async def list_batches(
    db: AsyncSession, lot_number: str | None = None
) -> list[ProcessingBatchOut]:
    stmt = select(ProcessingBatch).options(selectinload(ProcessingBatch.boxes))
    if lot_number:
        stmt = stmt.where(ProcessingBatch.lot_number == lot_number)
    stmt = stmt.order_by(ProcessingBatch.date.desc(), ProcessingBatch.id.desc())
    result = await db.execute(stmt)
    return [ProcessingBatchOut.model_validate(b) for b in result.scalars().all()]


async def get_batch(db: AsyncSession, batch_id: int) -> ProcessingBatchOut:
    result = await db.execute(
        select(ProcessingBatch)
        .where(ProcessingBatch.id == batch_id)
        .options(selectinload(ProcessingBatch.boxes))
    )
    batch = result.scalar_one_or_none()
    if not batch:
        raise NotFoundError("Processing batch", batch_id)
    return ProcessingBatchOut.model_validate(batch)
