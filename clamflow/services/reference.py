"""Reference data service — suppliers and product grades.

Both are lookup tables read by the intake, processing and packaging
services.  Deleting a row that traceability still depends on is refused:
  - a supplier with receipts
  - a grade used by a processed box or a package of the same product type
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clamflow.exceptions import ConflictError, NotFoundError, ReferentialIntegrityError
from clamflow.models.package import Package
from clamflow.models.processing_batch import ProcessingBox
from clamflow.models.product_grade import ProductGrade
from clamflow.models.raw_material import RawMaterial
from clamflow.models.supplier import Supplier
from clamflow.models.types import utcnow
from clamflow.schemas.common import validate_input
from clamflow.schemas.grade import GradeCreate, GradeOut, GradeUpdate
from clamflow.schemas.supplier import SupplierCreate, SupplierOut, SupplierUpdate
from clamflow.utils.seed import SAMPLE_SUPPLIERS

logger = logging.getLogger(__name__)


# ── Suppliers ────────────────────────────────────────────────

async def _load_supplier(db: AsyncSession, supplier_id: int) -> Supplier:
    supplier = await db.get(Supplier, supplier_id)
    if not supplier:
        raise NotFoundError("Supplier", supplier_id)
    return supplier


async def create_supplier(
    db: AsyncSession,
    *,
    name: str,
    contact: str = "",
    license_number: str = "",
) -> SupplierOut:
    body = validate_input(
        SupplierCreate, name=name, contact=contact, license_number=license_number
    )
    supplier = Supplier(**body.model_dump(), created_at=utcnow())
    db.add(supplier)
    await db.flush()
    logger.info("Created supplier %d (%s)", supplier.id, supplier.name)
    return SupplierOut.model_validate(supplier)


async def update_supplier(db: AsyncSession, supplier_id: int, **changes) -> SupplierOut:
    body = validate_input(SupplierUpdate, **changes)
    supplier = await _load_supplier(db, supplier_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(supplier, field, value)
    await db.flush()
    return SupplierOut.model_validate(supplier)


async def get_supplier(db: AsyncSession, supplier_id: int) -> SupplierOut:
    return SupplierOut.model_validate(await _load_supplier(db, supplier_id))


async def list_suppliers(db: AsyncSession) -> list[SupplierOut]:
    result = await db.execute(select(Supplier).order_by(Supplier.name, Supplier.id))
    return [SupplierOut.model_validate(s) for s in result.scalars().all()]


async def delete_supplier(db: AsyncSession, supplier_id: int) -> None:
    """Delete a supplier that no receipt refers to."""
    supplier = await _load_supplier(db, supplier_id)

    receipts = (
        await db.execute(
            select(func.count(RawMaterial.id)).where(RawMaterial.supplier_id == supplier.id)
        )
    ).scalar() or 0
    if receipts:
        raise ReferentialIntegrityError("Supplier", supplier_id, f"{receipts} receipt(s)")

    await db.delete(supplier)
    await db.flush()
    logger.info("Deleted supplier %d (%s)", supplier_id, supplier.name)


async def seed_sample_suppliers(db: AsyncSession) -> int:
    """Insert the sample suppliers into an empty table; returns rows added."""
    count = (await db.execute(select(func.count(Supplier.id)))).scalar() or 0
    if count:
        return 0
    now = utcnow()
    db.add_all([Supplier(**row, created_at=now) for row in SAMPLE_SUPPLIERS])
    await db.flush()
    logger.info("Seeded %d sample supplier(s)", len(SAMPLE_SUPPLIERS))
    return len(SAMPLE_SUPPLIERS)


# ── Product grades ───────────────────────────────────────────

async def _load_grade(db: AsyncSession, grade_id: int) -> ProductGrade:
    grade = await db.get(ProductGrade, grade_id)
    if not grade:
        raise NotFoundError("Product grade", grade_id)
    return grade


async def _grade_taken(
    db: AsyncSession, code: str, product_type: str, exclude_id: int | None = None
) -> bool:
    stmt = select(ProductGrade.id).where(
        ProductGrade.code == code, ProductGrade.product_type == product_type
    )
    if exclude_id is not None:
        stmt = stmt.where(ProductGrade.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def _grade_usage(db: AsyncSession, grade: ProductGrade) -> int:
    """Boxes and packages that carry this grade for its product type."""
    boxes = (
        await db.execute(
            select(func.count(ProcessingBox.id)).where(
                ProcessingBox.grade == grade.code,
                ProcessingBox.product_type == grade.product_type,
            )
        )
    ).scalar() or 0
    packages = (
        await db.execute(
            select(func.count(Package.id)).where(
                Package.grade == grade.code,
                Package.product_type == grade.product_type,
            )
        )
    ).scalar() or 0
    return boxes + packages


async def create_grade(
    db: AsyncSession,
    *,
    code: str,
    name: str,
    product_type: str,
    description: str = "",
) -> GradeOut:
    body = validate_input(
        GradeCreate,
        code=code,
        name=name,
        product_type=product_type,
        description=description,
    )
    if await _grade_taken(db, body.code, body.product_type):
        raise ConflictError(
            f"Grade {body.code} already exists for {body.product_type}",
            error_code="DUPLICATE_GRADE",
        )
    grade = ProductGrade(**body.model_dump())
    db.add(grade)
    await db.flush()
    logger.info("Created grade %s for %s", grade.code, grade.product_type)
    return GradeOut.model_validate(grade)


async def update_grade(db: AsyncSession, grade_id: int, **changes) -> GradeOut:
    """Edit a grade.  Code and product type are frozen once in use."""
    body = validate_input(GradeUpdate, **changes)
    grade = await _load_grade(db, grade_id)
    updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}

    new_code = updates.get("code", grade.code)
    new_type = updates.get("product_type", grade.product_type)
    if (new_code, new_type) != (grade.code, grade.product_type):
        usage = await _grade_usage(db, grade)
        if usage:
            raise ReferentialIntegrityError(
                "Product grade", f"{grade.code}/{grade.product_type}",
                f"{usage} box(es) or package(s)",
            )
        if await _grade_taken(db, new_code, new_type, exclude_id=grade.id):
            raise ConflictError(
                f"Grade {new_code} already exists for {new_type}",
                error_code="DUPLICATE_GRADE",
            )

    for field, value in updates.items():
        setattr(grade, field, value)
    await db.flush()
    return GradeOut.model_validate(grade)


async def list_grades(
    db: AsyncSession, product_type: str | None = None
) -> list[GradeOut]:
    stmt = select(ProductGrade)
    if product_type:
        stmt = stmt.where(ProductGrade.product_type == product_type)
    stmt = stmt.order_by(ProductGrade.product_type, ProductGrade.code)
    result = await db.execute(stmt)
    return [GradeOut.model_validate(g) for g in result.scalars().all()]


async def delete_grade(db: AsyncSession, grade_id: int) -> None:
    """Delete a grade that no box or package uses."""
    grade = await _load_grade(db, grade_id)
    usage = await _grade_usage(db, grade)
    if usage:
        raise ReferentialIntegrityError(
            "Product grade", f"{grade.code}/{grade.product_type}",
            f"{usage} box(es) or package(s)",
        )
    await db.delete(grade)
    await db.flush()
    logger.info("Deleted grade %s for %s", grade.code, grade.product_type)
