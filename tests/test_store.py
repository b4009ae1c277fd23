"""Store lifecycle tests: open, version, migrate, reset, unit of work."""

from datetime import datetime

import pytest
from sqlalchemy import func, select, text

from clamflow.database import SCHEMA_VERSION, Store
from clamflow.exceptions import ConflictError, NotFoundError, SchemaVersionError
from clamflow.models.lot import Lot
from clamflow.models.product_grade import ProductGrade
from clamflow.models.raw_material import RawMaterial
from clamflow.models.supplier import Supplier
from clamflow.models.types import coerce_datetime
from clamflow.services.receipts import list_pending
from clamflow.services.reference import list_grades, list_suppliers
from clamflow.utils.seed import seed_product_grades


async def _grade_count(store: Store) -> int:
    async with store.session() as db:
        return (await db.execute(select(func.count(ProductGrade.id)))).scalar()


@pytest.mark.integration
@pytest.mark.asyncio
class TestOpen:
    """Opening creates or upgrades the store."""

    async def test_open_empty_store_creates_schema(self, empty_store):
        assert await empty_store.current_version() == 0
        await empty_store.open()
        assert await empty_store.current_version() == SCHEMA_VERSION

    async def test_open_seeds_default_grades(self, store):
        async with store.session() as db:
            grades = await list_grades(db)
        pairs = {(g.product_type, g.code) for g in grades}
        assert pairs == {("shell-on", "A"), ("shell-on", "B"), ("meat", "A"), ("meat", "B")}

    async def test_open_does_not_seed_suppliers(self, store):
        async with store.session() as db:
            assert await list_suppliers(db) == []

    async def test_open_is_repeatable(self, store):
        await store.open()
        await store.open()
        assert await store.current_version() == SCHEMA_VERSION
        assert await _grade_count(store) == 4

    async def test_open_refuses_newer_store(self, store):
        async with store.engine.begin() as conn:
            await conn.execute(text("UPDATE alembic_version SET version_num = '0099'"))

        with pytest.raises(SchemaVersionError) as exc_info:
            await store.open()
        assert exc_info.value.found == 99
        assert exc_info.value.expected == SCHEMA_VERSION


@pytest.mark.integration
@pytest.mark.asyncio
class TestMigrate:
    """Explicit migration between versions."""

    async def test_stepwise_upgrade(self, empty_store):
        await empty_store.migrate(0, 1)
        assert await empty_store.current_version() == 1
        await empty_store.migrate(1, 2)
        await empty_store.migrate(2, SCHEMA_VERSION)
        assert await empty_store.current_version() == SCHEMA_VERSION
        assert await _grade_count(empty_store) == 4

    async def test_version_one_has_no_grades(self, empty_store):
        await empty_store.migrate(0, 1)
        assert await _grade_count(empty_store) == 0

    async def test_backwards_rejected(self, store):
        with pytest.raises(SchemaVersionError):
            await store.migrate(SCHEMA_VERSION, 1)

    async def test_unknown_target_rejected(self, store):
        with pytest.raises(SchemaVersionError):
            await store.migrate(SCHEMA_VERSION, SCHEMA_VERSION + 1)

    async def test_wrong_starting_version_rejected(self, store):
        with pytest.raises(SchemaVersionError):
            await store.migrate(1, SCHEMA_VERSION)

    async def test_same_version_is_noop(self, store):
        await store.migrate(SCHEMA_VERSION, SCHEMA_VERSION)
        assert await store.current_version() == SCHEMA_VERSION

    async def test_rerun_after_interruption_does_not_duplicate(self, store):
        # Simulate a run that created everything but died before recording it.
        async with store.engine.begin() as conn:
            await conn.execute(text("UPDATE alembic_version SET version_num = '0001'"))

        await store.migrate(1, SCHEMA_VERSION)
        assert await store.current_version() == SCHEMA_VERSION
        assert await _grade_count(store) == 4

    async def test_grade_seed_only_fills_empty_table(self, store):
        async with store.engine.begin() as conn:
            inserted = await conn.run_sync(seed_product_grades)
        assert inserted == 0
        assert await _grade_count(store) == 4


@pytest.mark.integration
@pytest.mark.asyncio
class TestReset:
    """Reset wipes data and rebuilds at the current version."""

    async def test_reset_clears_data_and_reseeds(self, store, supplier):
        await store.reset()

        assert await store.current_version() == SCHEMA_VERSION
        assert await _grade_count(store) == 4
        async with store.session() as db:
            assert await list_suppliers(db) == []

    async def test_reset_recovers_newer_store(self, store):
        async with store.engine.begin() as conn:
            await conn.execute(text("UPDATE alembic_version SET version_num = '0099'"))
            await conn.execute(text("CREATE TABLE future_things (id INTEGER PRIMARY KEY)"))

        await store.reset()
        await store.open()
        assert await store.current_version() == SCHEMA_VERSION


@pytest.mark.integration
@pytest.mark.asyncio
class TestUnitOfWork:
    """Store.session() commits on success and rolls back on error."""

    async def test_commit_on_success(self, store):
        async with store.session() as db:
            db.add(Supplier(name="Ocean Harvest", contact="", license_number=""))

        async with store.session() as db:
            names = (await db.execute(select(Supplier.name))).scalars().all()
        assert names == ["Ocean Harvest"]

    async def test_rollback_on_error(self, store):
        with pytest.raises(RuntimeError):
            async with store.session() as db:
                db.add(Supplier(name="Ocean Harvest", contact="", license_number=""))
                await db.flush()
                raise RuntimeError("abort")

        async with store.session() as db:
            count = (await db.execute(select(func.count(Supplier.id)))).scalar()
        assert count == 0

    async def test_unique_violation_becomes_conflict(self, store):
        with pytest.raises(ConflictError) as exc_info:
            async with store.session() as db:
                db.add(Lot(lot_number="L-001", total_weight_kg=1.0, status="pending"))
                db.add(Lot(lot_number="L-001", total_weight_kg=2.0, status="pending"))
        assert exc_info.value.error_code == "DUPLICATE_RECORD"

    async def test_missing_referenced_row_becomes_not_found(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            async with store.session() as db:
                db.add(RawMaterial(supplier_id=999, weight_kg=10.0, status="pending"))
        assert exc_info.value.resource == "Referenced record"


@pytest.mark.unit
class TestTimestampCoercion:
    """Stored primitives always come back as datetimes."""

    def test_epoch_seconds(self):
        assert coerce_datetime(0) == datetime(1970, 1, 1)

    def test_epoch_milliseconds(self):
        assert coerce_datetime(1_700_000_000_000) == datetime(2023, 11, 14, 22, 13, 20)

    def test_epoch_as_text(self):
        assert coerce_datetime("1700000000") == datetime(2023, 11, 14, 22, 13, 20)

    def test_iso_text(self):
        assert coerce_datetime("2026-10-05T08:30:00") == datetime(2026, 10, 5, 8, 30)

    def test_iso_text_with_zone_is_normalised_to_utc(self):
        assert coerce_datetime("2026-10-05T10:30:00+02:00") == datetime(2026, 10, 5, 8, 30)
        assert coerce_datetime("2026-10-05T08:30:00Z") == datetime(2026, 10, 5, 8, 30)

    def test_blank_is_none(self):
        assert coerce_datetime(None) is None
        assert coerce_datetime("  ") is None


@pytest.mark.integration
@pytest.mark.asyncio
class TestLegacyDates:
    """Rows written with epoch dates load as datetimes."""

    async def test_epoch_row_loads_as_datetime(self, store, supplier):
        async with store.engine.begin() as conn:
            await conn.execute(
                text(
                    "INSERT INTO raw_materials (supplier_id, weight_kg, photo_url, date, status) "
                    "VALUES (:sid, 12.0, '', '1700000000000', 'pending')"
                ),
                {"sid": supplier.id},
            )

        async with store.session() as db:
            receipt = (await db.execute(select(RawMaterial))).scalar_one()
        assert receipt.date == datetime(2023, 11, 14, 22, 13, 20)

    async def test_upgrade_rewrites_epoch_dates_so_lists_sort_by_date(self, store, supplier):
        insert = text(
            "INSERT INTO raw_materials (supplier_id, weight_kg, photo_url, date, status) "
            "VALUES (:sid, :kg, '', :date, 'pending')"
        )
        async with store.engine.begin() as conn:
            # 2026-10-01T00:00:00Z in milliseconds, next to older ISO rows
            await conn.execute(insert, {"sid": supplier.id, "kg": 1.0, "date": "1790812800000"})
            await conn.execute(
                insert, {"sid": supplier.id, "kg": 2.0, "date": "2023-01-01T00:00:00.000000"}
            )
            await conn.execute(insert, {"sid": supplier.id, "kg": 3.0, "date": "1672617600"})
            await conn.execute(text("UPDATE alembic_version SET version_num = '0003'"))

        await store.open()
        assert await store.current_version() == SCHEMA_VERSION

        async with store.session() as db:
            pending = await list_pending(db)
        assert [r.date for r in pending] == [
            datetime(2026, 10, 1),
            datetime(2023, 1, 2),
            datetime(2023, 1, 1),
        ]

        async with store.engine.connect() as conn:
            stored = (await conn.execute(text("SELECT date FROM raw_materials"))).scalars().all()
        assert all("T" in value for value in stored)

    async def test_epoch_rewrite_is_repeatable(self, store):
        async with store.engine.begin() as conn:
            await conn.execute(
                text("INSERT INTO shell_weights (weight_kg, date) VALUES (4.0, '1700000000')")
            )
            await conn.execute(text("UPDATE alembic_version SET version_num = '0003'"))

        await store.migrate(3, SCHEMA_VERSION)
        async with store.engine.begin() as conn:
            await conn.execute(text("UPDATE alembic_version SET version_num = '0003'"))
        await store.migrate(3, SCHEMA_VERSION)

        async with store.engine.connect() as conn:
            stored = (await conn.execute(text("SELECT date FROM shell_weights"))).scalar_one()
        assert stored == "2023-11-14T22:13:20.000000"
