"""Pytest configuration and fixtures for ClamFlow tests.

Every test gets its own SQLite file under ``tmp_path`` opened at the
current schema version, so tests never share state.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from clamflow.database import Store
from clamflow.schemas.supplier import SupplierOut
from clamflow.services.receipts import record_receipt
from clamflow.services.reference import create_supplier


# ── Store Fixtures ───────────────────────────────────────────────

@pytest.fixture
def store_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'clamflow_test.db'}"


@pytest_asyncio.fixture
async def store(store_url: str) -> AsyncGenerator[Store, None]:
    """An opened store at the current schema version."""
    store = Store(url=store_url, echo=False)
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def empty_store(store_url: str) -> AsyncGenerator[Store, None]:
    """A store that has never been opened (schema v0)."""
    store = Store(url=store_url, echo=False)
    yield store
    await store.close()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def supplier(store: Store) -> SupplierOut:
    async with store.session() as db:
        return await create_supplier(
            db, name="Bay Clams", contact="555-0102", license_number="LIC002"
        )


@pytest_asyncio.fixture
async def make_receipt(store: Store, supplier: SupplierOut):
    """Factory: record a pending receipt and return it."""

    async def _make(weight_kg: float = 50.0, supplier_id: int | None = None):
        async with store.session() as db:
            return await record_receipt(
                db,
                supplier_id=supplier_id or supplier.id,
                weight_kg=weight_kg,
            )

    return _make


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
