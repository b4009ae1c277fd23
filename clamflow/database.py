"""Database engine, session factory, and the Store lifecycle.

The Store is constructed explicitly by the composition root (see
``clamflow.cli``) and handed to callers; nothing connects at import time.

Lifecycle:
  - open()     → create/upgrade to SCHEMA_VERSION, refuse newer stores
  - migrate()  → run ordered Alembic steps between two versions
  - reset()    → drop everything and rebuild with seed reference data
  - session()  → one unit of work: commit on success, rollback on error
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import MetaData, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from clamflow.config import settings
from clamflow.exceptions import (
    ClamFlowException,
    ConflictError,
    NotFoundError,
    SchemaVersionError,
    StorageError,
)

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# Alembic revisions are the zero-padded version number ("0004" ↔ 4).
SCHEMA_VERSION = 4


class Base(DeclarativeBase):
    """Models for every ClamFlow table."""
    pass


def revision_for(version: int) -> str:
    return f"{version:04d}"


def version_for(revision: str | None) -> int:
    if revision is None:
        return 0
    try:
        return int(revision)
    except ValueError:
        raise SchemaVersionError(
            f"Unrecognised schema revision: {revision!r}",
            found=revision,
            expected=SCHEMA_VERSION,
        )


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """Foreign keys on, and BEGIN emitted by SQLAlchemy rather than the driver.

    Needed for SAVEPOINT and transactional DDL on SQLite.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _current_revision(connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def _drop_everything(connection) -> None:
    # Reflect rather than use Base.metadata: a newer build may have left
    # tables this build does not know about.
    metadata = MetaData()
    metadata.reflect(bind=connection)
    metadata.drop_all(bind=connection)


def _integrity_error(exc: IntegrityError) -> ClamFlowException:
    """Translate a constraint failure into the matching typed error."""
    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)
    if "unique" in error_msg.lower():
        return ConflictError(
            "A record with this value already exists", error_code="DUPLICATE_RECORD"
        )
    if "foreign key" in error_msg.lower():
        return NotFoundError("Referenced record", error_msg)
    if "not null" in error_msg.lower():
        return ConflictError(
            "Required field is missing", error_code="NULL_VALUE_NOT_ALLOWED"
        )
    return ConflictError("Database constraint violation", error_code="INTEGRITY_ERROR")


class Store:
    """A single named ClamFlow database with a versioned schema."""

    def __init__(self, url: str | None = None, echo: bool | None = None):
        self.url = url or settings.database_url
        self.engine = create_async_engine(
            self.url,
            echo=settings.echo_sql if echo is None else echo,
        )
        if self.engine.dialect.name == "sqlite":
            _enable_sqlite_transactions(self.engine)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    # ── Schema lifecycle ────────────────────────────────────

    def alembic_config(self) -> Config:
        cfg = Config()
        cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
        cfg.set_main_option("sqlalchemy.url", self.url)
        return cfg

    async def current_version(self) -> int:
        """Schema version recorded in the store; 0 for an empty store."""
        try:
            async with self.engine.connect() as conn:
                revision = await conn.run_sync(_current_revision)
        except SQLAlchemyError as exc:
            logger.error("Could not read schema version of %s: %s", self.url, exc)
            raise StorageError(f"Could not read schema version of {self.url}") from exc
        return version_for(revision)

    async def open(self) -> None:
        """Create or upgrade the store to SCHEMA_VERSION.

        Raises SchemaVersionError if the store was written by a newer
        build.  The caller decides whether to reset() in that case.
        """
        current = await self.current_version()
        if current > SCHEMA_VERSION:
            raise SchemaVersionError(
                f"Store {self.url} is at schema v{current}; this build "
                f"supports up to v{SCHEMA_VERSION}. Reset the store to continue.",
                found=current,
                expected=SCHEMA_VERSION,
            )
        if current < SCHEMA_VERSION:
            await self.migrate(current, SCHEMA_VERSION)
        logger.info("Opened store %s at schema v%d", self.url, SCHEMA_VERSION)

    async def migrate(self, from_version: int, to_version: int) -> None:
        """Apply the upgrade steps between two schema versions.

        Every step checks for existing tables / rows before writing, so an
        interrupted run can be repeated from the recorded version.
        """
        if not 0 <= to_version <= SCHEMA_VERSION:
            raise SchemaVersionError(
                f"Unknown target schema version: {to_version}",
                found=to_version,
                expected=SCHEMA_VERSION,
            )
        if to_version < from_version:
            raise SchemaVersionError(
                f"Cannot migrate backwards from v{from_version} to v{to_version}",
                found=from_version,
                expected=to_version,
            )

        current = await self.current_version()
        if current != from_version:
            raise SchemaVersionError(
                f"Store is at schema v{current}, not v{from_version}",
                found=current,
                expected=from_version,
            )
        if from_version == to_version:
            return

        logger.info("Migrating store %s from v%d to v%d", self.url, from_version, to_version)
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(self._upgrade, revision_for(to_version))
        except SQLAlchemyError as exc:
            logger.error("Migration of %s to v%d failed: %s", self.url, to_version, exc)
            raise StorageError(f"Migration to schema v{to_version} failed") from exc

    def _upgrade(self, connection, revision: str) -> None:
        cfg = self.alembic_config()
        cfg.attributes["connection"] = connection
        command.upgrade(cfg, revision)

    async def reset(self) -> None:
        """Delete all data and rebuild at SCHEMA_VERSION with seed data."""
        logger.warning("Resetting store %s: all data will be deleted", self.url)
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(_drop_everything)
        except SQLAlchemyError as exc:
            logger.error("Reset of %s failed: %s", self.url, exc)
            raise StorageError(f"Could not reset {self.url}") from exc
        await self.migrate(0, SCHEMA_VERSION)

    async def close(self) -> None:
        await self.engine.dispose()

    # ── Unit of work ────────────────────────────────────────

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; commit on success, roll back on any error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.warning("Integrity error, transaction rolled back: %s", exc.orig)
                raise _integrity_error(exc) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Storage error, transaction rolled back: %s", exc)
                raise StorageError() from exc
            except Exception:
                await session.rollback()
                raise
