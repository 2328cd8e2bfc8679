"""Shared test fixtures for hashsync."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from hashsync.config import Settings
from hashsync.database import ensure_tables
from hashsync.models.file import FileRecord, ProcessedFileRecord, Storage
from hashsync.storage.local import LocalDriver
from tests.fakes import TARGET_DRIVER, FakeObjectDriver

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path
    from typing import Any

    from hashsync.storage.registry import DriverFactory
    from tests.fakes import AddFile, AddStorage


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings backed by a temporary database file."""
    db_path = tmp_path / "test.db"
    return Settings(
        _env_file=None,
        debug=True,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        target_driver=TARGET_DRIVER,
        batch_size=2,
    )


@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(
    db_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Create a test database session with all tables in place."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        await ensure_tables(session)
        yield session


@pytest.fixture
def objects() -> dict[str, bytes]:
    """Contents of the fake object storage, keyed by identifier."""
    return {}


@pytest.fixture
def fake_driver(objects: dict[str, bytes]) -> FakeObjectDriver:
    return FakeObjectDriver(objects)


@pytest.fixture
def drivers(fake_driver: FakeObjectDriver) -> dict[str, DriverFactory]:
    """Driver map with the fake object driver under the target tag."""
    return {
        TARGET_DRIVER: lambda configuration: fake_driver,
        "Local": LocalDriver.from_configuration,
    }


@pytest.fixture
def add_storage(db_session: AsyncSession) -> AddStorage:
    async def _add(driver: str = TARGET_DRIVER, configuration: dict[str, Any] | None = None) -> int:
        storage = Storage(
            name=driver,
            driver=driver,
            configuration=json.dumps(configuration or {}),
        )
        db_session.add(storage)
        await db_session.commit()
        return storage.id

    return _add


@pytest.fixture
def add_file(db_session: AsyncSession) -> AddFile:
    """Insert a file record and ``variants`` processed files pointing at it."""

    async def _add(
        storage_id: int,
        identifier: str,
        content_hash: str = "",
        *,
        missing: bool = False,
        variants: int = 0,
    ) -> int:
        record = FileRecord(
            storage_id=storage_id,
            identifier=identifier,
            name=identifier.rsplit("/", 1)[-1],
            content_hash=content_hash,
            missing=missing,
        )
        db_session.add(record)
        await db_session.flush()
        for n in range(variants):
            db_session.add(
                ProcessedFileRecord(
                    original_id=record.id,
                    task_type="Image.Preview",
                    identifier=f"_processed_/{n}_{record.name}",
                    original_file_hash=content_hash,
                )
            )
        await db_session.commit()
        return record.id

    return _add
