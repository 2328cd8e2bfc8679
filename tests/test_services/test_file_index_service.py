"""Tests for file index queries and updates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from hashsync.models.file import FileRecord, ProcessedFileRecord
from hashsync.services.file_index_service import (
    count_candidates,
    fetch_candidates,
    mark_file_as_missing,
    update_file_hash,
    update_processed_file_hashes,
)
from tests.fakes import TARGET_DRIVER

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from tests.fakes import AddFile, AddStorage


class TestCandidates:
    async def test_count_filters_driver_and_missing(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        other = await add_storage("Local", {"base_path": "/srv"})
        await add_file(target, "a")
        await add_file(target, "b")
        await add_file(target, "c", missing=True)
        await add_file(other, "d")

        assert await count_candidates(db_session, TARGET_DRIVER) == 2
        assert await count_candidates(db_session, "Local") == 1
        assert await count_candidates(db_session, "Unknown") == 0

    async def test_fetch_orders_by_id_and_pages(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        ids = [await add_file(target, name) for name in ("a", "b", "c")]

        first = await fetch_candidates(db_session, TARGET_DRIVER, limit=2)
        assert [row.id for row in first] == ids[:2]
        rest = await fetch_candidates(db_session, TARGET_DRIVER, after_id=first[-1].id, limit=2)
        assert [row.id for row in rest] == ids[2:]
        assert await fetch_candidates(db_session, TARGET_DRIVER, after_id=ids[-1], limit=2) == []

    async def test_fetch_returns_all_file_columns(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        await add_file(target, "dir/a.jpg", "abc")
        (row,) = await fetch_candidates(db_session, TARGET_DRIVER, limit=10)
        assert row.identifier == "dir/a.jpg"
        assert row.name == "a.jpg"
        assert row.content_hash == "abc"
        assert row.storage_id == target
        assert row.missing is False

    async def test_fetch_skips_missing_and_other_drivers(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        other = await add_storage("Local", {"base_path": "/srv"})
        await add_file(target, "gone", missing=True)
        await add_file(other, "elsewhere")
        keep = await add_file(target, "keep")
        rows = await fetch_candidates(db_session, TARGET_DRIVER, limit=10)
        assert [row.id for row in rows] == [keep]

    async def test_fetch_zero_after_id_means_from_start(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        file_id = await add_file(target, "a")
        rows = await fetch_candidates(db_session, TARGET_DRIVER, after_id=0, limit=10)
        assert [row.id for row in rows] == [file_id]


class TestUpdates:
    async def test_mark_file_as_missing(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        file_id = await add_file(target, "a")
        await mark_file_as_missing(db_session, file_id)
        await db_session.commit()
        missing = await db_session.scalar(
            select(FileRecord.missing).where(FileRecord.id == file_id)
        )
        assert missing is True

    async def test_update_file_hash_returns_parameterized_sql(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        file_id = await add_file(target, "a", "old")
        sql = await update_file_hash(db_session, file_id, "new'; DROP TABLE files; --")
        await db_session.commit()

        assert "DROP TABLE" not in sql
        assert ":content_hash" in sql
        stored = await db_session.scalar(
            select(FileRecord.content_hash).where(FileRecord.id == file_id)
        )
        assert stored == "new'; DROP TABLE files; --"

    async def test_update_processed_file_hashes_only_touches_variants_of_original(
        self, db_session: AsyncSession, add_storage: AddStorage, add_file: AddFile
    ) -> None:
        target = await add_storage()
        original = await add_file(target, "a", "old", variants=2)
        unrelated = await add_file(target, "b", "old", variants=1)

        sql = await update_processed_file_hashes(db_session, original, "new")
        await db_session.commit()

        assert sql.startswith("UPDATE processed_files SET original_file_hash")
        result = await db_session.execute(
            select(ProcessedFileRecord.original_id, ProcessedFileRecord.original_file_hash)
        )
        hashes = sorted(tuple(row) for row in result.all())
        assert hashes == [(original, "new"), (original, "new"), (unrelated, "old")]
