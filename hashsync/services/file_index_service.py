"""Queries and updates over the file index tables.

All values are bound parameters typed by their target column, so driver
tags, ids and hashes never end up interpolated into SQL text.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from hashsync.models.file import FileRecord, ProcessedFileRecord, Storage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Row, Select
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def _in_scope(stmt: Select, driver: str) -> Select:
    """Restrict to present files stored under storages using ``driver``."""
    return stmt.join(Storage, FileRecord.storage_id == Storage.id).where(
        Storage.driver == driver,
        FileRecord.missing.is_(False),
    )


async def count_candidates(session: AsyncSession, driver: str) -> int:
    """Count files under ``driver`` storages that are not marked missing."""
    stmt = _in_scope(select(func.count(FileRecord.id)), driver)
    return int((await session.execute(stmt)).scalar_one())


async def fetch_candidates(
    session: AsyncSession,
    driver: str,
    *,
    after_id: int = 0,
    limit: int,
) -> Sequence[Row]:
    """Fetch the next page of candidate file rows, ascending by id.

    Only rows with ``id > after_id`` are returned, which makes consecutive
    pages (and resumed runs) continue exactly where the previous one stopped.
    """
    stmt = _in_scope(select(*FileRecord.__table__.c), driver).order_by(FileRecord.id)
    if after_id > 0:
        stmt = stmt.where(FileRecord.id > after_id)
    result = await session.execute(stmt.limit(limit))
    return result.all()


async def mark_file_as_missing(session: AsyncSession, file_id: int) -> None:
    await session.execute(
        update(FileRecord).where(FileRecord.id == file_id).values(missing=True)
    )


async def update_file_hash(session: AsyncSession, file_id: int, content_hash: str) -> str:
    """Set the content hash of one file. Returns the SQL issued."""
    stmt = update(FileRecord).where(FileRecord.id == file_id).values(content_hash=content_hash)
    await session.execute(stmt)
    return str(stmt)


async def update_processed_file_hashes(
    session: AsyncSession, original_id: int, content_hash: str
) -> str:
    """Point all variants of ``original_id`` at the new hash. Returns the SQL issued."""
    stmt = (
        update(ProcessedFileRecord)
        .where(ProcessedFileRecord.original_id == original_id)
        .values(original_file_hash=content_hash)
    )
    await session.execute(stmt)
    return str(stmt)
