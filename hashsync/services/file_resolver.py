"""Resolve file index ids into live file handles."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from hashsync.exceptions import StorageDriverError
from hashsync.models.file import FileRecord, Storage
from hashsync.storage.base import (
    FileHandle,
    NotFound,
    ResolutionFailed,
    ResolutionResult,
    Resolved,
    ResourceStorage,
)
from hashsync.storage.registry import get_driver

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hashsync.storage.registry import DriverFactory

logger = logging.getLogger(__name__)


class FileResolver:
    """Build ``FileHandle`` objects from the file index.

    Storage drivers are created once per storage and reused.  Database errors
    propagate; everything that makes a single file unusable is returned as a
    ``NotFound`` or ``ResolutionFailed`` value.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        drivers: dict[str, DriverFactory] | None = None,
    ) -> None:
        self.session = session
        self.drivers = drivers
        self._storages: dict[int, ResourceStorage] = {}

    async def _get_storage(self, storage_id: int) -> ResourceStorage:
        cached = self._storages.get(storage_id)
        if cached is not None:
            return cached

        row = await self.session.get(Storage, storage_id)
        if row is None:
            msg = f"Storage {storage_id} does not exist"
            raise StorageDriverError(msg)
        configuration = json.loads(row.configuration or "{}")
        if not isinstance(configuration, dict):
            msg = f"Storage {storage_id} configuration must be a JSON object"
            raise StorageDriverError(msg)
        storage = ResourceStorage(
            storage_id=storage_id,
            driver=get_driver(row.driver, configuration, drivers=self.drivers),
        )
        self._storages[storage_id] = storage
        return storage

    async def resolve(self, file_id: int) -> ResolutionResult:
        record = await self.session.get(FileRecord, file_id)
        if record is None:
            return NotFound(file_id)
        try:
            storage = await self._get_storage(record.storage_id)
        except (StorageDriverError, ValueError) as exc:
            logger.debug("Cannot resolve file %d: %s", file_id, exc)
            return ResolutionFailed(file_id, exc)
        return Resolved(FileHandle(file_id=file_id, identifier=record.identifier, storage=storage))
