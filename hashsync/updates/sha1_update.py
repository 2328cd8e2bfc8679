"""Recompute sha1 hashes of files stored through one storage driver.

Files whose hash changed get the new value written to their file record and
to every processed variant derived from them, so the variants are not
regenerated on next use.  Progress is checkpointed after every visited file;
an interrupted run resumes after the last checkpointed id.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hashsync.exceptions import StorageDriverError
from hashsync.services.file_index_service import (
    count_candidates,
    fetch_candidates,
    mark_file_as_missing,
    update_file_hash,
    update_processed_file_hashes,
)
from hashsync.services.file_resolver import FileResolver
from hashsync.services.registry_service import CompletionFlag, Registry
from hashsync.storage.base import Resolved
from hashsync.storage.registry import list_drivers
from hashsync.updates.base import UpdateResult

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hashsync.config import Settings
    from hashsync.storage.registry import DriverFactory

logger = logging.getLogger(__name__)

CHECKPOINT_NAMESPACE = "hashsync"
CHECKPOINT_KEY = "sha1Update"

DESCRIPTION = (
    "The hash calculation for file contents has changed, so processed files"
    " refer to outdated hashes of their originals. They can be updated on"
    " demand, when a processed file is first needed, or all at once by running"
    " this wizard. If you have many processed files, prefer the wizard:"
    " updating on demand may put a lot of load on the server."
)


class Sha1Update:
    """Upgrade wizard bringing stored sha1 hashes in line with storage contents."""

    identifier = "sha1Update"
    title = (
        "[Optional] Update file and processed file records to match new sha1 calculation."
    )

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        *,
        drivers: dict[str, DriverFactory] | None = None,
        registry: Registry | None = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.drivers = drivers
        self.registry = registry if registry is not None else Registry(session)
        self.completion = CompletionFlag(self.registry, self.identifier)

    async def get_checkpoint(self) -> int | None:
        value = await self.registry.get(CHECKPOINT_NAMESPACE, CHECKPOINT_KEY)
        return None if value is None else int(value)

    async def check_for_update(self) -> tuple[bool, str]:
        if await self.completion.is_done():
            return False, DESCRIPTION

        if self.settings.target_driver not in list_drivers(self.drivers):
            logger.warning(
                "No storage driver registered for %r: %s cannot run until one is",
                self.settings.target_driver,
                self.identifier,
            )

        # A checkpoint means an earlier run was interrupted
        if await self.get_checkpoint() is not None:
            return True, DESCRIPTION

        count = await count_candidates(self.session, self.settings.target_driver)
        return count > 0, DESCRIPTION

    async def perform_update(self) -> UpdateResult:
        driver = self.settings.target_driver
        if driver not in list_drivers(self.drivers):
            msg = f"No storage driver registered for {driver!r}"
            raise StorageDriverError(msg)

        first_id = await self.get_checkpoint() or 0
        if first_id > 0:
            logger.info("Resuming %s after file %d", self.identifier, first_id)
        else:
            logger.info("Starting %s for storages using %s", self.identifier, driver)

        resolver = FileResolver(self.session, drivers=self.drivers)
        queries: list[str] = []
        visited = updated = missing = 0
        last_id = first_id

        while True:
            rows = await fetch_candidates(
                self.session, driver, after_id=last_id, limit=self.settings.batch_size
            )
            if not rows:
                break

            for row in rows:
                visited += 1
                last_id = row.id
                resolution = await resolver.resolve(row.id)

                if not isinstance(resolution, Resolved) or not resolution.handle.exists():
                    logger.warning("File %d (%s) is missing", row.id, row.identifier)
                    await mark_file_as_missing(self.session, row.id)
                    missing += 1
                else:
                    handle = resolution.handle
                    content_hash = handle.storage.hash_file(
                        handle, self.settings.hash_algorithm
                    )
                    if content_hash != row.content_hash:
                        logger.debug(
                            "File %d hash changed: %s -> %s",
                            row.id,
                            row.content_hash,
                            content_hash,
                        )
                        queries.append(await update_file_hash(self.session, row.id, content_hash))
                        queries.append(
                            await update_processed_file_hashes(self.session, row.id, content_hash)
                        )
                        updated += 1

                # Advances for missing and unchanged files too
                await self.registry.set(CHECKPOINT_NAMESPACE, CHECKPOINT_KEY, row.id)
                await self.session.commit()

        await self.registry.remove(CHECKPOINT_NAMESPACE, CHECKPOINT_KEY)
        await self.completion.mark_done()
        await self.session.commit()

        message = (
            f"Checked {visited} file(s): {updated} hash(es) updated,"
            f" {missing} file(s) marked missing."
        )
        logger.info("%s finished. %s", self.identifier, message)
        return UpdateResult(success=True, database_queries=queries, custom_message=message)
