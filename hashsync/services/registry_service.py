"""Durable namespaced registry and upgrade wizard completion flags."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select

from hashsync.models.registry import RegistryEntry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

WIZARD_DONE_NAMESPACE = "upgradeWizardDone"


class Registry:
    """Key/value store keyed by ``(namespace, key)``.

    Values are stored as JSON.  Writes are flushed but not committed: the
    caller decides when the surrounding transaction ends.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, namespace: str, key: str) -> Any:
        """Return the stored value, or None if there is no entry."""
        stmt = select(RegistryEntry.value).where(
            RegistryEntry.namespace == namespace,
            RegistryEntry.key == key,
        )
        raw = (await self.session.execute(stmt)).scalar_one_or_none()
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, namespace: str, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        entry = await self.session.get(RegistryEntry, (namespace, key))
        if entry is None:
            self.session.add(RegistryEntry(namespace=namespace, key=key, value=encoded))
        else:
            entry.value = encoded
        await self.session.flush()

    async def remove(self, namespace: str, key: str) -> None:
        await self.session.execute(
            delete(RegistryEntry).where(
                RegistryEntry.namespace == namespace,
                RegistryEntry.key == key,
            )
        )
        await self.session.flush()


class CompletionFlag:
    """Durable "this wizard has run to completion" marker."""

    def __init__(self, registry: Registry, identifier: str) -> None:
        self.registry = registry
        self.identifier = identifier

    async def is_done(self) -> bool:
        return bool(await self.registry.get(WIZARD_DONE_NAMESPACE, self.identifier))

    async def mark_done(self) -> None:
        await self.registry.set(WIZARD_DONE_NAMESPACE, self.identifier, True)

    async def reset(self) -> None:
        """Forget completion so the wizard is offered again."""
        logger.info("Resetting completion flag for %s", self.identifier)
        await self.registry.remove(WIZARD_DONE_NAMESPACE, self.identifier)
