"""Registry of available upgrade wizards."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hashsync.exceptions import UnknownWizardError
from hashsync.updates.sha1_update import Sha1Update

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hashsync.config import Settings
    from hashsync.storage.registry import DriverFactory
    from hashsync.updates.base import UpgradeWizard

WIZARDS: dict[str, type[Sha1Update]] = {
    Sha1Update.identifier: Sha1Update,
}


def get_wizard(
    identifier: str,
    session: AsyncSession,
    settings: Settings,
    *,
    drivers: dict[str, DriverFactory] | None = None,
) -> UpgradeWizard:
    """Instantiate the wizard registered under ``identifier``.

    Raises UnknownWizardError if there is none.
    """
    wizard_cls = WIZARDS.get(identifier)
    if wizard_cls is None:
        msg = f"Unknown upgrade wizard: {identifier!r}. Available: {list(WIZARDS)}"
        raise UnknownWizardError(msg)
    return wizard_cls(session, settings, drivers=drivers)


def list_wizards() -> list[str]:
    """Return the registered wizard identifiers."""
    return list(WIZARDS.keys())
