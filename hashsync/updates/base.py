"""Upgrade wizard protocol and result type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass
class UpdateResult:
    """Outcome of ``perform_update``."""

    success: bool
    database_queries: list[str] = field(default_factory=list)
    custom_message: str = ""


@runtime_checkable
class UpgradeWizard(Protocol):
    """A one-shot maintenance job offered until it has completed once."""

    identifier: str
    title: str

    async def check_for_update(self) -> tuple[bool, str]:
        """Return (update needed, human-readable description). Must not write."""
        ...

    async def perform_update(self) -> UpdateResult:
        """Run the job. Unrecoverable failures propagate as exceptions."""
        ...
