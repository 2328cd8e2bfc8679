"""Storage driver protocol, file handles and file resolution results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageDriver(Protocol):
    """Protocol for backend-specific storage drivers.

    Identifiers are paths relative to the storage root, as kept in
    ``FileRecord.identifier``.
    """

    def exists(self, identifier: str) -> bool:
        """Return True if the object behind ``identifier`` exists."""
        ...

    def hash(self, identifier: str, algorithm: str) -> str:
        """Return the hex digest of the object's current bytes."""
        ...


@dataclass
class ResourceStorage:
    """A storage row bound to its live driver."""

    storage_id: int
    driver: StorageDriver

    def hash_file(self, handle: FileHandle, algorithm: str = "sha1") -> str:
        return self.driver.hash(handle.identifier, algorithm)


@dataclass
class FileHandle:
    """A resolved file: its index id, location and owning storage."""

    file_id: int
    identifier: str
    storage: ResourceStorage

    def exists(self) -> bool:
        return self.storage.driver.exists(self.identifier)


@dataclass(frozen=True)
class Resolved:
    handle: FileHandle


@dataclass(frozen=True)
class NotFound:
    """No file record exists for ``file_id``."""

    file_id: int


@dataclass(frozen=True)
class ResolutionFailed:
    """The record exists but no usable handle could be built for it."""

    file_id: int
    cause: Exception


ResolutionResult = Resolved | NotFound | ResolutionFailed
