"""SQLAlchemy ORM models for hashsync."""

from hashsync.models.base import Base
from hashsync.models.file import FileRecord, ProcessedFileRecord, Storage
from hashsync.models.registry import RegistryEntry

__all__ = [
    "Base",
    "FileRecord",
    "ProcessedFileRecord",
    "RegistryEntry",
    "Storage",
]
