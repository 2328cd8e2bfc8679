"""File index models: storages, files and their processed variants."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hashsync.models.base import Base


class Storage(Base):
    """A storage location; ``driver`` names the backend implementation."""

    __tablename__ = "storages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    driver: Mapped[str] = mapped_column(String(255), nullable=False)
    configuration: Mapped[str] = mapped_column(Text, nullable=False, default="{}")


class FileRecord(Base):
    """Indexed file metadata, one row per file."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    storage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("storages.id"), nullable=False
    )
    identifier: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    missing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_files_storage_missing", "storage_id", "missing"),
    )


class ProcessedFileRecord(Base):
    """A derived variant (thumbnail, crop, ...) of an original file.

    ``original_file_hash`` mirrors ``FileRecord.content_hash`` of the original
    at the time the variant was generated, so consumers can detect staleness
    without reading the original.
    """

    __tablename__ = "processed_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    original_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("files.id"), nullable=False
    )
    task_type: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    identifier: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_file_hash: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    __table_args__ = (Index("idx_processed_files_original", "original_id"),)
