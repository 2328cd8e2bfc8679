"""Namespaced key/value registry model."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hashsync.models.base import Base


class RegistryEntry(Base):
    """Durable registry value, JSON encoded."""

    __tablename__ = "registry"

    namespace: Mapped[str] = mapped_column(String(128), primary_key=True)
    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
