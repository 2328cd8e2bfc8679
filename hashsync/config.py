"""Application configuration loaded from environment variables."""

from __future__ import annotations

import hashlib

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """hashsync settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///data/db/hashsync.db"

    # Hash resync
    target_driver: str = "MaxServ.FalS3"
    hash_algorithm: str = "sha1"
    batch_size: int = Field(default=500, ge=1)

    @field_validator("hash_algorithm")
    @classmethod
    def _known_hash_algorithm(cls, value: str) -> str:
        algorithm = value.lower()
        if algorithm not in hashlib.algorithms_available:
            msg = f"Unsupported hash algorithm: {value!r}"
            raise ValueError(msg)
        return algorithm
