"""Storage driver for files on a local filesystem."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

DRIVER_KEY = "Local"


class LocalDriver:
    """Serve files below ``base_path``."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path.resolve()

    @classmethod
    def from_configuration(cls, configuration: dict[str, Any]) -> LocalDriver:
        base_path = configuration.get("base_path")
        if not base_path:
            msg = "Local storage configuration requires 'base_path'"
            raise ValueError(msg)
        return cls(Path(base_path))

    def _resolve(self, identifier: str) -> Path:
        """Map an identifier to a path, rejecting traversal outside the root."""
        path = (self.base_path / identifier.lstrip("/")).resolve()
        if not path.is_relative_to(self.base_path):
            msg = f"Identifier escapes storage root: {identifier!r}"
            raise ValueError(msg)
        return path

    def exists(self, identifier: str) -> bool:
        """Return True for a regular file. Identifiers outside the root never exist."""
        try:
            path = self._resolve(identifier)
        except ValueError:
            return False
        return path.is_file()

    def hash(self, identifier: str, algorithm: str) -> str:
        """Compute the digest of a file, reading it in chunks."""
        digest = hashlib.new(algorithm)
        with open(self._resolve(identifier), "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                digest.update(chunk)
        return digest.hexdigest()
