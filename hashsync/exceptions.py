"""Application-level exception types.

Convention:
- Per-file resolution problems are *values* (see ``hashsync.storage.base``),
  never exceptions, so a single unreadable file cannot abort a pass.
- ``StorageDriverError`` and ``UnknownWizardError`` signal configuration
  problems that make a whole run impossible.  The CLI reports them and exits
  with status 2.
- ``ValueError`` is used for invalid arguments.  Database and driver I/O
  errors propagate unchanged.
"""

from __future__ import annotations


class StorageDriverError(Exception):
    """Raised when a storage driver is not registered or cannot be created."""


class UnknownWizardError(Exception):
    """Raised when an upgrade wizard identifier is not registered."""
