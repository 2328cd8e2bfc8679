"""Driver registry: maps storage driver tags to driver factories.

Drivers for remote backends live outside this package.  They plug in either
with ``register_driver`` or by publishing a factory in the
``hashsync.drivers`` entry point group, which is read on first use of the
global registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from importlib.metadata import entry_points
from typing import Any

from hashsync.exceptions import StorageDriverError
from hashsync.storage.base import StorageDriver
from hashsync.storage.local import DRIVER_KEY as LOCAL_DRIVER_KEY
from hashsync.storage.local import LocalDriver

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "hashsync.drivers"

DriverFactory = Callable[[dict[str, Any]], StorageDriver]

DRIVERS: dict[str, DriverFactory] = {
    LOCAL_DRIVER_KEY: LocalDriver.from_configuration,
}

_entry_points_loaded = False


def load_entry_point_drivers(drivers: dict[str, DriverFactory]) -> list[str]:
    """Add factories published under ``hashsync.drivers`` to ``drivers``.

    Tags that are already registered keep their factory.  Returns the tags
    that were added.
    """
    added: list[str] = []
    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        if entry_point.name in drivers:
            continue
        try:
            factory = entry_point.load()
        except Exception as exc:
            logger.warning("Cannot load storage driver %r: %s", entry_point.name, exc)
            continue
        drivers[entry_point.name] = factory
        added.append(entry_point.name)
    if added:
        logger.debug("Loaded storage drivers from entry points: %s", added)
    return added


def _registered(drivers: dict[str, DriverFactory] | None) -> dict[str, DriverFactory]:
    global _entry_points_loaded
    if drivers is not None:
        return drivers
    if not _entry_points_loaded:
        _entry_points_loaded = True
        load_entry_point_drivers(DRIVERS)
    return DRIVERS


def register_driver(
    driver_type: str,
    factory: DriverFactory,
    *,
    drivers: dict[str, DriverFactory] | None = None,
) -> None:
    """Register (or replace) the factory for ``driver_type``."""
    _registered(drivers)[driver_type] = factory


def get_driver(
    driver_type: str,
    configuration: dict[str, Any],
    *,
    drivers: dict[str, DriverFactory] | None = None,
) -> StorageDriver:
    """Create a driver for a storage.

    Raises StorageDriverError if the driver type is unknown or its factory
    fails for any reason.
    """
    available = _registered(drivers)
    factory = available.get(driver_type)
    if factory is None:
        msg = f"Unknown storage driver: {driver_type!r}. Available: {list(available)}"
        raise StorageDriverError(msg)
    try:
        return factory(configuration)
    except Exception as exc:
        msg = f"Cannot create {driver_type!r} driver: {exc}"
        raise StorageDriverError(msg) from exc


def list_drivers(drivers: dict[str, DriverFactory] | None = None) -> list[str]:
    """Return the registered driver tags."""
    return list(_registered(drivers).keys())
