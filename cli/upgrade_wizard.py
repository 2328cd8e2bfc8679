"""CLI for listing, checking and running upgrade wizards."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import aclosing
from pathlib import Path
from typing import TYPE_CHECKING

from hashsync.config import Settings
from hashsync.database import create_engine, ensure_tables, get_session
from hashsync.exceptions import StorageDriverError, UnknownWizardError
from hashsync.services.registry_service import CompletionFlag, Registry
from hashsync.updates.registry import get_wizard, list_wizards

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)


def _ensure_sqlite_dir(database_url: str) -> None:
    if database_url.startswith("sqlite") and "///" in database_url:
        db_path = database_url.split("///", 1)[-1]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)


async def cmd_list(session: AsyncSession, settings: Settings) -> int:
    for identifier in list_wizards():
        wizard = get_wizard(identifier, session, settings)
        needed, _description = await wizard.check_for_update()
        state = "needed" if needed else "not needed"
        print(f"{identifier:<20} {state:<11} {wizard.title}")
    return 0


async def cmd_check(session: AsyncSession, settings: Settings, identifier: str) -> int:
    wizard = get_wizard(identifier, session, settings)
    needed, description = await wizard.check_for_update()
    print(description)
    print(f"Update needed: {'yes' if needed else 'no'}")
    return 0 if needed else 1


async def cmd_run(session: AsyncSession, settings: Settings, identifier: str) -> int:
    wizard = get_wizard(identifier, session, settings)
    needed, _description = await wizard.check_for_update()
    if not needed:
        print(f"Nothing to do for {identifier}")
        return 0
    result = await wizard.perform_update()
    for query in result.database_queries:
        print(query)
    if result.custom_message:
        print(result.custom_message)
    return 0 if result.success else 1


async def cmd_reset(session: AsyncSession, identifier: str) -> int:
    if identifier not in list_wizards():
        msg = f"Unknown upgrade wizard: {identifier!r}. Available: {list_wizards()}"
        raise UnknownWizardError(msg)
    await CompletionFlag(Registry(session), identifier).reset()
    await session.commit()
    print(f"{identifier} will be offered again")
    return 0


async def dispatch(session: AsyncSession, args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "list":
        return await cmd_list(session, settings)
    if args.command == "check":
        return await cmd_check(session, settings, args.identifier)
    if args.command == "run":
        return await cmd_run(session, settings, args.identifier)
    return await cmd_reset(session, args.identifier)


async def run_command(args: argparse.Namespace, settings: Settings) -> int:
    """Open a session, make sure the schema exists and dispatch ``args.command``."""
    _ensure_sqlite_dir(settings.database_url)
    engine, session_factory = create_engine(settings)
    code = 0
    try:
        async with aclosing(get_session(session_factory)) as sessions:
            async for session in sessions:
                await ensure_tables(session)
                code = await dispatch(session, args, settings)
    finally:
        await engine.dispose()
    return code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashsync-upgrade",
        description="List, check and run upgrade wizards",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="Show all wizards and whether they are pending")
    for name, help_text in (
        ("check", "Describe a wizard and report whether it is needed"),
        ("run", "Run a wizard if it is needed"),
        ("reset", "Offer a completed wizard again"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("identifier", help="Wizard identifier, e.g. sha1Update")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    _configure_logging(settings.debug)

    try:
        code = asyncio.run(run_command(args, settings))
    except (UnknownWizardError, StorageDriverError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    sys.exit(code)


if __name__ == "__main__":
    main()
