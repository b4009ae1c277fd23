"""Management CLI for the ClamFlow store.

Usage:
    clamflow open                 # Create or upgrade the store
    clamflow version              # Show the stored schema version
    clamflow reset --yes          # Delete all data and rebuild
    clamflow seed-demo            # Add sample suppliers to an empty store
    clamflow --url sqlite+aiosqlite:///./other.db open
"""

import argparse
import asyncio
import logging
import sys

from clamflow.config import settings
from clamflow.database import SCHEMA_VERSION, Store
from clamflow.exceptions import ClamFlowException
from clamflow.services.reference import seed_sample_suppliers

logger = logging.getLogger("clamflow.cli")


async def open_store(store: Store) -> int:
    await store.open()
    print(f"Store ready at schema v{SCHEMA_VERSION}: {store.url}")
    return 0


async def show_version(store: Store) -> int:
    current = await store.current_version()
    print(f"Stored schema: v{current}")
    print(f"Supported:     v{SCHEMA_VERSION}")
    return 0 if current <= SCHEMA_VERSION else 1


async def reset_store(store: Store, confirmed: bool) -> int:
    if not confirmed:
        print("Refusing to reset without --yes (all data would be deleted).")
        return 2
    await store.reset()
    print(f"Store reset to schema v{SCHEMA_VERSION}: {store.url}")
    return 0


async def seed_demo(store: Store) -> int:
    await store.open()
    async with store.session() as db:
        added = await seed_sample_suppliers(db)
    if added:
        print(f"Added {added} sample supplier(s)")
    else:
        print("Suppliers already present, nothing added")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clamflow",
        description="ClamFlow lot traceability store management",
    )
    parser.add_argument(
        "--url",
        default=None,
        help=f"Database URL (default: {settings.database_url})",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("open", help="Create or upgrade the store")
    sub.add_parser("version", help="Show the stored schema version")
    reset = sub.add_parser("reset", help="Delete all data and rebuild the store")
    reset.add_argument("--yes", action="store_true", help="Confirm data deletion")
    sub.add_parser("seed-demo", help="Add sample suppliers to an empty store")
    return parser


async def run(args: argparse.Namespace) -> int:
    store = Store(url=args.url)
    try:
        if args.command == "open":
            return await open_store(store)
        if args.command == "version":
            return await show_version(store)
        if args.command == "reset":
            return await reset_store(store, args.yes)
        return await seed_demo(store)
    except ClamFlowException as exc:
        logger.error("%s: %s", exc.error_code, exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        await store.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
