"""Seed the shared predefined medicine catalog."""

from __future__ import annotations

import argparse
import asyncio

from app.db.session import dispose_engine, get_sessionmaker
from app.services.bootstrap_service import (
    DEFAULT_PREDEFINED_MEDICINES,
    seed_predefined_medicines,
)


async def main(names: list[str]) -> None:
    sessionmaker = get_sessionmaker()
    try:
        async with sessionmaker() as session:
            added = await seed_predefined_medicines(session, names)
    finally:
        await dispose_engine()
    if added:
        print(f"Added {len(added)} medicine(s): {', '.join(added)}")
    else:
        print("Catalog already up to date; nothing to seed.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed predefined medicines")
    parser.add_argument(
        "names",
        nargs="*",
        help="Medicine names to add (defaults to the built-in catalog)",
    )
    args = parser.parse_args()
    asyncio.run(main(args.names or list(DEFAULT_PREDEFINED_MEDICINES)))
