# reset_db.py
"""
Database reset utility - drops all tables and recreates them fresh.

Usage:
    python reset_db.py           # Reset only
    python reset_db.py --seed    # Reset + seed categories and admin user
"""
import argparse
import asyncio

from sqlalchemy import inspect

from config import settings
from db import engine
from db_base import Base

# Import all models to register them with Base.metadata
import db_models  # noqa: F401


def _describe(sync_conn) -> dict[str, list[tuple[str, str]]]:
    inspector = inspect(sync_conn)
    return {
        table: [(col["name"], str(col["type"])) for col in inspector.get_columns(table)]
        for table in sorted(inspector.get_table_names())
    }


async def reset_database() -> bool:
    """Drop all tables and recreate them."""
    url = settings.DATABASE_URL
    print("=" * 60)
    print("DATABASE RESET UTILITY")
    print("=" * 60)
    print(f"\nConnecting to: {url.split('@')[1] if '@' in url else url}")

    async with engine.begin() as conn:
        existing = await conn.run_sync(lambda c: inspect(c).get_table_names())
        if existing:
            print(f"\nFound {len(existing)} tables: {', '.join(existing)}")
            print("\nDropping all tables...")
        else:
            print("\nNo existing tables found.")
        await conn.run_sync(Base.metadata.drop_all)

        print("\n" + "-" * 60)
        print("Creating fresh tables from SQLAlchemy models...")
        print("-" * 60)
        await conn.run_sync(Base.metadata.create_all)

        tables = await conn.run_sync(_describe)

    print(f"\nCreated {len(tables)} tables:")
    for table, columns in tables.items():
        print(f"\n  {table}:")
        for col_name, col_type in columns:
            print(f"    - {col_name}: {col_type}")

    print("\n" + "=" * 60)
    print("DATABASE RESET COMPLETE!")
    print("=" * 60)
    return True


async def seed_data():
    print("\n" + "=" * 60)
    print("SEEDING DATABASE...")
    print("=" * 60 + "\n")

    from seed_database import main as seed_main
    await seed_main()


async def run(args):
    if args.seed_only:
        await seed_data()
        return

    success = await reset_database()

    if success and args.seed:
        await seed_data()
    elif success:
        print("\nTo seed categories and an admin user, run:")
        print("  python reset_db.py --seed")
        print("  OR")
        print("  python seed_database.py")


def main():
    parser = argparse.ArgumentParser(
        description="Reset database - drop all tables and recreate fresh"
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Also seed the category reference set and admin user after reset"
    )
    parser.add_argument(
        "--seed-only",
        action="store_true",
        help="Only seed data (skip table reset)"
    )

    asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    main()
