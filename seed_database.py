"""Script to create tables and seed the asset category reference set and an admin user"""
import asyncio
import os

from sqlalchemy import select

from config import settings
from db import AsyncSessionLocal, init_db
from db_models.asset_category import AssetCategoryRecord
from db_models.user import User, UserRole
from core.security import get_password_hash

DEFAULT_CATEGORIES = [
    {"id": "laptop", "name": "Laptops", "icon": "💻", "co2e_per_unit": 350, "avg_weight": 2.5, "avg_buyback_value": 85},
    {"id": "desktop", "name": "Desktops", "icon": "🖥️", "co2e_per_unit": 450, "avg_weight": 8, "avg_buyback_value": 45},
    {"id": "monitor", "name": "Monitors", "icon": "📺", "co2e_per_unit": 280, "avg_weight": 5, "avg_buyback_value": 25},
    {"id": "server", "name": "Servers", "icon": "🗄️", "co2e_per_unit": 1200, "avg_weight": 25, "avg_buyback_value": 250},
    {"id": "phone", "name": "Mobile Phones", "icon": "📱", "co2e_per_unit": 70, "avg_weight": 0.2, "avg_buyback_value": 40},
    {"id": "tablet", "name": "Tablets", "icon": "📋", "co2e_per_unit": 120, "avg_weight": 0.5, "avg_buyback_value": 55},
    {"id": "printer", "name": "Printers", "icon": "🖨️", "co2e_per_unit": 180, "avg_weight": 12, "avg_buyback_value": 15},
    {"id": "network", "name": "Network Equipment", "icon": "🌐", "co2e_per_unit": 95, "avg_weight": 3, "avg_buyback_value": 35},
]


async def seed_categories(session) -> int:
    """Insert missing default categories. Existing ones are left untouched."""
    result = await session.execute(select(AssetCategoryRecord.id))
    existing = set(result.scalars().all())

    count = 0
    for data in DEFAULT_CATEGORIES:
        if data["id"] in existing:
            print(f"  Skipped: {data['id']} (exists)")
            continue
        session.add(AssetCategoryRecord(**data))
        count += 1
        print(f"  Added: {data['id']} - {data['name']}")

    await session.commit()
    return count


async def seed_admin(session) -> None:
    email = os.environ.get("ADMIN_EMAIL", "admin@example.com")
    password = os.environ.get("ADMIN_PASSWORD")
    if not password:
        print("ADMIN_PASSWORD not set, skipping admin user")
        return

    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        print(f"Admin {email} already exists")
        return

    session.add(
        User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name="Administrator",
            role=UserRole.ADMIN.value,
            is_active=True,
        )
    )
    await session.commit()
    print(f"[OK] Created admin user {email}")


async def main():
    print("Creating database tables...")
    await init_db()
    print("[OK] Tables created successfully")

    async with AsyncSessionLocal() as session:
        count = await seed_categories(session)
        print(f"[OK] Seeded {count} asset categories")
        await seed_admin(session)


if __name__ == "__main__":
    print("=" * 60)
    print("DATABASE SEEDING SCRIPT")
    print("=" * 60)
    print(f"Database: {settings.DATABASE_URL}")
    print()

    asyncio.run(main())
    print("\n" + "=" * 60)
    print("[OK] Database setup complete!")
    print("=" * 60)
