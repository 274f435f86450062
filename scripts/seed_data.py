"""Seed the sample restaurant into the configured entity store."""

import asyncio

from src.config import get_settings
from src.engine.service import RestaurantEngine
from src.state import create_store


async def seed_restaurant() -> None:
    """Load sample inventory, menu and funds unless the store already has data."""
    settings = get_settings()
    print(f"Seeding restaurant data ({settings.storage_backend} backend)...")

    engine = RestaurantEngine(create_store(settings), settings)

    try:
        seeded = await engine.seed()
        if not seeded:
            print("  - Store already contains data, nothing to do")
            return

        inventory = await engine.list_inventory()
        menu = await engine.list_menu()
        ledger = await engine.get_ledger()

        for item in inventory:
            print(f"  ✓ {item.name}: {item.quantity:g} {item.unit} (threshold {item.threshold:g})")
        for dish in menu:
            print(f"  ✓ {dish.name} - ${dish.price} ({len(dish.ingredients)} ingredients)")
        print(f"  ✓ Operating funds: ${ledger.operating_funds:.2f}")
    finally:
        await engine.close()


async def main() -> None:
    """Run all seed functions."""
    print("\n" + "=" * 50)
    print("  Seeding Restaurant Operations Data")
    print("=" * 50 + "\n")

    await seed_restaurant()

    print("\n" + "=" * 50)
    print("  ✓ Done")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
