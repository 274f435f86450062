"""Reset all restaurant state in Redis (useful for testing)."""

import asyncio

from src.config import get_settings
from src.state.manager import StateManager


async def reset_all_state() -> None:
    """Delete every key under the configured prefix."""
    settings = get_settings()

    print(f"\n⚠️  WARNING: This will delete ALL '{settings.redis_key_prefix}:*' keys from Redis!")
    response = input("Are you sure? (yes/no): ")

    if response.lower() != "yes":
        print("Cancelled.")
        return

    print("\nResetting state...")

    state_manager = StateManager(settings.redis_url, key_prefix=settings.redis_key_prefix)
    await state_manager.connect()

    # SCAN + DEL over the prefix only
    deleted = await state_manager.flush()

    await state_manager.disconnect()

    print(f"✓ Removed {deleted} keys from Redis\n")


if __name__ == "__main__":
    asyncio.run(reset_all_state())
