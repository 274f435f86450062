"""State management modules."""

from src.config import Settings
from src.state.conversation import ConversationManager
from src.state.manager import StateManager
from src.state.redis_store import RedisEntityStore
from src.state.store import EntityStore, InMemoryEntityStore

__all__ = [
    "ConversationManager",
    "EntityStore",
    "InMemoryEntityStore",
    "RedisEntityStore",
    "StateManager",
    "create_store",
]


def create_store(settings: Settings) -> EntityStore:
    """Build the entity store selected by ``storage_backend``."""
    if settings.storage_backend == "redis":
        state_manager = StateManager(settings.redis_url, key_prefix=settings.redis_key_prefix)
        return RedisEntityStore(
            state_manager,
            lock_timeout=settings.redis_lock_timeout,
            max_log_entries=settings.max_log_entries,
        )
    return InMemoryEntityStore(max_log_entries=settings.max_log_entries)
