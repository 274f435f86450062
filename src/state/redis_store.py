"""Redis-backed entity store shared by every API worker."""

from contextlib import asynccontextmanager
from contextvars import ContextVar
from decimal import Decimal
from typing import Any, AsyncIterator

from src.models.conversation import Conversation, Message, MessageRole
from src.models.inventory import InventoryItem
from src.models.ledger import Ledger, LogEntry
from src.models.menu import MenuItem
from src.models.order import BatchOrder, Order
from src.state.manager import StateManager, WriteBatch
from src.state.store import EntityStore
from src.utils.logging import get_logger

logger = get_logger(__name__)

ENGINE_LOCK = "lock:engine"

_batch: ContextVar[WriteBatch | None] = ContextVar("redis_write_batch", default=None)


class RedisEntityStore(EntityStore):
    """
    Entity store on top of Redis hashes and lists.

    Mutations from every process serialise on one Redis lock, so the
    availability check and the deduction of a sale can never interleave
    with another worker's sale.

    Engine writes made inside ``transaction()`` are buffered, visible to
    reads in the same task, and sent as a single MULTI/EXEC when the body
    returns. If the body raises, nothing is written. Order ids come from
    INCR outside the pipeline, so a failed sale can leave a gap in them.
    Conversation writes are never buffered.
    """

    def __init__(
        self,
        state_manager: StateManager,
        lock_timeout: float = 10.0,
        max_log_entries: int = 500,
    ) -> None:
        self.state = state_manager
        self.lock_timeout = lock_timeout
        self.max_log_entries = max_log_entries

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        lock = await self.state.lock(ENGINE_LOCK, timeout=self.lock_timeout)
        async with lock:
            batch = WriteBatch()
            token = _batch.set(batch)
            try:
                yield
            finally:
                _batch.reset(token)
            await self.state.commit(batch)

    async def close(self) -> None:
        await self.state.disconnect()

    # Buffered access

    async def _hget(self, name: str, field: str) -> Any:
        batch = _batch.get()
        if batch and field in batch.hashes.get(name, {}):
            return batch.hashes[name][field]
        return await self.state.hget(name, field)

    async def _hgetall(self, name: str) -> dict[str, Any]:
        data = await self.state.hgetall(name)
        batch = _batch.get()
        if batch:
            data.update(batch.hashes.get(name, {}))
        return data

    async def _hset(self, name: str, mapping: dict[str, Any]) -> None:
        batch = _batch.get()
        if batch is None:
            await self.state.hset_many(name, mapping)
        else:
            batch.hset(name, mapping)

    async def _get(self, name: str) -> Any:
        batch = _batch.get()
        if batch and name in batch.values:
            return batch.values[name]
        return await self.state.get(name)

    async def _set(self, name: str, value: Any) -> None:
        batch = _batch.get()
        if batch is None:
            await self.state.set(name, value)
        else:
            batch.set(name, value)

    async def _lrange(self, name: str, limit: int | None = None) -> list[Any]:
        """Newest-first list entries, pending pushes included."""
        batch = _batch.get()
        pending = list(reversed(batch.pushes.get(name, []))) if batch else []
        end = -1 if limit is None else limit - 1
        data = pending + await self.state.lrange(name, 0, end)
        if batch and name in batch.caps:
            data = data[: batch.caps[name]]
        return data if limit is None else data[:limit]

    async def _lpush(self, name: str, value: Any, cap: int) -> None:
        batch = _batch.get()
        if batch is None:
            await self.state.lpush_capped(name, value, cap=cap)
        else:
            batch.lpush(name, value, cap)

    # Inventory

    async def list_inventory(self) -> list[InventoryItem]:
        data = await self._hgetall("inventory")
        items = [InventoryItem(**value) for value in data.values()]
        return sorted(items, key=lambda i: i.name)

    async def get_inventory_item(self, item_id: str) -> InventoryItem | None:
        data = await self._hget("inventory", item_id)
        return InventoryItem(**data) if data else None

    async def save_inventory_items(self, items: list[InventoryItem]) -> None:
        await self._hset("inventory", {item.id: item.model_dump(mode="json") for item in items})

    # Menu

    async def list_menu(self) -> list[MenuItem]:
        data = await self._hgetall("menu")
        items = [MenuItem(**value) for value in data.values()]
        return sorted(items, key=lambda m: (m.category.value, m.name))

    async def get_menu_item(self, menu_item_id: str) -> MenuItem | None:
        data = await self._hget("menu", menu_item_id)
        return MenuItem(**data) if data else None

    async def save_menu_items(self, items: list[MenuItem]) -> None:
        await self._hset("menu", {item.id: item.model_dump(mode="json") for item in items})

    # Ledger

    async def get_ledger(self) -> Ledger:
        data = await self._get("ledger")
        return Ledger(**data) if data else Ledger(operating_funds=Decimal("0.00"))

    async def save_ledger(self, ledger: Ledger) -> None:
        await self._set("ledger", ledger.model_dump(mode="json"))

    # Logs

    async def append_log(self, entry: LogEntry) -> LogEntry:
        await self._lpush("logs", entry.model_dump(mode="json"), cap=self.max_log_entries)
        return entry

    async def list_logs(self, limit: int = 500) -> list[LogEntry]:
        data = await self._lrange("logs", limit)
        return [LogEntry(**value) for value in data]

    # Orders

    async def create_order(self, order: Order) -> Order:
        order_id = await self.state.increment("orders:seq")
        created = order.model_copy(deep=True, update={"id": order_id})
        await self.save_order(created)
        logger.debug("order_stored", order_id=order_id)
        return created

    async def get_order(self, order_id: int) -> Order | None:
        data = await self._hget("orders", str(order_id))
        return Order(**data) if data else None

    async def save_order(self, order: Order) -> None:
        await self._hset("orders", {str(order.id): order.model_dump(mode="json")})

    async def list_recent_orders(self, limit: int = 10) -> list[Order]:
        data = await self._hgetall("orders")
        orders = sorted((Order(**value) for value in data.values()), key=lambda o: o.id, reverse=True)
        return orders[:limit]

    # Insights feed and batch analysis buffer

    async def get_insights(self) -> list[str]:
        return await self._lrange("insights")

    async def push_insight(self, insight: str, cap: int) -> None:
        await self._lpush("insights", insight, cap=cap)

    async def get_order_buffer(self) -> list[BatchOrder]:
        data = await self._get("order_buffer")
        return [BatchOrder(**value) for value in data or []]

    async def save_order_buffer(self, buffer: list[BatchOrder]) -> None:
        await self._set("order_buffer", [entry.model_dump(mode="json") for entry in buffer])

    # Assistant conversations

    async def create_conversation(self, title: str) -> Conversation:
        conversation_id = await self.state.increment("conversations:seq")
        conversation = Conversation(id=conversation_id, title=title)
        await self.state.hset_many(
            "conversations", {str(conversation_id): conversation.model_dump(mode="json")}
        )
        return conversation

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        data = await self.state.hget("conversations", str(conversation_id))
        return Conversation(**data) if data else None

    async def list_conversations(self) -> list[Conversation]:
        data = await self.state.hgetall("conversations")
        return sorted(
            (Conversation(**value) for value in data.values()), key=lambda c: c.id, reverse=True
        )

    async def delete_conversation(self, conversation_id: int) -> None:
        await self.state.hdel("conversations", str(conversation_id))
        await self.state.delete(f"messages:{conversation_id}")

    async def add_message(
        self, conversation_id: int, role: MessageRole, content: str
    ) -> Message:
        message_id = await self.state.increment("messages:seq")
        message = Message(
            id=message_id,
            conversation_id=conversation_id,
            role=role,
            content=content,
        )
        await self.state.rpush(f"messages:{conversation_id}", message.model_dump(mode="json"))
        return message

    async def list_messages(self, conversation_id: int) -> list[Message]:
        data = await self.state.lrange(f"messages:{conversation_id}")
        return [Message(**value) for value in data]
