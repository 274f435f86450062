"""Entity store interface and the in-process implementation."""

import asyncio
import copy
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator

from src.models.conversation import Conversation, Message, MessageRole
from src.models.inventory import InventoryItem
from src.models.ledger import Ledger, LogEntry
from src.models.menu import MenuItem
from src.models.order import BatchOrder, Order


class EntityStore(ABC):
    """
    Repository for every entity the engine reads or mutates.

    Getters return detached copies: a caller may modify what it reads and
    nothing changes until the matching ``save_*`` call. Mutating engine
    operations run inside ``transaction()``, which serialises them so that a
    read-check-then-write sequence cannot interleave with another mutation,
    and which discards every engine write made inside it if the body raises.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Exclusive section for one mutating operation."""

    # Inventory

    @abstractmethod
    async def list_inventory(self) -> list[InventoryItem]:
        """All inventory items ordered by name."""

    @abstractmethod
    async def get_inventory_item(self, item_id: str) -> InventoryItem | None:
        """Inventory item by id."""

    @abstractmethod
    async def save_inventory_items(self, items: list[InventoryItem]) -> None:
        """Insert or replace inventory items."""

    # Menu

    @abstractmethod
    async def list_menu(self) -> list[MenuItem]:
        """All menu items ordered by category then name."""

    @abstractmethod
    async def get_menu_item(self, menu_item_id: str) -> MenuItem | None:
        """Menu item by id, recipe included."""

    @abstractmethod
    async def save_menu_items(self, items: list[MenuItem]) -> None:
        """Insert or replace menu items."""

    # Ledger

    @abstractmethod
    async def get_ledger(self) -> Ledger:
        """Operating funds and running totals."""

    @abstractmethod
    async def save_ledger(self, ledger: Ledger) -> None:
        """Replace the ledger."""

    # Logs

    @abstractmethod
    async def append_log(self, entry: LogEntry) -> LogEntry:
        """Append an activity log entry."""

    @abstractmethod
    async def list_logs(self, limit: int = 500) -> list[LogEntry]:
        """Most recent log entries first."""

    # Orders

    @abstractmethod
    async def create_order(self, order: Order) -> Order:
        """Persist a new order with its items and assign the next id."""

    @abstractmethod
    async def get_order(self, order_id: int) -> Order | None:
        """Order by id."""

    @abstractmethod
    async def save_order(self, order: Order) -> None:
        """Replace an existing order."""

    @abstractmethod
    async def list_recent_orders(self, limit: int = 10) -> list[Order]:
        """Newest orders first."""

    # Insights feed and batch analysis buffer

    @abstractmethod
    async def get_insights(self) -> list[str]:
        """Insights feed, most recent first."""

    @abstractmethod
    async def push_insight(self, insight: str, cap: int) -> None:
        """Prepend an insight and keep at most ``cap`` entries."""

    @abstractmethod
    async def get_order_buffer(self) -> list[BatchOrder]:
        """Completed checkouts awaiting batch analysis."""

    @abstractmethod
    async def save_order_buffer(self, buffer: list[BatchOrder]) -> None:
        """Replace the batch analysis buffer."""

    # Assistant conversations

    @abstractmethod
    async def create_conversation(self, title: str) -> Conversation:
        """Start a new conversation."""

    @abstractmethod
    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        """Conversation by id."""

    @abstractmethod
    async def list_conversations(self) -> list[Conversation]:
        """Newest conversations first."""

    @abstractmethod
    async def delete_conversation(self, conversation_id: int) -> None:
        """Delete a conversation and its messages."""

    @abstractmethod
    async def add_message(
        self, conversation_id: int, role: MessageRole, content: str
    ) -> Message:
        """Append a message to a conversation."""

    @abstractmethod
    async def list_messages(self, conversation_id: int) -> list[Message]:
        """Messages of a conversation, oldest first."""

    async def is_empty(self) -> bool:
        """Check whether the store has never been seeded."""
        return not await self.list_inventory()

    async def close(self) -> None:
        """Release backend resources."""


class InMemoryEntityStore(EntityStore):
    """
    Process-local store. One asyncio lock serialises all mutations.

    A transaction snapshots the engine entities on entry and puts them back
    if the body raises. Conversations are not part of the snapshot.
    """

    _TRANSACTIONAL = (
        "_inventory",
        "_menu",
        "_ledger",
        "_logs",
        "_orders",
        "_order_seq",
        "_insights",
        "_order_buffer",
    )

    def __init__(self, max_log_entries: int = 500) -> None:
        self._lock = asyncio.Lock()
        self._max_log_entries = max_log_entries
        self._inventory: dict[str, InventoryItem] = {}
        self._menu: dict[str, MenuItem] = {}
        self._ledger = Ledger()
        self._logs: list[LogEntry] = []
        self._orders: dict[int, Order] = {}
        self._order_seq = 0
        self._insights: list[str] = []
        self._order_buffer: list[BatchOrder] = []
        self._conversations: dict[int, Conversation] = {}
        self._conversation_seq = 0
        self._messages: dict[int, list[Message]] = {}
        self._message_seq = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            # Stored models are replaced on save, never changed in place.
            snapshot = {name: copy.copy(getattr(self, name)) for name in self._TRANSACTIONAL}
            try:
                yield
            except BaseException:
                for name, value in snapshot.items():
                    setattr(self, name, value)
                raise

    async def list_inventory(self) -> list[InventoryItem]:
        items = sorted(self._inventory.values(), key=lambda i: i.name)
        return [item.model_copy(deep=True) for item in items]

    async def get_inventory_item(self, item_id: str) -> InventoryItem | None:
        item = self._inventory.get(item_id)
        return item.model_copy(deep=True) if item else None

    async def save_inventory_items(self, items: list[InventoryItem]) -> None:
        for item in items:
            self._inventory[item.id] = item.model_copy(deep=True)

    async def list_menu(self) -> list[MenuItem]:
        items = sorted(self._menu.values(), key=lambda m: (m.category.value, m.name))
        return [item.model_copy(deep=True) for item in items]

    async def get_menu_item(self, menu_item_id: str) -> MenuItem | None:
        item = self._menu.get(menu_item_id)
        return item.model_copy(deep=True) if item else None

    async def save_menu_items(self, items: list[MenuItem]) -> None:
        for item in items:
            self._menu[item.id] = item.model_copy(deep=True)

    async def get_ledger(self) -> Ledger:
        return self._ledger.model_copy()

    async def save_ledger(self, ledger: Ledger) -> None:
        self._ledger = ledger.model_copy()

    async def append_log(self, entry: LogEntry) -> LogEntry:
        self._logs.insert(0, entry.model_copy())
        del self._logs[self._max_log_entries :]
        return entry

    async def list_logs(self, limit: int = 500) -> list[LogEntry]:
        return [entry.model_copy() for entry in self._logs[:limit]]

    async def create_order(self, order: Order) -> Order:
        self._order_seq += 1
        created = order.model_copy(deep=True, update={"id": self._order_seq})
        self._orders[created.id] = created
        return created.model_copy(deep=True)

    async def get_order(self, order_id: int) -> Order | None:
        order = self._orders.get(order_id)
        return order.model_copy(deep=True) if order else None

    async def save_order(self, order: Order) -> None:
        self._orders[order.id] = order.model_copy(deep=True)

    async def list_recent_orders(self, limit: int = 10) -> list[Order]:
        newest = sorted(self._orders.values(), key=lambda o: o.id, reverse=True)
        return [order.model_copy(deep=True) for order in newest[:limit]]

    async def get_insights(self) -> list[str]:
        return list(self._insights)

    async def push_insight(self, insight: str, cap: int) -> None:
        self._insights = [insight, *self._insights][:cap]

    async def get_order_buffer(self) -> list[BatchOrder]:
        return [entry.model_copy(deep=True) for entry in self._order_buffer]

    async def save_order_buffer(self, buffer: list[BatchOrder]) -> None:
        self._order_buffer = [entry.model_copy(deep=True) for entry in buffer]

    async def create_conversation(self, title: str) -> Conversation:
        self._conversation_seq += 1
        conversation = Conversation(id=self._conversation_seq, title=title)
        self._conversations[conversation.id] = conversation
        self._messages[conversation.id] = []
        return conversation.model_copy()

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        return conversation.model_copy() if conversation else None

    async def list_conversations(self) -> list[Conversation]:
        newest = sorted(self._conversations.values(), key=lambda c: c.id, reverse=True)
        return [conversation.model_copy() for conversation in newest]

    async def delete_conversation(self, conversation_id: int) -> None:
        self._conversations.pop(conversation_id, None)
        self._messages.pop(conversation_id, None)

    async def add_message(
        self, conversation_id: int, role: MessageRole, content: str
    ) -> Message:
        self._message_seq += 1
        message = Message(
            id=self._message_seq,
            conversation_id=conversation_id,
            role=role,
            content=content,
        )
        self._messages.setdefault(conversation_id, []).append(message)
        return message.model_copy()

    async def list_messages(self, conversation_id: int) -> list[Message]:
        return [message.model_copy() for message in self._messages.get(conversation_id, [])]
