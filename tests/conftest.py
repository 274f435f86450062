"""Pytest configuration and fixtures."""

from types import SimpleNamespace
from typing import Any, AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.agents.assistant import RestaurantAssistant
from src.config import Settings
from src.engine.events import EngineEvent, EventBus
from src.engine.service import RestaurantEngine
from src.main import app
from src.state.conversation import ConversationManager
from src.state.store import InMemoryEntityStore


class FakeMessages:
    """Stands in for ``AsyncAnthropic().messages``; replays canned responses."""

    def __init__(self, responses: list[Any]):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append({**kwargs, "messages": list(kwargs["messages"])})
        if not self.responses:
            raise RuntimeError("No canned response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeAnthropic:
    """Minimal async client exposing ``messages.create``."""

    def __init__(self, responses: list[Any]):
        self.messages = FakeMessages(responses)


def text_response(text: str) -> SimpleNamespace:
    """Model reply containing only text."""
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=20, output_tokens=10),
    )


def tool_use_response(name: str, tool_input: dict[str, Any], tool_id: str = "toolu_1") -> SimpleNamespace:
    """Model reply requesting one tool call."""
    return SimpleNamespace(
        content=[SimpleNamespace(type="tool_use", id=tool_id, name=name, input=tool_input)],
        usage=SimpleNamespace(input_tokens=30, output_tokens=15),
    )


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's .env."""
    return Settings(_env_file=None, anthropic_api_key=None, storage_backend="memory")


@pytest.fixture
def store() -> InMemoryEntityStore:
    """Empty in-memory entity store."""
    return InMemoryEntityStore()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def captured_events(events: EventBus) -> list[EngineEvent]:
    """Every event delivered by the bus during the test."""
    captured: list[EngineEvent] = []

    async def capture(event: EngineEvent) -> None:
        captured.append(event)

    events.subscribe(capture)
    return captured


@pytest_asyncio.fixture
async def engine(
    store: InMemoryEntityStore,
    settings: Settings,
    events: EventBus,
) -> RestaurantEngine:
    """Engine seeded with the sample restaurant (funds $5000)."""
    engine = RestaurantEngine(store, settings, events)
    await engine.seed()
    return engine


@pytest.fixture
def set_stock(store: InMemoryEntityStore) -> Callable[..., Awaitable[None]]:
    """Overwrite quantity and/or threshold of an inventory item."""

    async def _set_stock(
        item_id: str,
        quantity: float | None = None,
        threshold: float | None = None,
    ) -> None:
        item = await store.get_inventory_item(item_id)
        if quantity is not None:
            item.quantity = quantity
        if threshold is not None:
            item.threshold = threshold
        await store.save_inventory_items([item])

    return _set_stock


@pytest.fixture
def conversation_manager(store: InMemoryEntityStore) -> ConversationManager:
    return ConversationManager(store)


@pytest.fixture
def fake_client_factory() -> Callable[[list[Any]], FakeAnthropic]:
    return FakeAnthropic


@pytest.fixture
def llm_text() -> Callable[[str], SimpleNamespace]:
    return text_response


@pytest.fixture
def llm_tool_use() -> Callable[..., SimpleNamespace]:
    return tool_use_response


@pytest_asyncio.fixture
async def test_client(
    engine: RestaurantEngine,
    conversation_manager: ConversationManager,
    settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, wired to the seeded in-memory engine."""
    app.state.engine = engine
    app.state.conversation_manager = conversation_manager
    app.state.assistant = RestaurantAssistant(engine, conversation_manager, settings=settings)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
