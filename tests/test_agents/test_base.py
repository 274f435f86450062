"""Tests for base agent functionality."""

from typing import Any

import pytest

from src.agents.base import BaseAgent, ToolResult
from src.config import Settings
from src.engine.errors import NotFoundError
from src.models.conversation import Message, MessageRole


class EchoAgent(BaseAgent):
    """Smallest concrete agent: one tool per outcome."""

    def __init__(self, client: Any = None, settings: Settings | None = None):
        super().__init__("echo", client=client, settings=settings)
        self.register_tools()

    @property
    def system_prompt(self) -> str:
        return "Echo agent"

    def register_tools(self) -> None:
        self.register_tool(
            "echo",
            self.echo,
            "Return the text",
            properties={"text": {"type": "string"}},
            required=["text"],
        )
        self.register_tool("missing_dish", self.missing_dish, "Always rejected by the engine")
        self.register_tool("crash", self.crash, "Always fails unexpectedly")

    async def echo(self, text: str) -> dict[str, Any]:
        return {"text": text}

    async def missing_dish(self) -> None:
        raise NotFoundError("Menu item menu-99 not found.")

    async def crash(self) -> None:
        raise RuntimeError("boom")


@pytest.fixture
def fast_settings(settings: Settings) -> Settings:
    return settings.model_copy(update={"retry_delay": 0.0})


def test_agent_initialization(settings: Settings) -> None:
    """Test that agents initialize correctly."""
    agent = EchoAgent(settings=settings)

    assert agent.agent_id == "echo"
    assert agent.client is None
    assert set(agent.tools) == {"echo", "missing_dish", "crash"}


def test_tool_definitions(settings: Settings) -> None:
    agent = EchoAgent(settings=settings)

    definitions = {d["name"]: d for d in agent.tool_definitions()}

    assert definitions["echo"]["input_schema"] == {
        "type": "object",
        "properties": {"text": {"type": "string"}},
        "required": ["text"],
    }
    assert definitions["crash"]["input_schema"]["properties"] == {}


@pytest.mark.asyncio
async def test_agent_tool_execution(settings: Settings) -> None:
    """Test agent tool execution."""
    agent = EchoAgent(settings=settings)

    result = await agent.execute_tool("echo", {"text": "hi"}, conversation_id=1)

    assert result.success is True
    assert result.result == {"text": "hi"}
    assert result.execution_time_ms >= 0


@pytest.mark.asyncio
async def test_operation_error_becomes_reason(settings: Settings) -> None:
    agent = EchoAgent(settings=settings)

    result = await agent.execute_tool("missing_dish", {})

    assert result.success is False
    assert result.error == "Menu item menu-99 not found."


@pytest.mark.asyncio
async def test_unexpected_error_and_unknown_tool(settings: Settings) -> None:
    agent = EchoAgent(settings=settings)

    crashed = await agent.execute_tool("crash", {})
    unknown = await agent.execute_tool("teleport", {})

    assert crashed.error == "boom"
    assert unknown.success is False
    assert unknown.error == "Tool 'teleport' not found"


def test_tool_result_content() -> None:
    assert ToolResult(tool_name="t", success=True, result={"a": 1}).to_content() == {"a": 1}
    assert ToolResult(tool_name="t", success=True, result=[1, 2]).to_content() == {
        "result": [1, 2]
    }
    assert ToolResult(tool_name="t", success=False, error="nope").to_content() == {
        "success": False,
        "error": "nope",
    }


@pytest.mark.asyncio
async def test_llm_call_retries_then_succeeds(
    fast_settings: Settings, fake_client_factory, llm_text
) -> None:
    client = fake_client_factory([RuntimeError("overloaded"), llm_text("done")])
    agent = EchoAgent(client=client, settings=fast_settings)

    response = await agent._call_llm_with_retry([{"role": "user", "content": "hi"}], "system")

    assert response.content[0].text == "done"
    assert len(client.messages.calls) == 2
    assert client.messages.calls[0]["tools"] == agent.tool_definitions()
    assert client.messages.calls[0]["system"] == "system"


@pytest.mark.asyncio
async def test_llm_call_gives_up_after_max_retries(
    fast_settings: Settings, fake_client_factory
) -> None:
    client = fake_client_factory([RuntimeError("down")] * 3)
    agent = EchoAgent(client=client, settings=fast_settings)

    with pytest.raises(RuntimeError, match="down"):
        await agent._call_llm_with_retry([{"role": "user", "content": "hi"}], "system")

    assert len(client.messages.calls) == fast_settings.max_retries


def test_message_history_starts_with_user(settings: Settings) -> None:
    agent = EchoAgent(settings=settings)
    history = [
        Message(id=1, conversation_id=1, role=MessageRole.ASSISTANT, content="Welcome"),
        Message(id=2, conversation_id=1, role=MessageRole.USER, content="Stock?"),
        Message(id=3, conversation_id=1, role=MessageRole.ASSISTANT, content="All good"),
    ]

    messages = agent._build_message_history(history)

    assert messages == [
        {"role": "user", "content": "Stock?"},
        {"role": "assistant", "content": "All good"},
    ]
