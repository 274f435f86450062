"""Base agent class: tool registry, tool execution and LLM calls."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from anthropic import AsyncAnthropic
from pydantic import BaseModel, Field

from src.config import Settings, get_settings
from src.engine.errors import OperationError
from src.models.conversation import Message, MessageRole
from src.utils.logging import AssistantLogger


class ToolResult(BaseModel):
    """Result from a tool execution."""

    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
    execution_time_ms: float = 0.0

    def to_content(self) -> dict[str, Any]:
        """JSON-safe payload returned to the model."""
        if not self.success:
            return {"success": False, "error": self.error}
        if isinstance(self.result, dict):
            return self.result
        return {"result": self.result}


class ToolSpec(BaseModel):
    """Tool declaration sent to the Messages API."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )


ToolFunc = Callable[..., Awaitable[Any]]


class BaseAgent(ABC):
    """Base class for agents that answer through Claude with tool use."""

    def __init__(
        self,
        agent_id: str,
        client: AsyncAnthropic | None = None,
        settings: Settings | None = None,
    ):
        self.agent_id = agent_id
        self.settings = settings or get_settings()
        self.logger = AssistantLogger(agent_id)

        # Without a key the agent exists but cannot answer
        if client is None and self.settings.anthropic_api_key:
            client = AsyncAnthropic(api_key=self.settings.anthropic_api_key)
        self.client = client

        # Tool registry
        self.tools: dict[str, ToolFunc] = {}
        self.tool_specs: dict[str, ToolSpec] = {}

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        pass

    @abstractmethod
    def register_tools(self) -> None:
        """Register available tools for this agent."""
        pass

    def register_tool(
        self,
        name: str,
        func: ToolFunc,
        description: str,
        properties: dict[str, Any] | None = None,
        required: list[str] | None = None,
    ) -> None:
        """Register a tool with the agent."""
        self.tools[name] = func
        self.tool_specs[name] = ToolSpec(
            name=name,
            description=description,
            input_schema={
                "type": "object",
                "properties": properties or {},
                "required": required or [],
            },
        )

    def tool_definitions(self) -> list[dict[str, Any]]:
        """Tool declarations in Messages API form."""
        return [spec.model_dump() for spec in self.tool_specs.values()]

    async def execute_tool(
        self,
        tool_name: str,
        params: dict[str, Any],
        conversation_id: int | None = None,
    ) -> ToolResult:
        """
        Execute a registered tool.

        Args:
            tool_name: Name of the tool to execute
            params: Parameters for the tool
            conversation_id: ID of the conversation

        Returns:
            ToolResult with the execution outcome
        """
        start_time = time.time()

        if tool_name not in self.tools:
            return ToolResult(
                tool_name=tool_name,
                success=False,
                error=f"Tool '{tool_name}' not found",
            )

        try:
            tool_func = self.tools[tool_name]
            result = await tool_func(**params)

        except OperationError as e:
            # Rejected by the engine: the reason is meant for the user
            execution_time_ms = (time.time() - start_time) * 1000
            self.logger.log_tool_call(
                tool_name=tool_name,
                conversation_id=conversation_id,
                duration_ms=execution_time_ms,
                success=False,
                kind=e.kind.value,
                error=e.reason,
            )
            return ToolResult(
                tool_name=tool_name,
                success=False,
                error=e.reason,
                execution_time_ms=execution_time_ms,
            )

        except Exception as e:
            execution_time_ms = (time.time() - start_time) * 1000
            self.logger.log_tool_call(
                tool_name=tool_name,
                conversation_id=conversation_id,
                duration_ms=execution_time_ms,
                success=False,
                error=str(e),
            )
            return ToolResult(
                tool_name=tool_name,
                success=False,
                error=str(e),
                execution_time_ms=execution_time_ms,
            )

        execution_time_ms = (time.time() - start_time) * 1000
        self.logger.log_tool_call(
            tool_name=tool_name,
            conversation_id=conversation_id,
            duration_ms=execution_time_ms,
            success=True,
        )
        return ToolResult(
            tool_name=tool_name,
            success=True,
            result=result,
            execution_time_ms=execution_time_ms,
        )

    async def _call_llm_with_retry(
        self,
        messages: list[dict[str, Any]],
        system: str,
    ) -> Any:
        """Call the LLM with exponential backoff retry logic."""
        max_retries = self.settings.max_retries
        retry_delay = self.settings.retry_delay

        for attempt in range(max_retries):
            try:
                response = await self.client.messages.create(
                    model=self.settings.anthropic_model,
                    max_tokens=self.settings.max_tokens,
                    system=system,
                    messages=messages,
                    tools=self.tool_definitions(),
                )
                return response

            except Exception as e:
                if attempt == max_retries - 1:
                    raise

                # Exponential backoff
                wait_time = retry_delay * (2**attempt)
                self.logger.logger.warning(
                    "llm_call_retry",
                    wait_seconds=wait_time,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    error=str(e),
                )
                await asyncio.sleep(wait_time)

        raise RuntimeError("Max retries exceeded")

    def _build_message_history(self, recent_messages: list[Message]) -> list[dict[str, Any]]:
        """Build message history for Claude API. The first turn must be the user's."""
        messages = []
        for msg in recent_messages:
            if not messages and msg.role != MessageRole.USER:
                continue
            messages.append({"role": msg.role.value, "content": msg.content})
        return messages
