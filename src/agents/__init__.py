"""Agent modules."""

from src.agents.assistant import (
    AssistantUnavailableError,
    RestaurantAssistant,
    format_tool_result,
)
from src.agents.base import BaseAgent, ToolResult, ToolSpec

__all__ = [
    "BaseAgent",
    "ToolResult",
    "ToolSpec",
    "RestaurantAssistant",
    "AssistantUnavailableError",
    "format_tool_result",
]
