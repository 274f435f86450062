"""Assistant conversation and message models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Message role types."""

    USER = "user"
    ASSISTANT = "assistant"


class Conversation(BaseModel):
    """Chat thread with the operations assistant."""

    id: int = 0
    title: str = "New Chat"
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Message(BaseModel):
    """Individual message in a conversation."""

    id: int = 0
    conversation_id: int
    role: MessageRole
    content: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AssistantReply(BaseModel):
    """Response produced by the assistant for one user message."""

    conversation_id: int
    message: str
    tool_calls: list[dict[str, Any]] = Field(default_factory=list)
    tokens_used: int = 0
    execution_time_ms: float = 0.0
