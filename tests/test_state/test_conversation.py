"""Tests for conversation management."""

import pytest

from src.models.conversation import MessageRole
from src.state.conversation import ConversationManager


@pytest.mark.asyncio
async def test_create_conversation(conversation_manager: ConversationManager) -> None:
    """Test creating a new conversation."""
    conversation = await conversation_manager.create_conversation()

    assert conversation.id == 1
    assert conversation.title == "New Chat"

    retrieved = await conversation_manager.get_conversation(conversation.id)
    assert retrieved is not None
    assert retrieved.id == conversation.id


@pytest.mark.asyncio
async def test_get_or_create(conversation_manager: ConversationManager) -> None:
    existing = await conversation_manager.create_conversation("Stock check")

    resumed = await conversation_manager.get_or_create(existing.id)
    assert resumed.title == "Stock check"

    fresh = await conversation_manager.get_or_create(999)
    assert fresh.id != existing.id

    assert len(await conversation_manager.list_conversations()) == 2


@pytest.mark.asyncio
async def test_add_message(conversation_manager: ConversationManager) -> None:
    """Test adding messages to conversation."""
    conversation = await conversation_manager.create_conversation()

    await conversation_manager.add_message(conversation.id, MessageRole.USER, "Hello")
    await conversation_manager.add_message(conversation.id, MessageRole.ASSISTANT, "Hi there!")

    messages = await conversation_manager.get_messages(conversation.id)
    assert [m.role for m in messages] == [MessageRole.USER, MessageRole.ASSISTANT]
    assert messages[1].content == "Hi there!"


@pytest.mark.asyncio
async def test_add_message_to_missing_conversation(
    conversation_manager: ConversationManager,
) -> None:
    with pytest.raises(ValueError):
        await conversation_manager.add_message(42, MessageRole.USER, "Hello")


@pytest.mark.asyncio
async def test_get_recent_messages(conversation_manager: ConversationManager) -> None:
    """Test retrieving recent messages."""
    conversation = await conversation_manager.create_conversation()

    for i in range(10):
        await conversation_manager.add_message(conversation.id, MessageRole.USER, f"Message {i}")

    recent = await conversation_manager.get_recent_messages(conversation.id, limit=5)

    assert len(recent) == 5
    assert recent[-1].content == "Message 9"


@pytest.mark.asyncio
async def test_delete_conversation(conversation_manager: ConversationManager) -> None:
    conversation = await conversation_manager.create_conversation()
    await conversation_manager.add_message(conversation.id, MessageRole.USER, "Hello")

    await conversation_manager.delete_conversation(conversation.id)

    assert await conversation_manager.get_conversation(conversation.id) is None
    assert await conversation_manager.get_messages(conversation.id) == []
