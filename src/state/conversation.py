"""Assistant conversation persistence."""

from src.models.conversation import Conversation, Message, MessageRole
from src.state.store import EntityStore
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ConversationManager:
    """Manages assistant conversations on top of the entity store."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def create_conversation(self, title: str = "New Chat") -> Conversation:
        """Create a new conversation."""
        conversation = await self.store.create_conversation(title)

        logger.info("conversation_created", conversation_id=conversation.id)

        return conversation

    async def get_or_create(self, conversation_id: int | None) -> Conversation:
        """Resume a conversation, or start one when no id (or an unknown id) is given."""
        if conversation_id is not None:
            conversation = await self.store.get_conversation(conversation_id)
            if conversation:
                return conversation
            logger.warning("conversation_not_found", conversation_id=conversation_id)
        return await self.create_conversation()

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        """Retrieve a conversation by ID."""
        return await self.store.get_conversation(conversation_id)

    async def list_conversations(self) -> list[Conversation]:
        """All conversations, newest first."""
        return await self.store.list_conversations()

    async def add_message(
        self,
        conversation_id: int,
        role: MessageRole,
        content: str,
    ) -> Message:
        """Add a message to the conversation."""
        conversation = await self.store.get_conversation(conversation_id)

        if not conversation:
            raise ValueError(f"Conversation {conversation_id} not found")

        message = await self.store.add_message(conversation_id, role, content)

        logger.debug(
            "message_added",
            conversation_id=conversation_id,
            role=role.value,
        )

        return message

    async def get_messages(self, conversation_id: int) -> list[Message]:
        """Full message history, oldest first."""
        return await self.store.list_messages(conversation_id)

    async def get_recent_messages(
        self,
        conversation_id: int,
        limit: int = 10,
    ) -> list[Message]:
        """Get recent messages from a conversation."""
        messages = await self.store.list_messages(conversation_id)
        return messages[-limit:] if messages else []

    async def delete_conversation(self, conversation_id: int) -> None:
        """Delete a conversation and its messages."""
        await self.store.delete_conversation(conversation_id)

        logger.info("conversation_deleted", conversation_id=conversation_id)
