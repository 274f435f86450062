"""Data models for the restaurant operations engine."""

from src.models.conversation import AssistantReply, Conversation, Message, MessageRole
from src.models.inventory import InventoryItem
from src.models.ledger import Ledger, LogEntry, LogType
from src.models.menu import MenuCategory, MenuItem, Modifications, RecipeIngredient
from src.models.order import BatchOrder, CartLine, Order, OrderItem, OrderStatus

__all__ = [
    # Conversation
    "Conversation",
    "Message",
    "MessageRole",
    "AssistantReply",
    # Inventory
    "InventoryItem",
    # Ledger
    "Ledger",
    "LogEntry",
    "LogType",
    # Menu
    "MenuCategory",
    "MenuItem",
    "Modifications",
    "RecipeIngredient",
    # Order
    "BatchOrder",
    "CartLine",
    "Order",
    "OrderItem",
    "OrderStatus",
]
