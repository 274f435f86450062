"""Restaurant Assistant - conversational access to the operations engine."""

import json
import time
from typing import Any

from anthropic import AsyncAnthropic

from src.agents.base import BaseAgent, ToolResult
from src.config import Settings
from src.engine.service import RestaurantEngine
from src.models.conversation import AssistantReply, MessageRole
from src.models.menu import Modifications
from src.state.conversation import ConversationManager
from src.utils.prompts import PromptTemplates
from src.utils.tracing import OperationTracer


class AssistantUnavailableError(RuntimeError):
    """No LLM client is configured."""


class RestaurantAssistant(BaseAgent):
    """
    Assistant that queries and mutates restaurant state through natural language.

    Every tool goes through ``RestaurantEngine``, so orders placed in chat
    follow the same stock, funds and logging rules as the point of sale.
    Responsibilities:
    - Report inventory, menu and financial status
    - Restock items and add funds
    - Take allergy-aware orders
    - Summarize recent orders and insights
    """

    def __init__(
        self,
        engine: RestaurantEngine,
        conversation_manager: ConversationManager,
        client: AsyncAnthropic | None = None,
        settings: Settings | None = None,
    ):
        super().__init__("restaurant_assistant", client=client, settings=settings or engine.settings)
        self.engine = engine
        self.conversation_manager = conversation_manager
        self.register_tools()

    @property
    def system_prompt(self) -> str:
        return PromptTemplates.ASSISTANT_SYSTEM

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def register_tools(self) -> None:
        """Register assistant tools."""
        self.register_tool(
            "get_inventory_status",
            self.get_inventory_status,
            "Get current inventory levels and low stock items",
        )
        self.register_tool(
            "restock_item",
            self.restock_item,
            "Restock an inventory item with a specified quantity. The cost is paid "
            "from operating funds.",
            properties={
                "item_id": {"type": "string", "description": "The inventory item ID"},
                "quantity": {"type": "number", "description": "Quantity to add"},
            },
            required=["item_id", "quantity"],
        )
        self.register_tool(
            "get_menu_info",
            self.get_menu_info,
            "Get menu size, categories and top rated items",
        )
        self.register_tool(
            "get_menu_item_details",
            self.get_menu_item_details,
            "Get detailed info about a specific menu item including ingredients, to help "
            "the customer make allergy-aware choices",
            properties={
                "menu_item_name": {
                    "type": "string",
                    "description": "The name of the menu item (partial match supported)",
                },
            },
            required=["menu_item_name"],
        )
        self.register_tool(
            "process_order",
            self.process_order,
            "Process an order after confirming allergies and modifications with the customer",
            properties={
                "menu_item_id": {"type": "string", "description": "The menu item ID to order"},
                "customer_name": {
                    "type": "string",
                    "description": "Customer's name (default: Walk-in)",
                },
                "allergies": {"type": "string", "description": "Customer's allergies if any"},
                "removed_ingredients": {
                    "type": "string",
                    "description": "Comma-separated list of ingredients to remove",
                },
                "special_instructions": {
                    "type": "string",
                    "description": "Any special instructions for the order",
                },
                "quantity": {"type": "integer", "description": "Number of items (default: 1)"},
            },
            required=["menu_item_id"],
        )
        self.register_tool(
            "get_recent_orders",
            self.get_recent_orders,
            "Get recent orders for the live feed",
            properties={
                "limit": {
                    "type": "integer",
                    "description": "Number of orders to retrieve (default: 10)",
                },
            },
        )
        self.register_tool(
            "get_financial_status",
            self.get_financial_status,
            "Get current operating funds, revenue, and costs",
        )
        self.register_tool(
            "add_funds",
            self.add_funds,
            "Add funds to the operating budget",
            properties={
                "amount": {"type": "number", "description": "Amount to add to budget"},
            },
            required=["amount"],
        )
        self.register_tool(
            "get_ai_insights",
            self.get_ai_insights,
            "Get strategic insights about sales and inventory",
        )

    # Tools

    async def get_inventory_status(self) -> dict[str, Any]:
        status = await self.engine.get_inventory_status()
        return status.model_dump(mode="json")

    async def restock_item(self, item_id: str, quantity: float) -> dict[str, Any]:
        result = await self.engine.restock(item_id, float(quantity))
        return result.model_dump(mode="json")

    async def get_menu_info(self) -> dict[str, Any]:
        overview = await self.engine.get_menu_overview()
        return overview.model_dump(mode="json")

    async def get_menu_item_details(self, menu_item_name: str) -> dict[str, Any]:
        details = await self.engine.get_menu_item_details(menu_item_name)
        return details.model_dump(mode="json")

    async def process_order(
        self,
        menu_item_id: str,
        customer_name: str | None = None,
        allergies: str | None = None,
        removed_ingredients: str | None = None,
        special_instructions: str | None = None,
        quantity: int = 1,
    ) -> dict[str, Any]:
        """
        Sell one dish, honouring removals.

        Removals are free text ("no onions, cheese"); the engine's ingredient
        resolver decides which recipe items they skip.
        """
        removed = [part.strip() for part in (removed_ingredients or "").split(",") if part.strip()]
        sale = await self.engine.sell(
            menu_item_id,
            modifications=Modifications(remove=removed),
            quantity=int(quantity),
            customer_name=customer_name,
            allergies=allergies,
            special_instructions=special_instructions,
        )
        result = sale.model_dump(mode="json")
        result.update(
            customer_name=customer_name or "Walk-in",
            allergies=allergies,
            removed_ingredients=", ".join(removed) or None,
            special_instructions=special_instructions,
        )
        return result

    async def get_recent_orders(self, limit: int = 10) -> dict[str, Any]:
        orders = await self.engine.list_recent_orders(limit=int(limit))
        return {"orders": [order.model_dump(mode="json") for order in orders]}

    async def get_financial_status(self) -> dict[str, Any]:
        status = await self.engine.get_financial_status()
        return status.model_dump(mode="json")

    async def add_funds(self, amount: float) -> dict[str, Any]:
        result = await self.engine.add_funds(amount)
        return result.model_dump(mode="json")

    async def get_ai_insights(self) -> dict[str, Any]:
        summary = await self.engine.get_strategic_summary()
        return summary.model_dump(mode="json")

    # Conversation turn

    async def respond(self, message: str, conversation_id: int | None = None) -> AssistantReply:
        """
        Answer one user message.

        The message is persisted, Claude is called with the current
        restaurant status, requested tools are executed against the engine
        and Claude is called again with their results. If the final reply
        has no text, the last tool results are summarized directly.
        """
        if not self.is_available:
            raise AssistantUnavailableError(
                "Assistant is not configured. Set ANTHROPIC_API_KEY to enable chat."
            )

        start_time = time.time()
        conversation = await self.conversation_manager.get_or_create(conversation_id)
        await self.conversation_manager.add_message(conversation.id, MessageRole.USER, message)

        tracer = OperationTracer(conversation.id)
        history = await self.conversation_manager.get_recent_messages(
            conversation.id, limit=self.settings.max_conversation_length
        )
        messages = self._build_message_history(history)
        system = await self._build_system_prompt()

        tokens_used = 0
        tool_calls: list[dict[str, Any]] = []
        last_results: list[ToolResult] = []

        try:
            with tracer.trace_operation("llm_call", round=0):
                response = await self._call_llm_with_retry(messages, system)
            tokens_used += self._count_tokens(response)

            rounds = 0
            while self._tool_uses(response) and rounds < self.settings.max_tool_rounds:
                rounds += 1
                messages.append(
                    {
                        "role": "assistant",
                        "content": [self._block_to_param(block) for block in response.content],
                    }
                )

                last_results = []
                tool_results = []
                for block in self._tool_uses(response):
                    with tracer.trace_operation("tool_call", tool=block.name):
                        result = await self.execute_tool(
                            block.name, dict(block.input or {}), conversation.id
                        )
                    last_results.append(result)
                    tool_calls.append(
                        {
                            "name": block.name,
                            "input": dict(block.input or {}),
                            "success": result.success,
                            "error": result.error,
                        }
                    )
                    tool_results.append(
                        {
                            "type": "tool_result",
                            "tool_use_id": block.id,
                            "content": json.dumps(result.to_content()),
                            "is_error": not result.success,
                        }
                    )
                messages.append({"role": "user", "content": tool_results})

                with tracer.trace_operation("llm_call", round=rounds):
                    response = await self._call_llm_with_retry(messages, system)
                tokens_used += self._count_tokens(response)

        except Exception as e:
            summary = tracer.get_trace_summary()
            self.logger.log_error(
                error=str(e),
                conversation_id=conversation.id,
                llm_calls=summary["llm_calls"],
                failed_events=summary["failed_events"],
            )
            raise

        reply = self._text_of(response)
        if not reply:
            reply = "\n\n".join(
                format_tool_result(result.tool_name, result.to_content()) for result in last_results
            )
        if not reply:
            reply = PromptTemplates.EMPTY_REPLY

        await self.conversation_manager.add_message(conversation.id, MessageRole.ASSISTANT, reply)

        execution_time_ms = (time.time() - start_time) * 1000
        self.logger.log_interaction(
            action="respond",
            conversation_id=conversation.id,
            duration_ms=execution_time_ms,
            tokens=tokens_used,
            tool_calls=len(tool_calls),
            llm_calls=tracer.get_trace_summary()["llm_calls"],
        )

        return AssistantReply(
            conversation_id=conversation.id,
            message=reply,
            tool_calls=tool_calls,
            tokens_used=tokens_used,
            execution_time_ms=execution_time_ms,
        )

    async def _build_system_prompt(self) -> str:
        """System prompt with a snapshot of funds, low stock and menu ids."""
        ledger = await self.engine.get_ledger()
        low_stock = await self.engine.get_low_stock()
        menu = await self.engine.list_menu()
        inventory = await self.engine.list_inventory()

        return self.system_prompt.format(
            operating_funds=f"{ledger.operating_funds:.2f}",
            low_stock=", ".join(item.name for item in low_stock) or PromptTemplates.NO_LOW_STOCK,
            menu_count=len(menu),
            inventory_count=len(inventory),
            menu_items=", ".join(f"{item.name} (ID: {item.id})" for item in menu),
        )

    @staticmethod
    def _tool_uses(response: Any) -> list[Any]:
        return [block for block in response.content or [] if block.type == "tool_use"]

    @staticmethod
    def _text_of(response: Any) -> str:
        return "".join(
            block.text for block in response.content or [] if block.type == "text"
        ).strip()

    @staticmethod
    def _count_tokens(response: Any) -> int:
        usage = getattr(response, "usage", None)
        if usage is None:
            return 0
        return usage.input_tokens + usage.output_tokens

    @staticmethod
    def _block_to_param(block: Any) -> dict[str, Any]:
        if block.type == "tool_use":
            return {
                "type": "tool_use",
                "id": block.id,
                "name": block.name,
                "input": dict(block.input or {}),
            }
        return {"type": "text", "text": block.text}


def _usd(value: Any) -> str:
    return f"${float(value or 0):.2f}"


def format_tool_result(tool_name: str, result: dict[str, Any]) -> str:
    """Plain-language rendering of a tool result, used when the model returns no text."""
    if result.get("success") is False:
        if tool_name == "process_order":
            return f"Could not process order: {result.get('error')}"
        if tool_name == "get_menu_item_details":
            return "Sorry, I couldn't find that menu item."
        return f"Error: {result.get('error')}"

    if tool_name == "get_inventory_status":
        low_items = result.get("low_stock_items") or []
        if not low_items:
            return (
                f"Great news! All inventory levels are healthy. You have "
                f"{result.get('total_items')} items with a total value of "
                f"{_usd(result.get('total_value'))}."
            )
        lines = "\n".join(
            f"- {i['name']}: {i['quantity']:g} {i['unit']} (threshold: {i['threshold']:g})"
            for i in low_items
        )
        return (
            f"Inventory Alert!\n\nLow stock items:\n{lines}\n\n"
            f"Total inventory value: {_usd(result.get('total_value'))}"
        )

    if tool_name == "get_menu_info":
        top = "\n".join(
            f"- {m['name']} - {_usd(m['price'])} ({m['rating']:.1f} stars)"
            for m in result.get("top_rated") or []
        )
        return (
            f"Menu Overview\n\nWe have {result.get('total_items')} items across "
            f"{len(result.get('categories') or {})} categories.\n\nTop Rated:\n{top}"
        )

    if tool_name == "get_financial_status":
        status = "Low funds - restock carefully!" if result.get("status") == "critical" else "Healthy"
        return (
            "Financial Summary\n\n"
            f"- Operating Budget: {_usd(result.get('operating_funds'))}\n"
            f"- Total Revenue: {_usd(result.get('total_revenue'))}\n"
            f"- Total Costs: {_usd(result.get('total_cost'))}\n"
            f"- Net Profit: {_usd(result.get('net_profit'))}\n\n"
            f"Status: {status}"
        )

    if tool_name == "restock_item":
        return (
            "Restocked successfully!\n\n"
            f"- Item: {result.get('item_name')}\n"
            f"- New Quantity: {result.get('new_quantity'):g}\n"
            f"- Cost: {_usd(result.get('cost'))}\n"
            f"- Remaining Budget: {_usd(result.get('remaining_funds'))}"
        )

    if tool_name == "get_menu_item_details":
        ingredients = ", ".join(result.get("ingredients") or []) or "No ingredients listed"
        return (
            f"**{result.get('name')}** - {_usd(result.get('price'))}\n\n"
            f"{result.get('description')}\n\n"
            f"**Ingredients:** {ingredients}\n"
            f"**Prep Time:** {result.get('prep_time')}\n\n"
            "Before I place your order, do you have any allergies or would you like any "
            "ingredients removed?"
        )

    if tool_name == "process_order":
        quantity = result.get("quantity") or 1
        summary = f"Order #{result.get('order_id')} confirmed!\n\n"
        summary += f"- Item: {result.get('item_name')}{f' x{quantity}' if quantity > 1 else ''}\n"
        summary += f"- Total: {_usd(result.get('total'))}\n"
        if result.get("removed_ingredients"):
            summary += f"- Removed: {result['removed_ingredients']}\n"
        if result.get("special_instructions"):
            summary += f"- Notes: {result['special_instructions']}\n"
        if result.get("allergies"):
            summary += f"- Allergies noted: {result['allergies']}\n"
        return summary + "\nYour order is being prepared. Thank you!"

    if tool_name == "get_recent_orders":
        orders = result.get("orders") or []
        if not orders:
            return "No recent orders found."
        lines = [f"Recent Orders ({len(orders)}):\n"]
        for index, order in enumerate(orders, start=1):
            lines.append(f"{index}. Order #{order['id']} - {_usd(order['total'])} ({order['status']})")
            for item in order.get("items") or []:
                removed = item.get("removed_ingredients")
                lines.append(f"   - {item['menu_item_name']}{f' (no {removed})' if removed else ''}")
        return "\n".join(lines)

    if tool_name == "add_funds":
        return (
            "Funds added successfully!\n\n"
            f"- Added: {_usd(result.get('added'))}\n"
            f"- New Budget: {_usd(result.get('new_funds'))}"
        )

    if tool_name == "get_ai_insights":
        lines = [
            "Strategic Insights\n",
            f"- Recent Orders: {result.get('recent_order_count')}",
            f"- Low Stock Items: {result.get('low_stock_count')}",
        ]
        if result.get("low_stock_items"):
            lines.append(f"- Items needing attention: {', '.join(result['low_stock_items'])}")
        lines.append(f"- Top Sellers: {', '.join(result.get('top_menu_items') or []) or 'N/A'}")
        return "\n".join(lines)

    return "Action completed successfully."
