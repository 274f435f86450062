"""API routes for the restaurant operations engine."""

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.agents.assistant import AssistantUnavailableError, RestaurantAssistant
from src.engine.errors import ErrorKind, OperationError
from src.engine.service import RestaurantEngine
from src.models.conversation import Conversation, Message
from src.models.inventory import InventoryItem
from src.models.ledger import LogEntry
from src.models.menu import MenuItem, Modifications
from src.models.order import CartLine, Order, OrderStatus
from src.models.results import (
    ChefPerformance,
    CheckoutResult,
    FinancialStatus,
    ForecastEntry,
    FundsResult,
    RestockResult,
    SaleResult,
    WasteResult,
)
from src.state.conversation import ConversationManager
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


# Request/Response Models


class RestockRequest(BaseModel):
    """Units to buy for an inventory item."""

    quantity: float


class RateRequest(BaseModel):
    """Customer rating, 1 to 5."""

    rating: float


class SaleRequest(BaseModel):
    """Single dish sale."""

    menu_item_id: str
    modifications: Modifications = Field(default_factory=Modifications)
    quantity: int = 1
    customer_name: str | None = None
    allergies: str | None = None
    special_instructions: str | None = None


class CheckoutRequest(BaseModel):
    """Point-of-sale cart."""

    items: list[CartLine]
    customer_name: str | None = None
    allergies: str | None = None


class WasteRequest(BaseModel):
    """Dish reported as failed by the kitchen."""

    menu_item_id: str
    reason: str


class FundsRequest(BaseModel):
    """Capital added to operating funds."""

    amount: Decimal


class OrderStatusRequest(BaseModel):
    """Kitchen workflow transition."""

    status: OrderStatus


class InitResponse(BaseModel):
    """Result of seeding the sample restaurant."""

    success: bool = True
    seeded: bool


class ChatRequest(BaseModel):
    """Message for the assistant."""

    message: str = Field(min_length=1)
    conversation_id: int | None = None


class ChatResponse(BaseModel):
    """Assistant reply."""

    conversation_id: int
    response: str
    metadata: dict[str, Any] = Field(default_factory=dict)


# Error mapping

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.OUT_OF_STOCK: status.HTTP_409_CONFLICT,
    ErrorKind.INSUFFICIENT_FUNDS: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


async def operation_error_handler(request: Request, exc: OperationError) -> JSONResponse:
    """Render a rejected engine operation."""
    logger.info(
        "operation_rejected",
        path=request.url.path,
        kind=exc.kind.value,
        reason=exc.reason,
    )
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        content={"success": False, "kind": exc.kind.value, "reason": exc.reason},
    )


# Dependencies


def get_engine(request: Request) -> RestaurantEngine:
    """Engine built during application startup."""
    return request.app.state.engine


def get_assistant(request: Request) -> RestaurantAssistant:
    """Assistant built during application startup."""
    return request.app.state.assistant


def get_conversation_manager(request: Request) -> ConversationManager:
    """Conversation manager built during application startup."""
    return request.app.state.conversation_manager


# Setup


@router.post("/init", response_model=InitResponse)
async def init_data(engine: RestaurantEngine = Depends(get_engine)) -> InitResponse:
    """Load the sample inventory and menu if the store is empty."""
    seeded = await engine.seed()
    return InitResponse(seeded=seeded)


# Inventory


@router.get("/inventory", response_model=list[InventoryItem])
async def list_inventory(engine: RestaurantEngine = Depends(get_engine)) -> list[InventoryItem]:
    return await engine.list_inventory()


@router.get("/inventory/low-stock", response_model=list[InventoryItem])
async def list_low_stock(engine: RestaurantEngine = Depends(get_engine)) -> list[InventoryItem]:
    """Items at or below their reorder threshold."""
    return await engine.get_low_stock()


@router.post("/inventory/{item_id}/restock", response_model=RestockResult)
async def restock_item(
    item_id: str,
    request: RestockRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> RestockResult:
    """Buy stock; the cost is paid from operating funds."""
    return await engine.restock(item_id, request.quantity)


# Menu


@router.get("/menu", response_model=list[MenuItem])
async def list_menu(engine: RestaurantEngine = Depends(get_engine)) -> list[MenuItem]:
    return await engine.list_menu()


@router.get("/menu/{menu_item_id}", response_model=MenuItem)
async def get_menu_item(
    menu_item_id: str,
    engine: RestaurantEngine = Depends(get_engine),
) -> MenuItem:
    return await engine.get_menu_item(menu_item_id)


@router.post("/menu/{menu_item_id}/rate", response_model=MenuItem)
async def rate_menu_item(
    menu_item_id: str,
    request: RateRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> MenuItem:
    """Submit a rating; high ratings raise ingredient safety thresholds."""
    return await engine.rate(menu_item_id, request.rating)


# Sales and kitchen


@router.post("/sales", response_model=SaleResult)
async def process_sale(
    request: SaleRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> SaleResult:
    return await engine.sell(
        request.menu_item_id,
        modifications=request.modifications,
        quantity=request.quantity,
        customer_name=request.customer_name,
        allergies=request.allergies,
        special_instructions=request.special_instructions,
    )


@router.post("/sales/checkout", response_model=CheckoutResult)
async def checkout(
    request: CheckoutRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> CheckoutResult:
    """
    Process a cart.

    Lines succeed or fail independently; the response lists each line's
    outcome. Returns 200 even when every line failed.
    """
    return await engine.checkout(
        request.items,
        customer_name=request.customer_name,
        allergies=request.allergies,
    )


@router.post("/waste", response_model=WasteResult)
async def record_waste(
    request: WasteRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> WasteResult:
    return await engine.record_waste(request.menu_item_id, request.reason)


@router.get("/orders/recent", response_model=list[Order])
async def recent_orders(
    limit: int = Query(default=10, ge=1, le=100),
    engine: RestaurantEngine = Depends(get_engine),
) -> list[Order]:
    return await engine.list_recent_orders(limit=limit)


@router.patch("/orders/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: int,
    request: OrderStatusRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> Order:
    return await engine.update_order_status(order_id, request.status)


# Funds and reporting


@router.post("/funds/add", response_model=FundsResult)
async def add_funds(
    request: FundsRequest,
    engine: RestaurantEngine = Depends(get_engine),
) -> FundsResult:
    return await engine.add_funds(request.amount)


@router.get("/stats", response_model=FinancialStatus)
async def get_stats(engine: RestaurantEngine = Depends(get_engine)) -> FinancialStatus:
    """Operating funds, revenue, cost and net profit."""
    return await engine.get_financial_status()


@router.get("/logs", response_model=list[LogEntry])
async def list_logs(
    limit: int = Query(default=100, ge=1, le=500),
    engine: RestaurantEngine = Depends(get_engine),
) -> list[LogEntry]:
    """Activity log, newest first."""
    return await engine.list_logs(limit=limit)


# Analytics


@router.get("/analytics/forecast", response_model=list[ForecastEntry])
async def demand_forecast(engine: RestaurantEngine = Depends(get_engine)) -> list[ForecastEntry]:
    return await engine.get_forecast()


@router.get("/analytics/chefs", response_model=list[ChefPerformance])
async def chef_performance(
    engine: RestaurantEngine = Depends(get_engine),
) -> list[ChefPerformance]:
    return await engine.get_chef_performance()


@router.get("/analytics/insights", response_model=list[str])
async def insights(engine: RestaurantEngine = Depends(get_engine)) -> list[str]:
    """Batch analysis, funds and waste insights, newest first."""
    return await engine.get_insights()


# Assistant


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    assistant: RestaurantAssistant = Depends(get_assistant),
) -> ChatResponse:
    """
    Send a message to the operations assistant.

    Starts a new conversation when no conversation id is given.
    """
    try:
        reply = await assistant.respond(request.message, request.conversation_id)
    except AssistantUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except Exception as e:
        logger.error("chat_failed", conversation_id=request.conversation_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="The assistant could not complete the request.",
        )

    logger.info(
        "message_processed",
        conversation_id=reply.conversation_id,
        tokens=reply.tokens_used,
        tool_calls=len(reply.tool_calls),
    )

    return ChatResponse(
        conversation_id=reply.conversation_id,
        response=reply.message,
        metadata={
            "tool_calls": reply.tool_calls,
            "tokens_used": reply.tokens_used,
            "execution_time_ms": reply.execution_time_ms,
        },
    )


@router.get("/conversations", response_model=list[Conversation])
async def list_conversations(
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
) -> list[Conversation]:
    return await conversation_manager.list_conversations()


@router.get("/conversations/{conversation_id}/messages", response_model=list[Message])
async def list_messages(
    conversation_id: int,
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
) -> list[Message]:
    conversation = await conversation_manager.get_conversation(conversation_id)

    if not conversation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )

    return await conversation_manager.get_messages(conversation_id)


@router.delete(
    "/conversations/{conversation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_conversation(
    conversation_id: int,
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
) -> None:
    """Delete a conversation and its messages."""
    await conversation_manager.delete_conversation(conversation_id)

    logger.info("conversation_deleted_via_api", conversation_id=conversation_id)
