"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from src.agents.assistant import RestaurantAssistant
from src.api.routes import operation_error_handler, router
from src.api.websocket import DashboardConnectionManager, handle_dashboard_websocket
from src.config import get_settings
from src.engine.errors import OperationError
from src.engine.service import RestaurantEngine
from src.state import ConversationManager, create_store
from src.utils.logging import get_logger, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("application_starting")
    settings = get_settings()

    store = create_store(settings)
    engine = RestaurantEngine(store, settings)
    dashboard = DashboardConnectionManager()
    engine.events.subscribe(dashboard.broadcast)

    conversation_manager = ConversationManager(store)
    assistant = RestaurantAssistant(engine, conversation_manager, settings=settings)

    app.state.engine = engine
    app.state.dashboard = dashboard
    app.state.conversation_manager = conversation_manager
    app.state.assistant = assistant

    if await engine.seed():
        logger.info("sample_data_loaded")
    logger.info(
        "engine_initialized",
        storage_backend=settings.storage_backend,
        assistant_enabled=assistant.is_available,
    )

    yield

    # Shutdown
    logger.info("application_shutting_down")
    engine.events.unsubscribe(dashboard.broadcast)
    await engine.close()


# Create FastAPI app
app = FastAPI(
    title="Restaurant Operations Engine",
    description="Inventory, funds and order consistency engine with an operations assistant",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(OperationError, operation_error_handler)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "restaurant-operations-engine"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Restaurant Operations Engine API",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(router, prefix="/api/v1", tags=["api"])


# WebSocket endpoint
@app.websocket("/ws/dashboard")
async def dashboard_websocket(websocket: WebSocket) -> None:
    """Live feed of engine events for dashboards."""
    await handle_dashboard_websocket(
        websocket,
        websocket.app.state.dashboard,
        websocket.app.state.engine,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
