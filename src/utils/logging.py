"""Structured logging configuration."""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from src.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    # Configure standard library logging
    log_level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        formatter = jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    # uvicorn and redis log through the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class AssistantLogger:
    """Logger for assistant turns and the engine tools it calls."""

    def __init__(self, assistant_id: str):
        self.assistant_id = assistant_id
        self.logger = get_logger(assistant_id)

    def log_interaction(
        self,
        action: str,
        conversation_id: int,
        duration_ms: float | None = None,
        tokens: int | None = None,
        **kwargs: Any,
    ) -> None:
        """Log an LLM round trip with structured data."""
        log_data: dict[str, Any] = {
            "assistant_id": self.assistant_id,
            "conversation_id": conversation_id,
            "action": action,
        }

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms
        if tokens is not None:
            log_data["tokens"] = tokens

        log_data.update(kwargs)
        self.logger.info("assistant_interaction", **log_data)

    def log_tool_call(
        self,
        tool_name: str,
        conversation_id: int | None,
        duration_ms: float,
        success: bool,
        **kwargs: Any,
    ) -> None:
        """Log a tool invocation."""
        self.logger.info(
            "tool_call",
            assistant_id=self.assistant_id,
            tool_name=tool_name,
            conversation_id=conversation_id,
            duration_ms=duration_ms,
            success=success,
            **kwargs,
        )

    def log_error(
        self,
        error: str,
        conversation_id: int,
        **kwargs: Any,
    ) -> None:
        """Log an error."""
        self.logger.error(
            "assistant_error",
            assistant_id=self.assistant_id,
            conversation_id=conversation_id,
            error=error,
            **kwargs,
        )
