"""Utility modules."""

from src.utils.logging import AssistantLogger, get_logger, setup_logging
from src.utils.prompts import PromptTemplates
from src.utils.tracing import OperationTracer

__all__ = ["setup_logging", "get_logger", "AssistantLogger", "PromptTemplates", "OperationTracer"]
