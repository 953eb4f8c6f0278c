from .base import Completion, LLMEngine, ToolCall
from .LLMEngines import DEFAULT_MODEL, OpenAIEngine

__all__ = [
    "DEFAULT_MODEL",
    "Completion",
    "LLMEngine",
    "OpenAIEngine",
    "ToolCall",
]
