"""Reasoning provider boundary — messages, streaming, and the LiteLLM adapter."""

from mimir.core.interface.config import ModelConfig
from mimir.core.interface.litellm_provider import LiteLLMProvider
from mimir.core.interface.models import ChatChunk, ChatMessage, ChatResponse, ToolCall, Usage
from mimir.core.interface.provider import ReasoningProvider
from mimir.core.interface.streaming import ChunkChannel, pump

__all__ = [
    "ChatChunk",
    "ChatMessage",
    "ChatResponse",
    "ChunkChannel",
    "LiteLLMProvider",
    "ModelConfig",
    "ReasoningProvider",
    "ToolCall",
    "Usage",
    "pump",
]
