"""
LLM Components Package

Contains:
- chat_provider: OpenAI / Ollama chat backends with model profiles
- prompts: Langchain prompt templates
- output: Defensive cleanup of raw model output
"""

from .chat_provider import (
    ChatProvider,
    ChatTurn,
    ModelProfile,
    OllamaChatProvider,
    OpenAIChatProvider,
    ToolCallRequest,
    create_chat_provider
)
from .output import lower_keys, parse_json_object, split_variants, strip_code_fences

__all__ = [
    "ChatProvider",
    "ChatTurn",
    "ModelProfile",
    "OllamaChatProvider",
    "OpenAIChatProvider",
    "ToolCallRequest",
    "create_chat_provider",
    "lower_keys",
    "parse_json_object",
    "split_variants",
    "strip_code_fences",
]
