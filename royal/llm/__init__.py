"""OpenAI-compatible completion client."""

from .openai import CompletionClient, build_headers, parse_completion, resolve_chat_url
from .provider import ChatMessage, CompletionTimeoutError, LLMError, UpstreamError

__all__ = [
    "ChatMessage",
    "CompletionClient",
    "CompletionTimeoutError",
    "LLMError",
    "UpstreamError",
    "build_headers",
    "parse_completion",
    "resolve_chat_url",
]
