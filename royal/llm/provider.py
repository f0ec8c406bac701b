"""Completion types and the LLM error hierarchy."""

from dataclasses import dataclass


# ════════════════════════════════════════════════════════
# LLM Exception Hierarchy — the Discord channel catches
# these and turns them into a visible error reply.
# ════════════════════════════════════════════════════════

class LLMError(Exception):
    """Base class for all completion errors."""
    pass


class UpstreamError(LLMError):
    """Non-2xx response from the completion endpoint."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"OpenAI-compatible API error ({status_code}): {message}")


class CompletionTimeoutError(LLMError, TimeoutError):
    """No response within the configured deadline; the request was cancelled."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Completion request timed out after {timeout:g}s")


@dataclass
class ChatMessage:
    role: str           # 'system', 'user', 'assistant'
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}
