"""OpenAI-compatible Chat Completions client (OpenAI, Novita, Groq, Together, etc.)."""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Optional

import httpx

from ..communication.outbound import strip_think_blocks
from .provider import ChatMessage, CompletionTimeoutError, LLMError, UpstreamError

if TYPE_CHECKING:
    from ..config import RoyalSettings
    from ..conversation import Conversation

logger = logging.getLogger("royal.llm.openai")

TEMPERATURE = 0.7
MAX_TOKENS = 512


def resolve_chat_url(base_url: str, api_url: Optional[str] = None) -> str:
    """Resolve the chat completions endpoint.

    An explicit full URL always wins. Otherwise the base URL gets
    ``/chat/completions`` when it already ends in ``/v1`` and
    ``/v1/chat/completions`` when it does not.
    """
    if api_url and api_url.strip():
        return api_url.strip()
    clean = base_url.rstrip("/")
    if clean.endswith("/v1"):
        return f"{clean}/chat/completions"
    return f"{clean}/v1/chat/completions"


def build_headers(
    api_key: str,
    auth_header: str = "Authorization",
    auth_prefix: Optional[str] = "Bearer",
    extra: Optional[dict[str, str]] = None,
) -> dict[str, str]:
    """Build request headers. Content type and auth always override extras."""
    auth_value = f"{auth_prefix} {api_key}".strip() if auth_prefix else api_key
    return {
        **(extra or {}),
        "Content-Type": "application/json",
        auth_header: auth_value,
    }


def _extract_error_message(body: str) -> str:
    """Best-effort error text from an error response body."""
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("message"):
            return str(data["message"])
    return body


def parse_completion(data: dict) -> str:
    """Extract the assistant text from a chat completions response.

    Reads ``choices[0].message.content``, falling back to the legacy
    ``choices[0].text`` when content is absent. Reasoning models sometimes
    put everything into ``reasoning_content``; that is used only when the
    cleaned primary content comes out empty.
    """
    choices = data.get("choices") or []
    choice = choices[0] if choices and isinstance(choices[0], dict) else {}
    msg = choice.get("message") or {}

    raw_content = msg.get("content")
    if raw_content is None:
        raw_content = choice.get("text") or ""

    content = strip_think_blocks(str(raw_content))
    if not content:
        content = strip_think_blocks(str(msg.get("reasoning_content") or ""))
    return (content or "").strip()


class CompletionClient:
    """Sends a conversation to an OpenAI-compatible chat completions endpoint.

    One attempt per call, no retries. The whole request (connect, upload,
    response) must finish within ``timeout`` seconds or it is cancelled and
    :class:`CompletionTimeoutError` is raised.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        api_url: Optional[str] = None,
        auth_header: str = "Authorization",
        auth_prefix: Optional[str] = "Bearer",
        extra_headers: Optional[dict[str, str]] = None,
        timeout: float = 90.0,
    ):
        self.model = model
        self.url = resolve_chat_url(base_url, api_url)
        self.headers = build_headers(api_key, auth_header, auth_prefix, extra_headers)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: "RoyalSettings") -> "CompletionClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            api_url=settings.openai_api_url,
            auth_header=settings.openai_auth_header,
            auth_prefix=settings.openai_auth_prefix,
            extra_headers=settings.extra_headers,
            timeout=settings.request_timeout,
        )

    @staticmethod
    def build_messages(conversation: "Conversation", system_prompt: str) -> list[ChatMessage]:
        messages = [ChatMessage(role="system", content=system_prompt)]
        messages.extend(
            ChatMessage(role=turn.role, content=turn.content) for turn in conversation.turns
        )
        return messages

    async def complete(
        self,
        conversation: "Conversation",
        system_prompt: str,
        log_hint: str = "",
    ) -> str:
        """Request a reply for ``conversation``. Returns cleaned text, possibly empty.

        Raises:
            UpstreamError: non-2xx status from the endpoint.
            CompletionTimeoutError: no response within the timeout.
            LLMError: 2xx response that is not valid JSON.
        """
        body = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.build_messages(conversation, system_prompt)],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }
        logger.debug(f"Request: model={self.model}, messages={len(body['messages'])}")

        try:
            # wait_for cancels the request task on expiry, which closes the connection
            data = await asyncio.wait_for(self._post(body), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(f"[chat] {log_hint} timed out after {self.timeout:g}s")
            raise CompletionTimeoutError(self.timeout)

        content = parse_completion(data)
        logger.info(f"[chat] {log_hint} responded")
        return content

    async def _post(self, body: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(self.url, json=body, headers=self.headers)

        text = resp.text
        if not 200 <= resp.status_code < 300:
            logger.error(f"Completion endpoint returned {resp.status_code}: {text[:200]}")
            raise UpstreamError(resp.status_code, _extract_error_message(text))

        try:
            data = json.loads(text)
        except ValueError as e:
            raise LLMError(f"Malformed JSON from completion endpoint: {e}") from e
        if not isinstance(data, dict):
            raise LLMError("Unexpected response shape from completion endpoint")
        return data
