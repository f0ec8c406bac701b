"""Error text shown to Discord users."""

import httpx

from ..llm.provider import CompletionTimeoutError, UpstreamError


def format_error(e: BaseException) -> str:
    """Render any exception as a short ``❌ Error: ...`` reply.

    Upstream errors keep the provider's own message so the user (usually an
    admin testing the bot) sees why the request was rejected.
    """
    if isinstance(e, UpstreamError):
        detail = str(e)
    elif isinstance(e, CompletionTimeoutError):
        detail = f"Request timed out after {e.timeout:g}s. Please try again."
    elif isinstance(e, httpx.ConnectError):
        detail = "Cannot connect to the completion endpoint."
    else:
        detail = str(e) or type(e).__name__

    # Keep the whole reply inside one Discord message
    if len(detail) > 1800:
        detail = detail[:1800] + "…"
    return f"❌ Error: {detail}"
