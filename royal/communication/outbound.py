"""Outbound message processing — cleanup and splitting before delivery.

Handles:
- Reasoning markup stripping (<think>, <reasoning>)
- Consecutive newline cleanup
- Message splitting for platform length limits
"""

import re
from typing import Optional


# ============================================================
# REASONING MARKUP STRIPPING
# ============================================================
# Reasoning models often inline their chain of thought as
# <think>...</think>. Some emit <reasoning> instead, occasionally
# with spaces inside the brackets. Unclosed or stray tags are
# removed on their own.

_THINK_BLOCK_RE = re.compile(r'<think\b[^>]*>.*?</think>', re.IGNORECASE | re.DOTALL)
_THINK_TAG_RE = re.compile(r'</?think\b[^>]*>', re.IGNORECASE)
_REASONING_BLOCK_RE = re.compile(
    r'<\s*reasoning\b[^>]*>.*?</\s*reasoning\s*>', re.IGNORECASE | re.DOTALL
)
_REASONING_TAG_RE = re.compile(r'</?\s*reasoning\b[^>]*>', re.IGNORECASE)

_NEWLINE_RUN_RE = re.compile(r'\n{3,}')


def _strip_tags_once(text: str) -> str:
    text = _THINK_BLOCK_RE.sub('', text)
    text = _THINK_TAG_RE.sub('', text)
    text = _REASONING_BLOCK_RE.sub('', text)
    text = _REASONING_TAG_RE.sub('', text)
    return text


def strip_think_blocks(text: Optional[str]) -> Optional[str]:
    """Remove <think>/<reasoning> blocks and stray tags from model output.

    Removal is repeated until nothing changes, because dropping an inner
    tag can splice the surrounding text into a new one
    (``<th<think>ink>`` → ``<think>``). Every pass that changes the text
    makes it shorter, so the loop terminates.

    Empty or None input is returned as-is.
    """
    if not text:
        return text

    while True:
        stripped = _strip_tags_once(text)
        if stripped == text:
            break
        text = stripped

    return _NEWLINE_RUN_RE.sub('\n\n', text).strip()


# ============================================================
# MESSAGE SPLITTING
# ============================================================

# Discord allows 2000 characters; leave room for formatting
DISCORD_MAX_LENGTH = 1900
NO_CONTENT = "(no content)"


def split_message(text: Optional[str], max_length: int = DISCORD_MAX_LENGTH) -> list[str]:
    """Split a reply into chunks of at most ``max_length`` characters.

    Lines are packed greedily. A line that does not fit starts a new chunk;
    a line longer than ``max_length`` on its own is hard-cut into
    ``max_length`` pieces without regard for words. Whitespace-only chunks
    are dropped.

    Args:
        text: Reply text. Empty or None becomes "(no content)".
        max_length: Maximum length per chunk (default: 1900 for Discord)

    Returns:
        At least one chunk.
    """
    if not text:
        text = NO_CONTENT

    chunks: list[str] = []
    buf = ""

    for line in str(text).split("\n"):
        candidate = f"{buf}\n{line}" if buf else line
        if len(candidate) <= max_length:
            buf = candidate
            continue

        if buf.strip():
            chunks.append(buf)
        buf = ""

        if len(line) > max_length:
            chunks.extend(line[i:i + max_length] for i in range(0, len(line), max_length))
        else:
            buf = line

    if buf.strip():
        chunks.append(buf)

    return chunks or [NO_CONTENT]
