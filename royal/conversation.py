"""Conversation manager — per-user rolling history and the global system prompt."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import DEFAULT_SYSTEM_PROMPT
from .llm.openai import CompletionClient

logger = logging.getLogger("royal.conversation")

ROLES = ("user", "assistant")


@dataclass(frozen=True)
class Turn:
    role: str           # 'user' or 'assistant'
    content: str


@dataclass
class Conversation:
    """Ordered turns for one user. Mutated only through ConversationStore."""

    user_id: str
    turns: list[Turn] = field(default_factory=list)

    @property
    def total_chars(self) -> int:
        return sum(len(t.content) for t in self.turns)


class ConversationStore:
    """In-memory conversations keyed by user ID, bounded in turns and characters.

    Nothing is persisted; a restart starts every user fresh.
    """

    def __init__(self, max_messages: int = 30, max_chars: int = 12_000):
        self.max_messages = max_messages
        self.max_chars = max_chars
        self._conversations: dict[str, Conversation] = {}

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._conversations

    def get(self, user_id: str) -> Conversation:
        """Get the user's conversation, creating an empty one on first use."""
        conv = self._conversations.get(user_id)
        if conv is None:
            conv = Conversation(user_id=user_id)
            self._conversations[user_id] = conv
        return conv

    def append(self, conversation: Conversation, role: str, text: str) -> Turn:
        if role not in ROLES:
            raise ValueError(f"Unsupported role: {role!r}")
        turn = Turn(role=role, content=text or "")
        conversation.turns.append(turn)
        self.trim(conversation)
        return turn

    def trim(self, conversation: Conversation):
        """Evict oldest turns until both bounds hold.

        The message cap may empty the conversation; the character budget
        always leaves the newest turn, even when that turn alone is over
        budget.
        """
        turns = conversation.turns
        while len(turns) > self.max_messages:
            turns.pop(0)
        while conversation.total_chars > self.max_chars and len(turns) > 1:
            turns.pop(0)

    def reset_all(self):
        self._conversations.clear()


class ConversationManager:
    """Ties the store, the system prompt and the completion client together.

    There is no per-user lock: two mentions from the same user that arrive
    together both append before either reply lands, and each request sees
    whatever history exists at that moment.
    """

    def __init__(
        self,
        client: CompletionClient,
        store: Optional[ConversationStore] = None,
        default_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        self.client = client
        self.store = store or ConversationStore()
        self.default_prompt = default_prompt.strip() or DEFAULT_SYSTEM_PROMPT
        self._system_prompt = self.default_prompt

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def set_system_prompt(self, text: Optional[str], also_reset: bool = False) -> str:
        """Replace the global system prompt. Blank text restores the default."""
        prompt = (text or "").strip()
        self._system_prompt = prompt or self.default_prompt
        if also_reset:
            self.store.reset_all()
        logger.info(
            f"System prompt updated ({len(self._system_prompt)} chars, reset={also_reset})"
        )
        return self._system_prompt

    def reset(self):
        """Forget every user's history."""
        count = len(self.store)
        self.store.reset_all()
        logger.info(f"Cleared {count} conversation(s)")

    async def handle_message(self, user_id: str, text: str, log_hint: str = "") -> str:
        """Record the user's turn, ask the model, record and return its reply.

        If the completion fails the user's turn stays in history and the
        error propagates to the caller.
        """
        conv = self.store.get(user_id)
        self.store.append(conv, "user", text)

        reply = await self.client.complete(conv, self.system_prompt, log_hint=log_hint)

        self.store.append(conv, "assistant", reply)
        return reply
