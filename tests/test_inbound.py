"""Tests for inbound message routing."""

from royal.communication.inbound import (
    EMPTY_MENTION_PROMPT,
    InboundMessage,
    plan_chat,
    should_auto_ban,
    strip_bot_mention,
)

BOT_ID = "999"


def _event(**overrides) -> InboundMessage:
    fields = {
        "author_id": "42",
        "is_bot": False,
        "guild_id": "1",
        "channel_id": "10",
        "content": f"<@{BOT_ID}> hello",
        "mentions_bot": True,
    }
    fields.update(overrides)
    return InboundMessage(**fields)


class TestStripBotMention:

    def test_plain_mention(self):
        assert strip_bot_mention("<@999> hi", BOT_ID) == "hi"

    def test_nickname_mention(self):
        assert strip_bot_mention("hey <@!999>, what's up", BOT_ID) == "hey , what's up"

    def test_multiple_mentions(self):
        assert strip_bot_mention("<@999> a <@999> b", BOT_ID) == "a  b"

    def test_other_users_kept(self):
        assert strip_bot_mention("<@999> ping <@123>", BOT_ID) == "ping <@123>"

    def test_none_content(self):
        assert strip_bot_mention(None, BOT_ID) == ""


class TestPlanChat:

    def test_mention_returns_cleaned_prompt(self):
        assert plan_chat(_event(), BOT_ID) == "hello"

    def test_bare_mention_uses_placeholder(self):
        assert plan_chat(_event(content="<@999>   "), BOT_ID) == EMPTY_MENTION_PROMPT
        assert EMPTY_MENTION_PROMPT == "Respond helpfully to the user."

    def test_ignores_bots(self):
        assert plan_chat(_event(is_bot=True), BOT_ID) is None

    def test_ignores_direct_messages(self):
        assert plan_chat(_event(guild_id=None), BOT_ID) is None

    def test_ignores_without_mention(self):
        assert plan_chat(_event(mentions_bot=False, content="hello"), BOT_ID) is None

    def test_log_hint(self):
        assert _event().log_hint == "1/10"


class TestShouldAutoBan:

    def test_restricted_channel(self):
        assert should_auto_ban(_event(channel_id="10"), frozenset({"10"})) is True

    def test_other_channel(self):
        assert should_auto_ban(_event(channel_id="11"), frozenset({"10"})) is False

    def test_no_restricted_channels(self):
        assert should_auto_ban(_event(), frozenset()) is False

    def test_bots_exempt(self):
        assert should_auto_ban(_event(is_bot=True), frozenset({"10"})) is False

    def test_direct_messages_exempt(self):
        assert should_auto_ban(_event(guild_id=None), frozenset({"10"})) is False
