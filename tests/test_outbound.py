"""Tests for reasoning markup stripping and message splitting."""

import pytest

from royal.communication.outbound import (
    DISCORD_MAX_LENGTH,
    NO_CONTENT,
    split_message,
    strip_think_blocks,
)


class TestStripThinkBlocks:

    def test_removes_think_block(self):
        assert strip_think_blocks("<think>x</think>Hi there") == "Hi there"

    def test_multiline_block(self):
        text = "<think>\nstep 1\nstep 2\n</think>\n\nAnswer: 42"
        assert strip_think_blocks(text) == "Answer: 42"

    def test_case_insensitive_with_attributes(self):
        assert strip_think_blocks('<THINK type="deep">plan</Think>Done') == "Done"

    def test_multiple_blocks(self):
        text = "<think>a</think>One <think>b</think>two"
        assert strip_think_blocks(text) == "One two"

    def test_unclosed_tag_removed(self):
        assert strip_think_blocks("<think>Hello") == "Hello"

    def test_stray_closing_tag_removed(self):
        assert strip_think_blocks("reasoning here</think>Final") == "reasoning hereFinal"

    def test_reasoning_block_with_spaces(self):
        text = "< reasoning >hidden</ reasoning >Visible"
        assert strip_think_blocks(text) == "Visible"

    def test_stray_reasoning_tag(self):
        assert strip_think_blocks("<reasoning>Visible") == "Visible"

    def test_tag_formed_after_inner_removal(self):
        assert strip_think_blocks("<th<think>ink>Hello") == "Hello"

    def test_collapses_newline_runs(self):
        assert strip_think_blocks("a\n\n\n\n\nb") == "a\n\nb"

    def test_keeps_double_newline(self):
        assert strip_think_blocks("a\n\nb") == "a\n\nb"

    def test_trims_whitespace(self):
        assert strip_think_blocks("  \n hi \n ") == "hi"

    def test_unrelated_tags_kept(self):
        assert strip_think_blocks("<thinking>keep</thinking>") == "<thinking>keep</thinking>"

    def test_only_markup_gives_empty(self):
        assert strip_think_blocks("<think>all of it</think>") == ""

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_input_unchanged(self, value):
        assert strip_think_blocks(value) == value

    @pytest.mark.parametrize("text", [
        "<think>x</think>Hi there",
        "<think><think>nested</think>tail</think>after",
        "</think></think><think>",
        "<th<think>ink>x</think>y",
        "<<think>>>",
        "<reasoning><think>mixed</reasoning></think>ok",
        "line\n\n\n<think>\n\n\n</think>\n\n\nline",
        "< reasoning\n>a</reasoning>\n\n\n\nb",
        "plain text with no tags",
        "   ",
    ])
    def test_idempotent(self, text):
        once = strip_think_blocks(text)
        assert strip_think_blocks(once) == once


class TestSplitMessage:

    def test_short_text_single_chunk(self):
        assert split_message("hello") == ["hello"]

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_becomes_placeholder(self, value):
        assert split_message(value) == [NO_CONTENT]

    def test_whitespace_only_becomes_placeholder(self):
        assert split_message("   \n  ") == [NO_CONTENT]

    def test_default_limit(self):
        assert DISCORD_MAX_LENGTH == 1900

    def test_oversized_line_hard_split(self):
        chunks = split_message("a" * 5000, 1900)
        assert [len(c) for c in chunks] == [1900, 1900, 1200]
        assert "".join(chunks) == "a" * 5000

    def test_oversized_line_order_preserved(self):
        line = "".join(str(i % 10) for i in range(5000))
        chunks = split_message(line, 1900)
        assert "".join(chunks) == line

    def test_lines_packed_until_limit(self):
        lines = ["x" * 9] * 5  # 9 chars each, joined with '\n'
        chunks = split_message("\n".join(lines), max_length=20)
        assert chunks == ["x" * 9 + "\n" + "x" * 9] * 2 + ["x" * 9]

    def test_every_chunk_within_limit(self):
        text = "\n".join(("word " * (i % 50)).strip() for i in range(400))
        text += "\n" + "z" * 4321
        chunks = split_message(text, max_length=300)
        assert chunks
        assert all(len(c) <= 300 for c in chunks)

    def test_join_restores_lines(self):
        lines = [f"line {i} " + "." * (i % 40) for i in range(200)]
        chunks = split_message("\n".join(lines), max_length=250)
        assert "\n".join(chunks).split("\n") == lines

    def test_long_line_flushes_buffer_first(self):
        text = "short\n" + "b" * 25 + "\nafter"
        chunks = split_message(text, max_length=10)
        assert chunks == ["short", "b" * 10, "b" * 10, "b" * 5, "after"]

    def test_whitespace_buffer_not_emitted(self):
        text = "   \n" + "c" * 10
        assert split_message(text, max_length=10) == ["c" * 10]
