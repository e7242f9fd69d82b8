"""
Tests for the markdown preview balancer.
"""

import re

import pytest

from chatstream.streaming.markdown_formatter import (
    MarkdownStreamFormatter,
    RawBuffer,
    synthetic_closures,
)


def unbalanced(text):
    """Open construct counts used to check a balanced preview."""
    return {
        "fence": text.count("```") % 2,
        "bold": len(re.findall(r"\*\*", text)) % 2,
        "italic": len(re.findall(r"(?<!\*)\*(?!\*)", text)) % 2,
        "brackets": max(0, text.count("[") - text.count("]")),
        "parens": max(0, text.count("(") - text.count(")")),
    }


class TestSyntheticClosures:

    def test_balanced_content_needs_nothing(self):
        assert synthetic_closures("a **b** *c* [d](e) ```x```") == ""

    def test_bold(self):
        assert synthetic_closures("a **bold") == "**"

    def test_italic(self):
        assert synthetic_closures("an *ital") == "*"

    def test_fence(self):
        assert synthetic_closures("x\n```py\ncode") == "```\n"

    def test_brackets_and_parens_are_counted(self):
        assert synthetic_closures("[[a] ((b") == "]))"

    def test_extra_closers_are_ignored(self):
        assert synthetic_closures("a] b)") == ""

    def test_closure_order(self):
        assert synthetic_closures("a **b [c (d ```e") == "```\n**])"

    @pytest.mark.parametrize("raw", [
        "a **bold",
        "an *ital",
        "[x",
        "((y",
        "```\ncode",
        "a **b [c (d ```e",
        "see [docs](http://example.com/a_(b",
    ])
    def test_preview_is_balanced(self, raw):
        preview = raw + synthetic_closures(raw)
        assert all(count == 0 for count in unbalanced(preview).values())


class TestMarkdownStreamFormatter:

    def test_ingest_returns_balanced_preview(self):
        formatter = MarkdownStreamFormatter()

        assert formatter.ingest("a **bo") == "a **bo**"
        assert formatter.ingest("ld** and `x`") == "a **bold** and `x`"

    def test_closures_are_not_stored(self):
        formatter = MarkdownStreamFormatter()
        formatter.ingest("```py\n")
        formatter.ingest("print(1")

        assert formatter.finalize() == "```py\nprint(1"
        assert formatter.preview() == "```py\nprint(1```\n)"

    def test_result_does_not_depend_on_delta_boundaries(self):
        text = "Some **bold [link](http://x"
        one = MarkdownStreamFormatter()
        one.ingest(text)
        many = MarkdownStreamFormatter()
        for ch in text:
            many.ingest(ch)

        assert one.preview() == many.preview()

    def test_seed_and_replace(self):
        formatter = MarkdownStreamFormatter()
        formatter.ingest("old *text")
        formatter.seed("fresh")

        assert formatter.preview() == "fresh"
        assert formatter.replace("new [") == "new []"
        assert formatter.finalize() == "new ["

    def test_empty_chunk(self):
        formatter = MarkdownStreamFormatter("x **y")
        assert formatter.ingest("") == "x **y**"


class TestRawBuffer:

    def test_append_and_snapshot(self):
        buf = RawBuffer("ab")
        buf.append("c")
        buf.append("")
        buf.append("de")

        assert buf.snapshot() == "abcde"
        assert len(buf) == 5
        buf.append("f")
        assert buf.snapshot() == "abcdef"
