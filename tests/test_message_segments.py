"""
Tests for the unified reasoning + tool-call segmentation pass.
"""

from chatstream.config.app_config import SEARCH_BANNER, TYPING_INDICATOR
from chatstream.parsing.message_segments import (
    build_message_segments,
    has_structured_blocks,
    plain_text,
    strip_placeholders,
)

TOOL_BLOCK = (
    '<details type="tool_calls" id="a" name="search" done="true" '
    'arguments="{&quot;q&quot;:1}"></details>'
)


def kinds(segs):
    return [s.kind for s in segs]


class TestBuildMessageSegments:

    def test_interleaves_reasoning_and_tool_calls(self):
        buffer = f"Intro <think>plan</think>Calling {TOOL_BLOCK} Done."
        segs = build_message_segments(buffer)

        assert kinds(segs) == ["text", "reasoning", "text", "tool_call", "text"]
        assert segs[1].reasoning.reasoning == "plan"
        assert segs[3].tool_call.arguments == {"q": 1}
        assert plain_text(segs) == "Intro Calling  Done."
        assert has_structured_blocks(segs)

    def test_tool_call_inside_text_without_reasoning(self):
        segs = build_message_segments(f"a {TOOL_BLOCK} b")
        assert kinds(segs) == ["text", "tool_call", "text"]

    def test_plain_text(self):
        segs = build_message_segments("just **markdown**")

        assert kinds(segs) == ["text"]
        assert not has_structured_blocks(segs)

    def test_placeholders_are_stripped(self):
        segs = build_message_segments(f"{TYPING_INDICATOR}{SEARCH_BANNER}Hello")
        assert [s.text for s in segs] == ["Hello"]

    def test_only_placeholder(self):
        assert build_message_segments(TYPING_INDICATOR) == []
        assert build_message_segments("") == []
        assert build_message_segments(None) == []

    def test_streaming_tool_call_is_last(self):
        buffer = f"<think>p</think>{TOOL_BLOCK}<details type=\"tool_calls\" name=\"next\" done=\"false\">"
        segs = build_message_segments(buffer)

        assert kinds(segs) == ["reasoning", "tool_call", "tool_call"]
        assert segs[-1].is_partial
        assert not any(s.is_partial for s in segs[:-1])

    def test_custom_tag_pair_from_environment(self, monkeypatch):
        monkeypatch.setenv("CHATSTREAM_REASONING_TAGS", "<thought>,</thought>")
        segs = build_message_segments("<thought>hm</thought>ok")

        assert kinds(segs) == ["reasoning", "text"]

    def test_explicit_tag_pair_wins_over_environment(self, monkeypatch):
        monkeypatch.setenv("CHATSTREAM_REASONING_TAGS", "<thought>,</thought>")
        segs = build_message_segments("<mind>x</mind>", custom_tag_pair=("<mind>", "</mind>"))

        assert kinds(segs) == ["reasoning"]


class TestStripPlaceholders:

    def test_banner_only_after_indicator(self):
        assert strip_placeholders(f"{SEARCH_BANNER}{TYPING_INDICATOR}x") == f"{TYPING_INDICATOR}x"

    def test_untouched(self):
        assert strip_placeholders("text") == "text"
