"""
Unified segmentation of one assistant message.

Reasoning blocks are split out first; every remaining text run is then
split on tool-call blocks, so the result interleaves text, reasoning and
tool-call segments in buffer order.
"""
from typing import List, Optional, Sequence

from chatstream.config.app_config import SEARCH_BANNER, TYPING_INDICATOR, reasoning_tag_pair_from_env
from chatstream.models.segments import Segment
from chatstream.parsing import reasoning_parser, tool_calls_parser


def strip_placeholders(buffer: str) -> str:
    """Drop the typing indicator and search banner the backend may prepend."""
    if buffer.startswith(TYPING_INDICATOR):
        buffer = buffer[len(TYPING_INDICATOR):]
    if buffer.startswith(SEARCH_BANNER):
        buffer = buffer[len(SEARCH_BANNER):]
    return buffer


def _split_tool_calls(text: str, out: List[Segment]) -> None:
    tool_segs = tool_calls_parser.segments(text)
    if not tool_segs:
        if text:
            out.append(Segment.of_text(text))
        return
    for seg in tool_segs:
        if seg.is_tool_call or seg.text:
            out.append(seg)


def build_message_segments(
    buffer: Optional[str],
    custom_tag_pair: Optional[Sequence[str]] = None,
    detect_default_tags: bool = True,
) -> List[Segment]:
    raw = strip_placeholders(buffer or '')
    if not raw:
        return []

    if custom_tag_pair is None:
        custom_tag_pair = reasoning_tag_pair_from_env()

    out: List[Segment] = []
    reasoning_segs = reasoning_parser.segments(raw, custom_tag_pair, detect_default_tags)
    for seg in reasoning_segs or []:
        if seg.is_reasoning:
            out.append(seg)
        elif seg.text:
            _split_tool_calls(seg.text, out)

    return out or [Segment.of_text(raw)]


def has_structured_blocks(segments: Sequence[Segment]) -> bool:
    return any(not s.is_text for s in segments)


def plain_text(segments: Sequence[Segment]) -> str:
    """Concatenated text of all text segments."""
    return ''.join(s.text for s in segments if s.is_text and s.text)
