"""
chatstream - turns a growing LLM response buffer into display-ready segments.
"""
from chatstream.config.app_config import ChunkerConfig
from chatstream.models.segments import ReasoningEntry, Segment, ToolCallEntry
from chatstream.parsing.message_segments import build_message_segments
from chatstream.streaming.markdown_formatter import MarkdownStreamFormatter
from chatstream.streaming.message_stream import MessageStream

__all__ = [
    "ChunkerConfig",
    "MarkdownStreamFormatter",
    "MessageStream",
    "ReasoningEntry",
    "Segment",
    "ToolCallEntry",
    "build_message_segments",
]
