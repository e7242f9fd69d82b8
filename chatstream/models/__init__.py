from chatstream.models.segments import (
    RawBlock,
    ReasoningContent,
    ReasoningEntry,
    Segment,
    ToolCallEntry,
    ToolCallsContent,
)

__all__ = [
    "RawBlock",
    "ReasoningContent",
    "ReasoningEntry",
    "Segment",
    "ToolCallEntry",
    "ToolCallsContent",
]
