"""
Segment data models.

A parse of the message buffer yields an ordered list of ``Segment`` objects,
each holding exactly one of plain text, a reasoning entry or a tool call.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ReasoningEntry(BaseModel):
    reasoning: str = ""
    summary: str = ""
    duration_seconds: int = Field(0, ge=0)
    is_done: bool = True

    @property
    def cleaned_reasoning(self) -> str:
        """Reasoning text with leading blockquote markers removed from each line."""
        lines = [
            line[1:].strip() if line.startswith('>') else line
            for line in self.reasoning.split('\n')
        ]
        return '\n'.join(lines).strip()

    @property
    def formatted_duration(self) -> str:
        from chatstream.parsing.reasoning_parser import format_duration
        return format_duration(self.duration_seconds)


class ToolCallEntry(BaseModel):
    id: str
    name: str = "tool"
    done: bool = False
    arguments: Any = None  # decoded JSON when possible, else the unescaped string
    result: Any = None
    files: Optional[List[Any]] = None


class Segment(BaseModel):
    """One ordered unit of render output."""
    kind: Literal["text", "reasoning", "tool_call"]
    text: Optional[str] = None
    reasoning: Optional[ReasoningEntry] = None
    tool_call: Optional[ToolCallEntry] = None
    # Buffer substring this segment was produced from
    source: str = ""

    @classmethod
    def of_text(cls, text: str) -> "Segment":
        return cls(kind="text", text=text, source=text)

    @classmethod
    def of_reasoning(cls, entry: ReasoningEntry, source: str = "") -> "Segment":
        return cls(kind="reasoning", reasoning=entry, source=source)

    @classmethod
    def of_tool_call(cls, entry: ToolCallEntry, source: str = "") -> "Segment":
        return cls(kind="tool_call", tool_call=entry, source=source)

    @property
    def is_text(self) -> bool:
        return self.kind == "text"

    @property
    def is_reasoning(self) -> bool:
        return self.kind == "reasoning"

    @property
    def is_tool_call(self) -> bool:
        return self.kind == "tool_call"

    @property
    def is_partial(self) -> bool:
        """True for a structured entry not marked done.

        Covers blocks whose closing marker has not streamed in yet, and closed
        blocks the backend still marks ``done="false"``.
        """
        if self.reasoning is not None:
            return not self.reasoning.is_done
        if self.tool_call is not None:
            return not self.tool_call.done
        return False


class ReasoningContent(BaseModel):
    """First reasoning block of a message together with the remaining content."""
    reasoning: str
    summary: str
    duration: int
    is_done: bool
    main_content: str
    original_content: str

    @property
    def formatted_duration(self) -> str:
        from chatstream.parsing.reasoning_parser import format_duration
        return format_duration(self.duration)

    @property
    def cleaned_reasoning(self) -> str:
        return ReasoningEntry(reasoning=self.reasoning).cleaned_reasoning


class ToolCallsContent(BaseModel):
    tool_calls: List[ToolCallEntry]
    main_content: str
    original_content: str


@dataclass
class RawBlock:
    """A ``<details ...>`` span found by the tag scanner.

    ``open_tag_end`` is None when the opening tag has no terminating ``>`` yet.
    ``end`` is the offset just past the closing tag, or the buffer length when
    the block is unclosed.
    """
    start: int
    open_tag_end: Optional[int]
    end: int
    closed: bool
    attributes: Dict[str, str] = field(default_factory=dict)
    inner_start: Optional[int] = None
    inner_end: Optional[int] = None

    @property
    def is_malformed(self) -> bool:
        return self.open_tag_end is None

    @property
    def block_type(self) -> str:
        return self.attributes.get('type', '')

    def inner(self, buffer: str) -> str:
        if self.inner_start is None:
            return ''
        return buffer[self.inner_start:self.inner_end]

    def source(self, buffer: str) -> str:
        return buffer[self.start:self.end]
