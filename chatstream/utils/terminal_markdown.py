"""Terminal rendering of message segments using rich."""

import json
from typing import Any, List, Optional, Sequence

from rich.console import Console, Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from chatstream.models.segments import ReasoningEntry, Segment, ToolCallEntry


class SegmentRenderer:
    """Renders parsed message segments to the terminal via rich.

    Text segments go through rich.Markdown; reasoning and tool calls are
    drawn as panels.

    Usage::

        renderer = SegmentRenderer()
        renderer.render(build_message_segments(buffer))
    """

    def __init__(self, console: Console | None = None, show_reasoning: bool = True):
        self.console = console or Console()
        self.show_reasoning = show_reasoning

    def render(self, segments: Sequence[Segment]) -> None:
        for renderable in self.renderables(segments):
            self.console.print(renderable)

    def renderables(self, segments: Sequence[Segment]) -> List[RenderableType]:
        out: List[RenderableType] = []
        for segment in segments:
            if segment.is_reasoning:
                if self.show_reasoning:
                    out.append(self.reasoning_panel(segment.reasoning))
            elif segment.is_tool_call:
                out.append(self.tool_call_panel(segment.tool_call))
            else:
                markdown = self._markdown(segment.text or "")
                if markdown is not None:
                    out.append(markdown)
        return out

    def reasoning_panel(self, entry: ReasoningEntry) -> Panel:
        if not entry.is_done:
            title = "Thinking…"
        elif entry.summary:
            title = entry.summary
        else:
            title = f"Thought for {entry.formatted_duration}"
        body = Text(entry.cleaned_reasoning or "…", style="dim italic")
        return Panel(body, title=title, title_align="left", border_style="dim")

    def tool_call_panel(self, entry: ToolCallEntry) -> Panel:
        parts = []
        if entry.arguments is not None:
            parts.append(Text("Arguments", style="bold"))
            parts.append(Text(_pretty(entry.arguments)))
        if entry.result is not None:
            parts.append(Text("Result", style="bold"))
            parts.append(Text(_pretty(entry.result)))
        if entry.files:
            parts.append(Text(f"{len(entry.files)} file(s) attached", style="dim"))
        title = f"{'✓' if entry.done else '…'} {entry.name}"
        border = "green" if entry.done else "yellow"
        return Panel(Group(*parts) if parts else Text(""), title=title, title_align="left", border_style=border)

    def _markdown(self, text: str) -> Optional[Markdown]:
        text = text.strip("\n")
        if not text.strip():
            return None
        return Markdown(text)


def _pretty(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
