"""
Tool-call segmentation for ``<details type="tool_calls" ...>`` blocks.

The backend always emits tool calls as self-contained details blocks whose
payload lives in HTML-escaped attributes:

    <details type="tool_calls" id="t1" name="search" done="true"
             arguments="{&quot;q&quot;:&quot;x&quot;}" result="..."></details>
"""
import json
import re
from typing import Any, List, Optional

from chatstream.models.segments import Segment, ToolCallEntry, ToolCallsContent
from chatstream.parsing.tag_scanner import details_scanner, has_type
from chatstream.utils.logging_utils import logger

TOOL_CALLS_TYPE = 'tool_calls'

# Only the entities the backend escapes; &amp; goes last so it cannot create new ones
_HTML_ENTITIES = (
    ('&quot;', '"'),
    ('&#34;', '"'),
    ('&apos;', "'"),
    ('&#39;', "'"),
    ('&lt;', '<'),
    ('&#60;', '<'),
    ('&gt;', '>'),
    ('&#62;', '>'),
    ('&amp;', '&'),
    ('&#38;', '&'),
)

_RESIDUAL_TOOL_CALLS_PATTERN = re.compile(
    r'<details\s+type="tool_calls"[^>]*>.*?</details>',
    re.DOTALL,
)


def unescape_html(value: str) -> str:
    for entity, char in _HTML_ENTITIES:
        value = value.replace(entity, char)
    return value


def decode_attribute(value: Optional[str]) -> Any:
    """HTML-unescape an attribute value and decode it as JSON when possible.

    Falls back to the unescaped string; never raises.
    """
    if not value:
        return None
    unescaped = unescape_html(value)
    try:
        return json.loads(unescaped)
    except ValueError:
        # Partial or plain-text payloads are expected while streaming
        logger.debug(f"Attribute is not JSON, keeping text: {unescaped[:60]!r}")
        return unescaped


def _entry_from_attributes(attributes: dict, start: int, closed: bool) -> ToolCallEntry:
    name = attributes.get('name') or 'tool'
    call_id = attributes.get('id') or f"{name}_{start}"
    files = decode_attribute(attributes.get('files'))
    return ToolCallEntry(
        id=call_id,
        name=name,
        done=closed and attributes.get('done') == 'true',
        arguments=decode_attribute(attributes.get('arguments')),
        result=decode_attribute(attributes.get('result')),
        files=files if isinstance(files, list) else None,
    )


def segments(buffer: Optional[str]) -> Optional[List[Segment]]:
    """Split ``buffer`` into ordered text and tool-call segments.

    Other details blocks are passed through as text. Scanning stops at the
    first unclosed block. Returns None for empty or whitespace-only input.
    """
    if not buffer or not buffer.strip():
        return None

    result: List[Segment] = []
    length = len(buffer)
    cursor = 0

    while cursor < length:
        block = details_scanner.scan(buffer, cursor)
        if block is None:
            result.append(Segment.of_text(buffer[cursor:]))
            break

        if block.start > cursor:
            result.append(Segment.of_text(buffer[cursor:block.start]))

        if block.is_malformed:
            result.append(Segment.of_text(buffer[block.start:]))
            break

        if block.block_type == TOOL_CALLS_TYPE:
            entry = _entry_from_attributes(block.attributes, block.start, block.closed)
            result.append(Segment.of_tool_call(entry, block.source(buffer)))
        else:
            result.append(Segment.of_text(block.source(buffer)))

        if not block.closed:
            # Wait for more of the stream before reading past an open block
            logger.debug(f"Unclosed <details type={block.block_type!r}> at {block.start}")
            break
        cursor = block.end

    return result


def parse(buffer: Optional[str]) -> Optional[ToolCallsContent]:
    """Extract tool calls and the remaining main content, or None if there are no tool calls."""
    segs = segments(buffer)
    if segs is None:
        return None

    calls = [s.tool_call for s in segs if s.is_tool_call]
    if not calls:
        return None

    text = ''.join(s.text for s in segs if s.is_text)
    main_content = _RESIDUAL_TOOL_CALLS_PATTERN.sub('', text).strip()
    return ToolCallsContent(tool_calls=calls, main_content=main_content, original_content=buffer)


def has_tool_calls(buffer: Optional[str]) -> bool:
    if not buffer:
        return False
    return any(True for _ in details_scanner.iter_blocks(buffer, predicate=has_type(TOOL_CALLS_TYPE)))


def _pretty_maybe(value: Any, limit: int = 600) -> str:
    if value is None:
        return ''
    try:
        pretty = json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        pretty = str(value)
        return f"{pretty[:limit]}…" if len(pretty) > limit else pretty
    return f"{pretty[:limit]}\n…" if len(pretty) > limit else pretty


def summarize(buffer: Optional[str]) -> Optional[str]:
    """Render tool calls as plain markdown text followed by the main content."""
    parsed = parse(buffer)
    if parsed is None:
        return buffer

    lines = []
    for call in parsed.tool_calls:
        lines.append(f"Tool Executed: {call.name}" if call.done else f"Running tool: {call.name}…")
        arguments = _pretty_maybe(call.arguments, limit=400)
        result = _pretty_maybe(call.result, limit=800)
        if arguments:
            lines.extend(['', 'Arguments:', '```json', arguments, '```'])
        if result:
            lines.extend(['', 'Result:', '```json', result, '```'])
        lines.append('')
    lines.append(parsed.main_content)
    return '\n'.join(lines).strip()
