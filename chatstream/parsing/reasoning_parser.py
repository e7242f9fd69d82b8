"""
Reasoning segmentation for streamed assistant messages.

Recognizes server-emitted ``<details type="reasoning">`` blocks as well as
bare tag pairs such as ``<think>...</think>`` and turns the buffer into an
ordered list of text and reasoning segments. Blocks that have not finished
streaming produce a trailing entry with ``is_done=False``.
"""
import re
from typing import List, Optional, Sequence, Tuple

from chatstream.models.segments import RawBlock, ReasoningContent, ReasoningEntry, Segment
from chatstream.parsing.tag_scanner import DETAILS_START, details_scanner
from chatstream.utils.logging_utils import logger

# Open WebUI defaults for providers that do not emit <details>
DEFAULT_REASONING_TAG_PAIRS: Tuple[Tuple[str, str], ...] = (
    ('<think>', '</think>'),
    ('<reasoning>', '</reasoning>'),
)

REASONING_TYPE = 'reasoning'
SUMMARY_OPEN = '<summary>'

_SUMMARY_PATTERN = re.compile(r'<summary>(.*?)</summary>', re.DOTALL)


def _tag_pairs(custom_tag_pair: Optional[Sequence[str]], detect_default_tags: bool) -> List[Tuple[str, str]]:
    pairs = []
    if custom_tag_pair is not None and len(custom_tag_pair) == 2 and custom_tag_pair[0] and custom_tag_pair[1]:
        pairs.append((custom_tag_pair[0], custom_tag_pair[1]))
    if detect_default_tags:
        pairs.extend(DEFAULT_REASONING_TAG_PAIRS)
    return pairs


class _TokenFinder:
    """Remembers the next position of each token so the buffer is searched once per occurrence."""

    def __init__(self, buffer: str):
        self.buffer = buffer
        self._next = {}

    def find(self, token: str, cursor: int) -> int:
        index = self._next.get(token)
        if index is None or (index != -1 and index < cursor):
            index = self.buffer.find(token, cursor)
            self._next[token] = index
        return index


def _next_tag_pair(finder: _TokenFinder, cursor: int, pairs: List[Tuple[str, str]]) -> Tuple[int, Optional[Tuple[str, str]]]:
    """Return the position and pair of the nearest raw tag opener at or after ``cursor``."""
    best_index = -1
    best_pair = None
    for pair in pairs:
        index = finder.find(pair[0], cursor)
        if index != -1 and (best_index == -1 or index < best_index):
            best_index = index
            best_pair = pair
    return best_index, best_pair


def _parse_int(value: Optional[str]) -> int:
    try:
        return max(0, int(value)) if value is not None else 0
    except ValueError:
        return 0


def split_summary(inner: str) -> Tuple[str, str]:
    """Split reasoning block content into ``(summary, body)``.

    A summary whose closing tag has not arrived yet takes everything after
    ``<summary>`` and leaves the body empty.
    """
    match = _SUMMARY_PATTERN.search(inner)
    if match:
        summary = match.group(1).strip()
        body = inner[:match.start()] + inner[match.end():]
        return summary, body.strip()

    open_index = inner.find(SUMMARY_OPEN)
    if open_index != -1:
        return inner[open_index + len(SUMMARY_OPEN):].strip(), inner[:open_index].strip()
    return '', inner.strip()


def segments(
    buffer: Optional[str],
    custom_tag_pair: Optional[Sequence[str]] = None,
    detect_default_tags: bool = True,
) -> Optional[List[Segment]]:
    """Split ``buffer`` into ordered text and reasoning segments.

    Returns None for empty or whitespace-only input.
    """
    if not buffer or not buffer.strip():
        return None

    pairs = _tag_pairs(custom_tag_pair, detect_default_tags)
    result: List[Segment] = []
    length = len(buffer)
    finder = _TokenFinder(buffer)
    cursor = 0

    while cursor < length:
        details_index = finder.find(DETAILS_START, cursor)
        tag_index, tag_pair = _next_tag_pair(finder, cursor, pairs)

        if details_index == -1 and tag_index == -1:
            result.append(Segment.of_text(buffer[cursor:]))
            break

        use_details = details_index != -1 and (tag_index == -1 or details_index <= tag_index)
        start = details_index if use_details else tag_index
        if start > cursor:
            result.append(Segment.of_text(buffer[cursor:start]))

        if use_details:
            block = details_scanner.scan_at(buffer, start)
            if block.is_malformed:
                result.append(Segment.of_text(buffer[start:]))
                break

            if block.block_type != REASONING_TYPE:
                result.append(Segment.of_text(block.source(buffer)))
                if not block.closed:
                    logger.debug(f"Unclosed <details type={block.block_type!r}> at {start}; remainder kept as text")
                    break
                cursor = block.end
                continue

            entry = _entry_from_block(block, buffer)
            result.append(Segment.of_reasoning(entry, block.source(buffer)))
            if not block.closed:
                # Streaming partial entries are always the last segment
                break
            cursor = block.end
            continue

        open_tag, close_tag = tag_pair
        body_start = start + len(open_tag)
        end = buffer.find(close_tag, body_start)
        if end == -1:
            entry = ReasoningEntry(reasoning=buffer[body_start:].strip(), is_done=False)
            result.append(Segment.of_reasoning(entry, buffer[start:]))
            break

        entry = ReasoningEntry(reasoning=buffer[body_start:end].strip(), is_done=True)
        cursor = end + len(close_tag)
        result.append(Segment.of_reasoning(entry, buffer[start:cursor]))

    return result


def has_reasoning_content(buffer: Optional[str]) -> bool:
    """Quick check for a reasoning details opener or a complete default tag pair."""
    if not buffer:
        return False
    if '<details type="reasoning"' in buffer:
        return True
    return any(open_tag in buffer and close_tag in buffer for open_tag, close_tag in DEFAULT_REASONING_TAG_PAIRS)


def _entry_from_block(block: RawBlock, buffer: str) -> ReasoningEntry:
    summary, body = split_summary(block.inner(buffer))
    return ReasoningEntry(
        reasoning=body,
        summary=summary,
        duration_seconds=_parse_int(block.attributes.get('duration')),
        is_done=block.closed and block.attributes.get('done', 'true') == 'true',
    )


def parse_reasoning_content(
    buffer: Optional[str],
    custom_tag_pair: Optional[Sequence[str]] = None,
    detect_default_tags: bool = True,
) -> Optional[ReasoningContent]:
    """
    Extract the first reasoning block of a message.

    Looks for a closed reasoning details block, then one still streaming,
    then the first complete raw tag pair (custom pair before the defaults).
    """
    if not buffer or not buffer.strip():
        return None

    reasoning_blocks = []
    start = buffer.find(DETAILS_START)
    while start != -1:
        block = details_scanner.scan_at(buffer, start)
        if block.block_type == REASONING_TYPE:
            reasoning_blocks.append(block)
        start = buffer.find(DETAILS_START, block.end if block.closed else start + len(DETAILS_START))

    closed = [b for b in reasoning_blocks if b.closed]
    if closed:
        main_content = buffer
        for block in closed:
            main_content = main_content.replace(block.source(buffer), '', 1)
        return _reasoning_content(_entry_from_block(closed[0], buffer), main_content, buffer)

    if reasoning_blocks:
        partial = reasoning_blocks[0]
        return _reasoning_content(_entry_from_block(partial, buffer), buffer[:partial.start], buffer)

    for open_tag, close_tag in _tag_pairs(custom_tag_pair, detect_default_tags):
        pattern = re.compile(re.escape(open_tag) + r'(.*?)' + re.escape(close_tag), re.DOTALL)
        match = pattern.search(buffer)
        if match:
            entry = ReasoningEntry(reasoning=match.group(1).strip(), is_done=True)
            return _reasoning_content(entry, pattern.sub('', buffer), buffer)

    return None


def _reasoning_content(entry: ReasoningEntry, main_content: str, buffer: str) -> ReasoningContent:
    return ReasoningContent(
        reasoning=entry.reasoning,
        summary=entry.summary,
        duration=entry.duration_seconds,
        is_done=entry.is_done,
        main_content=main_content.strip(),
        original_content=buffer,
    )


def format_duration(seconds: int) -> str:
    """Human-readable reasoning duration."""
    if seconds <= 0:
        return 'instant'
    if seconds < 60:
        return f"{seconds} second{'' if seconds == 1 else 's'}"

    minutes, remaining = divmod(seconds, 60)
    if remaining == 0:
        return f"{minutes} minute{'' if minutes == 1 else 's'}"
    return f"{minutes} min {remaining}s"
