"""
Nesting-aware scanner for ``<details ...> ... </details>`` shaped blocks.

The scanner knows nothing about block semantics. It reports where a block
starts, the attributes of its opening tag, where its inner content lies and
whether the matching closing tag has arrived yet. Streaming buffers are
incomplete most of the time, so nothing here raises on malformed markup.
"""
import re
from typing import Callable, Dict, Iterator, Optional

from chatstream.models.segments import RawBlock

DETAILS_START = '<details'
DETAILS_END = '</details>'

ATTRIBUTE_PATTERN = re.compile(r'(\w+)="(.*?)"', re.DOTALL)


def parse_attributes(open_tag: str) -> Dict[str, str]:
    """Parse ``key="value"`` pairs; later duplicates win."""
    return {m.group(1): m.group(2) for m in ATTRIBUTE_PATTERN.finditer(open_tag)}


class TagBlockScanner:
    """Finds blocks delimited by ``start_token`` and ``end_token``.

    A block ends where the nesting depth returns to zero. Every further
    ``start_token`` before that point opens a nested block and every
    ``end_token`` closes one, taken in document order.
    """

    def __init__(self, start_token: str = DETAILS_START, end_token: str = DETAILS_END):
        self.start_token = start_token
        self.end_token = end_token

    def find_start(self, buffer: str, from_offset: int = 0) -> int:
        return buffer.find(self.start_token, from_offset)

    def scan(self, buffer: str, from_offset: int = 0) -> Optional[RawBlock]:
        """Return the next block at or after ``from_offset``, or None if there is none."""
        if not buffer:
            return None
        start = buffer.find(self.start_token, from_offset)
        if start == -1:
            return None
        return self.scan_at(buffer, start)

    def scan_at(self, buffer: str, start: int) -> RawBlock:
        """Read the block whose start token sits exactly at ``start``."""
        length = len(buffer)
        open_end = buffer.find('>', start)
        if open_end == -1:
            # Opening tag still streaming in
            return RawBlock(start=start, open_tag_end=None, end=length, closed=False)

        attributes = parse_attributes(buffer[start:open_end + 1])

        depth = 1
        cursor = open_end + 1
        close_start = None
        while cursor < length and depth > 0:
            next_open = buffer.find(self.start_token, cursor)
            next_close = buffer.find(self.end_token, cursor)
            if next_open == -1 and next_close == -1:
                break
            if next_open != -1 and (next_close == -1 or next_open < next_close):
                depth += 1
                cursor = next_open + len(self.start_token)
            else:
                depth -= 1
                close_start = next_close
                cursor = next_close + len(self.end_token)

        if depth == 0:
            return RawBlock(
                start=start,
                open_tag_end=open_end + 1,
                end=cursor,
                closed=True,
                attributes=attributes,
                inner_start=open_end + 1,
                inner_end=close_start,
            )

        return RawBlock(
            start=start,
            open_tag_end=open_end + 1,
            end=length,
            closed=False,
            attributes=attributes,
            inner_start=open_end + 1,
            inner_end=length,
        )

    def iter_blocks(
        self,
        buffer: str,
        from_offset: int = 0,
        predicate: Optional[Callable[[RawBlock], bool]] = None,
    ) -> Iterator[RawBlock]:
        """Yield successive top-level blocks, stopping after the first unclosed one.

        Blocks rejected by ``predicate`` are skipped over as a whole; an
        unclosed rejected block still ends the scan.
        """
        cursor = from_offset
        while True:
            block = self.scan(buffer, cursor)
            if block is None:
                return
            if predicate is None or predicate(block):
                yield block
            if not block.closed:
                return
            cursor = block.end


details_scanner = TagBlockScanner()


def scan(buffer: str, from_offset: int = 0) -> Optional[RawBlock]:
    return details_scanner.scan(buffer, from_offset)


def has_type(block_type: str) -> Callable[[RawBlock], bool]:
    """Predicate matching blocks whose ``type`` attribute equals ``block_type``."""
    def _matches(block: RawBlock) -> bool:
        return block.block_type == block_type
    return _matches
