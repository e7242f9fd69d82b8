"""
Markdown Stream Formatter
Keeps the raw markdown of a streaming message and produces a preview that
never looks structurally broken, by appending synthetic closing tokens.
"""

import re
from typing import List

FENCE = '```'

_BOLD_PATTERN = re.compile(r'\*\*')
_ITALIC_PATTERN = re.compile(r'(?<!\*)\*(?!\*)')


def synthetic_closures(content: str) -> str:
    """
    Closing tokens for every construct left open in ``content``.

    Always derived from the full content. Closures are appended in the order
    fence, bold, italic, brackets, parens.
    """
    parts = []

    if content.count(FENCE) % 2 == 1:
        parts.append(FENCE + '\n')

    if len(_BOLD_PATTERN.findall(content)) % 2 == 1:
        parts.append('**')

    if len(_ITALIC_PATTERN.findall(content)) % 2 == 1:
        parts.append('*')

    open_brackets = content.count('[') - content.count(']')
    if open_brackets > 0:
        parts.append(']' * open_brackets)

    open_parens = content.count('(') - content.count(')')
    if open_parens > 0:
        parts.append(')' * open_parens)

    return ''.join(parts)


class RawBuffer:
    """Append-only text buffer with cheap repeated snapshots."""

    def __init__(self, content: str = ""):
        self._parts: List[str] = [content] if content else []
        self._snapshot = content

    def append(self, chunk: str) -> None:
        if chunk:
            self._parts.append(chunk)
            self._snapshot = None

    def snapshot(self) -> str:
        if self._snapshot is None:
            self._snapshot = ''.join(self._parts)
            self._parts = [self._snapshot]
        return self._snapshot

    def __len__(self) -> int:
        return len(self.snapshot())


class MarkdownStreamFormatter:
    """Owns the raw markdown of one streaming message.

    Usage::

        formatter = MarkdownStreamFormatter()
        for delta in stream:
            render(formatter.ingest(delta))
        store(formatter.finalize())
    """

    def __init__(self, content: str = ""):
        self._raw = RawBuffer(content)

    def seed(self, content: str) -> None:
        """Start over from existing markdown content."""
        self._raw = RawBuffer(content or "")

    def ingest(self, chunk: str) -> str:
        """Append a streaming chunk and return the preview."""
        if chunk:
            self._raw.append(chunk)
        return self.preview()

    def replace(self, content: str) -> str:
        self.seed(content)
        return self.preview()

    def preview(self) -> str:
        raw = self._raw.snapshot()
        return raw + synthetic_closures(raw)

    def finalize(self) -> str:
        """Return the raw markdown without any synthetic closures."""
        return self._raw.snapshot()
