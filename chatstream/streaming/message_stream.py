"""
Message Stream - one streaming assistant turn.

Accumulates deltas for a single message and answers, at any point, what the
UI should show: a balanced markdown preview for plain text, or ordered
segments once reasoning or tool-call blocks appear.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, List, Optional, Sequence

from chatstream.config.app_config import ChunkerConfig
from chatstream.models.segments import Segment
from chatstream.parsing.message_segments import build_message_segments, has_structured_blocks
from chatstream.streaming.markdown_formatter import MarkdownStreamFormatter
from chatstream.streaming.stream_chunker import Sleep, chunk_by_words, chunk_stream
from chatstream.utils.logging_utils import logger


@dataclass
class StreamUpdate:
    delta: str
    buffer: str
    preview: str
    segments: List[Segment]

    @property
    def is_structured(self) -> bool:
        return has_structured_blocks(self.segments)


class MessageStream:
    """Owns the buffer of one message. Not safe for concurrent use."""

    def __init__(self, custom_tag_pair: Optional[Sequence[str]] = None, detect_default_tags: bool = True):
        self.custom_tag_pair = custom_tag_pair
        self.detect_default_tags = detect_default_tags
        self._formatter = MarkdownStreamFormatter()

    @property
    def buffer(self) -> str:
        return self._formatter.finalize()

    def reset(self, content: str = "") -> None:
        """Start a new turn, optionally from existing content."""
        self._formatter.seed(content)

    def feed(self, delta: str) -> str:
        """Append a delta and return the balanced markdown preview."""
        return self._formatter.ingest(delta)

    def preview(self) -> str:
        return self._formatter.preview()

    def segments(self) -> List[Segment]:
        return build_message_segments(self.buffer, self.custom_tag_pair, self.detect_default_tags)

    def has_structured_blocks(self) -> bool:
        return has_structured_blocks(self.segments())

    def snapshot(self, delta: str = "") -> StreamUpdate:
        return StreamUpdate(delta=delta, buffer=self.buffer, preview=self.preview(), segments=self.segments())

    async def consume(
        self,
        deltas: AsyncIterable[str],
        config: Optional[ChunkerConfig] = None,
        by_words: bool = False,
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> AsyncIterator[StreamUpdate]:
        """Drive ``deltas`` through the chunker, yielding an update after every piece."""
        config = config or ChunkerConfig.from_env()
        if by_words:
            pieces = chunk_by_words(deltas, config, sleep=sleep)
        else:
            pieces = chunk_stream(deltas, config, rng=rng, sleep=sleep)

        count = 0
        async for piece in pieces:
            self.feed(piece)
            count += 1
            yield self.snapshot(piece)
        logger.debug(f"Stream consumed: {count} pieces, {len(self.buffer)} chars")
