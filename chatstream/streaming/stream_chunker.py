"""
Stream Chunker
Re-paces bursty network deltas into smaller pieces for smooth animation.
"""

import asyncio
import random
import re
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterator, List, Optional

from chatstream.config.app_config import MIN_PIECE_LENGTH, ChunkerConfig
from chatstream.utils.logging_utils import logger

Sleep = Callable[[float], Awaitable[None]]


def split_delta(delta: str, config: ChunkerConfig, rng: Optional[random.Random] = None) -> Iterator[str]:
    """Cut one delta into pieces, preferring to end a piece after a space.

    Deltas shorter than ``min_passthrough_size`` (or any delta when chunking
    is disabled) come back whole. The pieces always concatenate to ``delta``.
    """
    if not config.enable_chunking or len(delta) < config.min_passthrough_size:
        if delta:
            yield delta
        return

    rng = rng or random.Random()
    upper = max(MIN_PIECE_LENGTH, config.max_chunk_length)
    remaining = delta
    while remaining:
        size = min(rng.randint(MIN_PIECE_LENGTH, upper), len(remaining))

        # Cut landed inside a word: stretch to a space that is close by
        if size < len(remaining) and not remaining[size - 1].isspace() and not remaining[size].isspace():
            next_space = remaining.find(' ', size)
            if next_space != -1 and next_space <= size + 2:
                size = next_space + 1

        yield remaining[:size]
        remaining = remaining[size:]


async def chunk_stream(
    deltas: AsyncIterable[str],
    config: Optional[ChunkerConfig] = None,
    rng: Optional[random.Random] = None,
    sleep: Sleep = asyncio.sleep,
) -> AsyncIterator[str]:
    """
    Yield the deltas of ``deltas`` as smaller pieces with a short pause between them.

    The pause is skipped after the last piece of each delta. Stopping
    iteration is the way to cancel; nothing runs between yields.
    """
    config = config or ChunkerConfig.from_env()
    rng = rng or random.Random()
    logger.debug(
        f"Chunking stream: enabled={config.enable_chunking} "
        f"min={config.min_passthrough_size} max={config.max_chunk_length}"
    )

    async for delta in deltas:
        pieces = split_delta(delta, config, rng)
        piece = next(pieces, None)
        while piece is not None:
            following = next(pieces, None)
            yield piece
            if following is not None and config.inter_chunk_delay > 0:
                await sleep(config.inter_chunk_delay)
            piece = following


class WordChunker:
    """Splits streamed text into whole words, holding back a trailing partial word."""

    def __init__(self):
        self.buffer = ""
        self.word_boundary = re.compile(r'(\s+)')

    def add_content(self, content: str) -> List[str]:
        """Add content and return the words it completes, each with its trailing whitespace."""
        self.buffer += content
        parts = self.word_boundary.split(self.buffer)
        if len(parts) < 3:
            return []

        # The last part might be an incomplete word
        self.buffer = parts[-1]
        complete = parts[:-1]
        words = []
        for i in range(0, len(complete), 2):
            words.append(''.join(complete[i:i + 2]))
        return words

    def flush_remaining(self) -> Optional[str]:
        """Flush any remaining content"""
        if self.buffer:
            content = self.buffer
            self.buffer = ""
            return content
        return None


async def chunk_by_words(
    deltas: AsyncIterable[str],
    config: Optional[ChunkerConfig] = None,
    sleep: Sleep = asyncio.sleep,
) -> AsyncIterator[str]:
    """Yield whole words, pausing ``word_delay`` between words of the same delta."""
    config = config or ChunkerConfig.from_env()
    if not config.enable_chunking:
        async for delta in deltas:
            yield delta
        return

    chunker = WordChunker()
    async for delta in deltas:
        words = chunker.add_content(delta)
        for i, word in enumerate(words):
            yield word
            if i < len(words) - 1 and config.word_delay > 0:
                await sleep(config.word_delay)

    tail = chunker.flush_remaining()
    if tail is not None:
        yield tail
