"""
Tests for the adaptive stream chunker.
"""

import random

import pytest

from chatstream.config.app_config import ChunkerConfig
from chatstream.streaming.stream_chunker import (
    WordChunker,
    chunk_by_words,
    chunk_stream,
    split_delta,
)

CONFIG = ChunkerConfig(min_passthrough_size=16, max_chunk_length=12, inter_chunk_delay=0.008, word_delay=0.05)


class FixedRng:
    """Always picks the same piece length."""

    def __init__(self, value):
        self.value = value

    def randint(self, a, b):
        return max(a, min(b, self.value))


async def async_iter(items):
    for item in items:
        yield item


async def collect(agen):
    return [item async for item in agen]


class TestSplitDelta:

    def test_small_delta_passes_through(self):
        assert list(split_delta("short", CONFIG)) == ["short"]

    def test_disabled_passes_through(self):
        config = CONFIG.model_copy(update={"enable_chunking": False})
        text = "x" * 100
        assert list(split_delta(text, config)) == [text]

    def test_empty_delta_yields_nothing(self):
        assert list(split_delta("", CONFIG)) == []

    def test_forty_character_delta(self):
        delta = "The quick brown fox jumps over lazy dogs"
        assert len(delta) == 40

        for seed in range(20):
            pieces = list(split_delta(delta, CONFIG, random.Random(seed)))
            assert "".join(pieces) == delta
            assert all(len(p) <= CONFIG.max_chunk_length + 3 for p in pieces)
            assert all(len(p) >= 4 for p in pieces[:-1])

    def test_cut_stretches_to_nearby_space(self):
        pieces = list(split_delta("abcdefg hij klmnopqrstu", CONFIG, FixedRng(5)))
        assert pieces == ["abcdefg ", "hij k", "lmnop", "qrstu"]

    def test_cut_at_word_end_is_kept(self):
        pieces = list(split_delta("abcd efghijklmnopq", CONFIG, FixedRng(4)))
        assert pieces[0] == "abcd"

    def test_same_seed_same_pieces(self):
        delta = "lorem ipsum dolor sit amet consectetur adipiscing"
        first = list(split_delta(delta, CONFIG, random.Random(7)))
        second = list(split_delta(delta, CONFIG, random.Random(7)))
        assert first == second


class TestChunkStream:

    @pytest.mark.asyncio
    async def test_pieces_and_delays(self, record_sleep):
        deltas = ["hi", "abcdefg hij klmnopqrstu"]
        pieces = await collect(chunk_stream(async_iter(deltas), CONFIG, rng=FixedRng(5), sleep=record_sleep))

        assert pieces == ["hi", "abcdefg ", "hij k", "lmnop", "qrstu"]
        # No pause after the last piece of a delta
        assert record_sleep.calls == [0.008, 0.008, 0.008]

    @pytest.mark.asyncio
    async def test_zero_delay_never_sleeps(self, record_sleep):
        config = CONFIG.model_copy(update={"inter_chunk_delay": 0})
        pieces = await collect(chunk_stream(async_iter(["a" * 40]), config, rng=random.Random(1), sleep=record_sleep))

        assert "".join(pieces) == "a" * 40
        assert record_sleep.calls == []

    @pytest.mark.asyncio
    async def test_stopping_early_skips_remaining_work(self, record_sleep):
        stream = chunk_stream(async_iter(["abcdefg hij klmnopqrstu"]), CONFIG, rng=FixedRng(5), sleep=record_sleep)
        first = await stream.__anext__()
        await stream.aclose()

        assert first == "abcdefg "
        assert record_sleep.calls == []

    @pytest.mark.asyncio
    async def test_uses_environment_config_by_default(self, monkeypatch, record_sleep):
        monkeypatch.setenv("CHATSTREAM_ENABLE_CHUNKING", "false")
        text = "a long delta that would otherwise be split"
        pieces = await collect(chunk_stream(async_iter([text]), sleep=record_sleep))

        assert pieces == [text]


class TestWordChunker:

    def test_holds_back_partial_word(self):
        chunker = WordChunker()

        assert chunker.add_content("hello wo") == ["hello "]
        assert chunker.add_content("rld\nnext") == ["world\n"]
        assert chunker.flush_remaining() == "next"
        assert chunker.flush_remaining() is None

    def test_no_complete_word(self):
        chunker = WordChunker()
        assert chunker.add_content("abc") == []
        assert chunker.buffer == "abc"


class TestChunkByWords:

    @pytest.mark.asyncio
    async def test_words_across_deltas(self, record_sleep):
        deltas = ["hello wo", "rld and", " more"]
        pieces = await collect(chunk_by_words(async_iter(deltas), CONFIG, sleep=record_sleep))

        assert pieces == ["hello ", "world ", "and ", "more"]
        assert "".join(pieces) == "".join(deltas)
        assert record_sleep.calls == []

    @pytest.mark.asyncio
    async def test_pause_between_words_of_one_delta(self, record_sleep):
        pieces = await collect(chunk_by_words(async_iter(["one two three "]), CONFIG, sleep=record_sleep))

        assert pieces == ["one ", "two ", "three "]
        assert record_sleep.calls == [0.05, 0.05]

    @pytest.mark.asyncio
    async def test_disabled_passes_through(self, record_sleep):
        config = CONFIG.model_copy(update={"enable_chunking": False})
        pieces = await collect(chunk_by_words(async_iter(["a b", "c"]), config, sleep=record_sleep))

        assert pieces == ["a b", "c"]
