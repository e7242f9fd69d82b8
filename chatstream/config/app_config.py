"""
General configuration for chatstream.

Values come from CHATSTREAM_* environment variables with the defaults below.
"""
import os
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from chatstream.utils.custom_exceptions import ConfigurationError

# Chunker defaults, tuned for smooth UI updates without thrashing
DEFAULT_ENABLE_CHUNKING = True
DEFAULT_MIN_CHUNK_SIZE = 16
DEFAULT_MAX_CHUNK_LENGTH = 12
DEFAULT_CHUNK_DELAY_MS = 8
DEFAULT_WORD_DELAY_MS = 50

# Shortest piece the chunker cuts when splitting a large delta
MIN_PIECE_LENGTH = 4

# Placeholders the backend may prepend to a message before real content arrives
TYPING_INDICATOR = '[TYPING_INDICATOR]'
SEARCH_BANNER = '🔍 Searching the web...'


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    value = raw.strip().lower()
    if value in ('1', 'true', 'yes', 'on'):
        return True
    if value in ('0', 'false', 'no', 'off'):
        return False
    raise ConfigurationError(name, raw, "expected a boolean")


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(name, raw, "expected an integer")
    if value < minimum:
        raise ConfigurationError(name, raw, f"must be at least {minimum}")
    return value


def reasoning_tag_pair_from_env() -> Optional[Tuple[str, str]]:
    """Read the optional custom reasoning tag pair, e.g. ``<thought>,</thought>``."""
    raw = os.getenv('CHATSTREAM_REASONING_TAGS')
    if raw is None or raw.strip() == '':
        return None
    parts = [p.strip() for p in raw.split(',')]
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ConfigurationError('CHATSTREAM_REASONING_TAGS', raw, "expected '<open>,<close>'")
    return parts[0], parts[1]


class ChunkerConfig(BaseModel):
    """Settings for one chunking session. Delays are in seconds."""
    model_config = {"frozen": True}

    enable_chunking: bool = DEFAULT_ENABLE_CHUNKING
    min_passthrough_size: int = Field(DEFAULT_MIN_CHUNK_SIZE, ge=0)
    max_chunk_length: int = Field(DEFAULT_MAX_CHUNK_LENGTH, ge=1)
    inter_chunk_delay: float = Field(DEFAULT_CHUNK_DELAY_MS / 1000.0, ge=0)
    word_delay: float = Field(DEFAULT_WORD_DELAY_MS / 1000.0, ge=0)

    @classmethod
    def from_env(cls) -> "ChunkerConfig":
        return cls(
            enable_chunking=_env_bool('CHATSTREAM_ENABLE_CHUNKING', DEFAULT_ENABLE_CHUNKING),
            min_passthrough_size=_env_int('CHATSTREAM_MIN_CHUNK_SIZE', DEFAULT_MIN_CHUNK_SIZE),
            max_chunk_length=_env_int('CHATSTREAM_MAX_CHUNK_LENGTH', DEFAULT_MAX_CHUNK_LENGTH, minimum=1),
            inter_chunk_delay=_env_int('CHATSTREAM_CHUNK_DELAY_MS', DEFAULT_CHUNK_DELAY_MS) / 1000.0,
            word_delay=_env_int('CHATSTREAM_WORD_DELAY_MS', DEFAULT_WORD_DELAY_MS) / 1000.0,
        )
