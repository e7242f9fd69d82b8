"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Run async tests in auto mode."""
    config.option.asyncio_mode = "auto"


@pytest.fixture(autouse=True)
def clean_chatstream_env(monkeypatch):
    """Keep CHATSTREAM_* settings from the developer shell out of tests."""
    for name in (
        'CHATSTREAM_ENABLE_CHUNKING',
        'CHATSTREAM_MIN_CHUNK_SIZE',
        'CHATSTREAM_MAX_CHUNK_LENGTH',
        'CHATSTREAM_CHUNK_DELAY_MS',
        'CHATSTREAM_WORD_DELAY_MS',
        'CHATSTREAM_REASONING_TAGS',
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def record_sleep():
    """Async stand-in for asyncio.sleep that records requested delays."""
    calls = []

    async def _sleep(delay):
        calls.append(delay)

    _sleep.calls = calls
    return _sleep

