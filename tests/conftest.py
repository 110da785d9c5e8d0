"""Shared pytest fixtures for the score-relay test suite."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from utils.scores import Scores


# ============================================================================
# Body Fixtures
# ============================================================================

SAMPLE_BODY = (
    b'{"scores": [{"id": 123}, {"id":456, "user": {"id": 2}}, '
    b'{"user": {"id":2}, "id": 789}], "cursor": {"id": 789}, "cursor_string": "abc"}'
)


def make_body(*elements: bytes, key: bytes = b'"scores":') -> bytes:
    """Build a scores response body from raw element bytes."""
    return key + b"[" + b",".join(elements) + b'],"cursor":{"id":1}'


@pytest.fixture
def sample_body() -> bytes:
    return SAMPLE_BODY


@pytest.fixture
def scores() -> Scores:
    return Scores()


# ============================================================================
# Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_publisher() -> MagicMock:
    """RedisPublisher stand-in recording published payloads."""
    publisher = MagicMock()
    publisher.raw_messages = []
    publisher.events = []

    async def publish_raw(channel: str, payload: Any) -> None:
        publisher.raw_messages.append((channel, bytes(payload)))

    async def publish(channel: str, message: dict[str, Any]) -> None:
        publisher.events.append((channel, message))

    publisher.publish_raw = AsyncMock(side_effect=publish_raw)
    publisher.publish = AsyncMock(side_effect=publish)
    publisher.close = AsyncMock()
    return publisher


@pytest.fixture
def mock_fetcher() -> MagicMock:
    """ScoresFetcher stand-in; set `fetch.side_effect` to a list of bodies."""
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock()
    fetcher.close = AsyncMock()
    return fetcher


@pytest.fixture
def state_path(tmp_path) -> str:
    return str(tmp_path / "state" / "cursor.json")
