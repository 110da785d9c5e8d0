"""
Production-ready Redis Pub/Sub publisher with connection pooling and retries.

Scores are forwarded as raw binary messages, byte for byte as they appeared in
the API response; relay events are orjson-serialized dicts.
"""

import logging
from typing import Any, Optional, Union

import orjson
import redis.asyncio as redis
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from utils.config import settings

logger = logging.getLogger(__name__)

_REDIS_ERRORS = (redis.RedisError, redis.ConnectionError, redis.TimeoutError)


class RedisPublisher:
    """Redis publisher for Pub/Sub messages with connection pooling and retries."""

    def __init__(self, redis_url: Optional[str] = None) -> None:
        """Initialize Redis publisher.

        Args:
            redis_url: Redis connection URL, defaults to settings.REDIS_URL
        """
        self.redis_url = redis_url or settings.REDIS_URL
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection with connection pooling."""
        if self.client is None:
            self.client = redis.from_url(
                self.redis_url,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=False,  # Payloads are raw bytes
            )

    @retry(
        retry=retry_if_exception_type(_REDIS_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def publish_raw(self, channel: str, payload: Union[bytes, memoryview]) -> None:
        """Publish a binary payload unchanged.

        Args:
            channel: Redis channel name
            payload: Bytes to forward verbatim

        Raises:
            redis.RedisError: If publishing fails after retries
        """
        if self.client is None:
            await self.connect()

        await self.client.publish(channel, payload)

    async def publish(self, channel: str, message: dict[str, Any]) -> None:
        """Publish a dict message, serialized with orjson.

        Args:
            channel: Redis channel name
            message: Message payload dict

        Raises:
            redis.RedisError: If publishing fails after retries
        """
        await self.publish_raw(channel, orjson.dumps(message))

    async def close(self) -> None:
        """Close Redis connection and cleanup resources."""
        if self.client:
            await self.client.aclose()
            self.client = None
