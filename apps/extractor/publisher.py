"""
Score Publisher for Extractor Service

Forwards scanned scores to Redis Pub/Sub byte for byte, then announces the
batch on the events channel.

Usage:
    from apps.extractor.publisher import forward_scores

    await forward_scores(publisher, new_scores)
"""

import logging
from typing import Iterable

from utils.config import settings
from utils.mq import RedisPublisher
from utils.schemas import RelayEvent
from utils.scores import Score

logger = logging.getLogger(__name__)


async def forward_scores(publisher: RedisPublisher, scores: Iterable[Score]) -> int:
    """
    Publish each score's original bytes, in the given order, then a summary event.

    Args:
        publisher: Connected or lazily-connecting publisher
        scores: Scores to forward

    Returns:
        Number of forwarded scores

    Raises:
        redis.RedisError: If publishing fails
    """
    forwarded = []

    try:
        for score in scores:
            await publisher.publish_raw(settings.REDIS_CHANNEL_SCORES, score.as_message())
            forwarded.append(score.id)

        if not forwarded:
            return 0

        event = RelayEvent(
            count=len(forwarded),
            oldest_id=min(forwarded),
            newest_id=max(forwarded),
        )
        await publisher.publish(settings.REDIS_CHANNEL_EVENTS, event.model_dump())

        logger.info(
            "Forwarded scores",
            extra={
                "channel": settings.REDIS_CHANNEL_SCORES,
                "count": event.count,
                "oldest_id": event.oldest_id,
                "newest_id": event.newest_id,
            },
        )

    except Exception as e:
        logger.error(
            "Failed to forward scores",
            extra={
                "channel": settings.REDIS_CHANNEL_SCORES,
                "forwarded": len(forwarded),
                "error": str(e),
            },
        )
        raise

    return len(forwarded)
