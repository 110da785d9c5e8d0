"""
Pydantic Schemas - Relay State and Event Models

Usage:
    from utils.schemas import CursorState, RelayEvent

    state = CursorState(cursor=oldest.id, newest_id=newest.id)
    event = RelayEvent(count=len(forwarded), oldest_id=1, newest_id=9)
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CursorState(BaseModel):
    """Pagination state persisted between fetches.

    `cursor` is the oldest score id of the last scanned page, `newest_id` the
    largest id forwarded so far.
    """

    cursor: Optional[int] = Field(default=None, ge=0, description="Oldest id of the last page")
    newest_id: Optional[int] = Field(default=None, ge=0, description="Newest forwarded id")
    updated_at: datetime = Field(default_factory=_utcnow, description="Last update timestamp")


class RelayEvent(BaseModel):
    """Summary event published after a batch of scores was forwarded.

    {
        "type": "scores_forwarded",
        "count": 50,
        "oldest_id": 123,
        "newest_id": 789,
        "ts": "2025-01-15T03:15:02Z"
    }
    """

    type: str = Field(default="scores_forwarded", description="Event type")
    count: int = Field(..., ge=0, description="Number of forwarded scores")
    oldest_id: Optional[int] = Field(default=None, description="Smallest forwarded id")
    newest_id: Optional[int] = Field(default=None, description="Largest forwarded id")
    ts: datetime = Field(default_factory=_utcnow, description="Timestamp")
