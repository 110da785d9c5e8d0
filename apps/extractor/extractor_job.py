"""
Extraction Job - Fetch, Scan and Forward One Page of Scores

Each run:
1. Fetches a page of scores using the persisted cursor
2. Scans the body into a fresh `Scores` page
3. Forwards scores not seen before, oldest first, to Redis
4. Remembers forwarded scores in a bounded window and advances the cursor to
   the page's oldest id

A malformed body is logged and re-raised; nothing from it is forwarded and the
cursor stays where it was.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from apps.extractor.fetcher import ScoresFetcher
from apps.extractor.publisher import forward_scores
from utils.config import settings
from utils.mq import RedisPublisher
from utils.scanner import ScanError, Scanner
from utils.schemas import CursorState
from utils.scores import Score, Scores
from utils.state import load_cursor_state, save_cursor_state

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    scanned: int
    forwarded: int
    cursor: Optional[int]


class ExtractionJob:
    """
    Stateful relay job, run once per scheduler tick.

    Handles:
    - Cursor state loading and persistence
    - Deduplication against recently forwarded scores
    - Eviction of the oldest remembered scores past RETAINED_SCORES
    """

    def __init__(
        self,
        fetcher: Optional[ScoresFetcher] = None,
        publisher: Optional[RedisPublisher] = None,
        state_path: Optional[str] = None,
        retained: Optional[int] = None,
    ) -> None:
        self.fetcher = fetcher or ScoresFetcher()
        self.publisher = publisher or RedisPublisher()
        self.state_path = state_path or settings.cursor_path
        self.retained = retained if retained is not None else settings.RETAINED_SCORES

        # Id-only keys of forwarded scores
        self.window = Scores()
        # Anything at or below the floor was evicted from the window already
        self.floor: Optional[Score] = None
        self.state = load_cursor_state(self.state_path)

        logger.info(
            "ExtractionJob initialized",
            extra={"cursor": self.state.cursor, "retained": self.retained},
        )

    async def run(self) -> ExtractionResult:
        """
        Execute one fetch/scan/forward cycle.

        Returns:
            Summary of the run

        Raises:
            ScanError: If the fetched body is malformed
        """
        body = await self.fetcher.fetch(self.state.cursor)

        page = Scores()
        try:
            Scanner(body).scan(page)
        except ScanError as e:
            logger.error(
                "Discarding malformed scores page",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "position": e.position,
                    "cursor": self.state.cursor,
                    "body_size": len(body),
                },
            )
            raise

        fresh = [score for score in page if self._is_new(score)]
        forwarded = await forward_scores(self.publisher, fresh)

        for score in fresh:
            self.window.insert(Score.only_id(score.id))
        self._evict()

        oldest = page.oldest()
        if oldest is not None:
            known = [self.state.newest_id]
            newest = self.window.newest()
            if newest is not None:
                known.append(newest.id)
            newest_id = max((id for id in known if id is not None), default=None)
            self.state = CursorState(cursor=oldest.id, newest_id=newest_id)
            save_cursor_state(self.state_path, self.state)

        logger.info(
            "Extraction run complete",
            extra={
                "scanned": len(page),
                "forwarded": forwarded,
                "cursor": self.state.cursor,
            },
        )

        return ExtractionResult(scanned=len(page), forwarded=forwarded, cursor=self.state.cursor)

    def _is_new(self, score: Score) -> bool:
        if self.floor is not None and score <= self.floor:
            return False
        return score not in self.window

    def _evict(self) -> None:
        while len(self.window) > self.retained:
            evicted = self.window.pop_oldest()
            self.floor = Score.only_id(evicted.id)

    async def close(self) -> None:
        """Close HTTP and Redis connections."""
        try:
            await self.fetcher.close()
        finally:
            await self.publisher.close()


async def run_extraction() -> ExtractionResult:
    """Run a single extraction cycle with default collaborators."""
    job = ExtractionJob()
    try:
        return await job.run()
    finally:
        await job.close()
