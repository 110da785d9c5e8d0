"""
Extraction Scheduler - Interval and On-Demand Execution

Runs the score relay job periodically using APScheduler.

Features:
- Interval scheduling (configurable via FETCH_INTERVAL_SECONDS)
- RUN_ONCE mode for immediate execution
- One long-lived job so the dedup window survives between runs
- Graceful shutdown handling

Usage:
    # Scheduled mode (default)
    python -m apps.extractor

    # Run once and exit
    RUN_ONCE=true python -m apps.extractor
"""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from apps.extractor.extractor_job import ExtractionJob
from utils.config import settings
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


class ExtractionScheduler:
    """
    Scheduler for periodic or on-demand relay runs.

    Handles:
    - APScheduler setup and management
    - RUN_ONCE immediate execution
    - Signal handling for graceful shutdown
    """

    def __init__(self, run_once: bool = False, job: Optional[ExtractionJob] = None) -> None:
        """
        Initialize scheduler.

        Args:
            run_once: If True, run extraction once and exit
            job: Relay job to execute, built from settings if omitted
        """
        self.run_once = run_once
        self.job = job or ExtractionJob()
        self.scheduler: AsyncIOScheduler | None = None
        self.shutdown_event = asyncio.Event()
        self.failed_runs = 0

        logger.info(
            "ExtractionScheduler initialized",
            extra={
                "run_once": run_once,
                "interval_seconds": settings.FETCH_INTERVAL_SECONDS,
            },
        )

    async def execute_extraction(self) -> None:
        """
        Execute one relay run.

        In scheduled mode a failed run is logged and counted, and the next tick
        tries again. In RUN_ONCE mode the failure propagates.
        """
        logger.info("Starting extraction execution")

        try:
            result = await self.job.run()

            logger.info(
                "Extraction execution completed successfully",
                extra={
                    "scanned": result.scanned,
                    "forwarded": result.forwarded,
                    "cursor": result.cursor,
                },
            )

        except Exception as e:
            self.failed_runs += 1
            logger.error(
                "Extraction execution failed",
                extra={"error": str(e), "failed_runs": self.failed_runs},
                exc_info=True,
            )
            if self.run_once:
                raise

        finally:
            # Signal shutdown if run_once mode
            if self.run_once:
                logger.info("RUN_ONCE mode: signaling shutdown")
                self.shutdown_event.set()

    def setup_signal_handlers(self) -> None:
        """Setup handlers for graceful shutdown on SIGINT/SIGTERM."""

        def signal_handler(signum: int, frame: object) -> None:
            logger.info(f"Received signal {signum}, initiating graceful shutdown")
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def start(self) -> None:
        """
        Start scheduler or execute once.

        In scheduled mode, runs continuously until shutdown signal.
        In RUN_ONCE mode, executes immediately and exits.
        """
        self.setup_signal_handlers()

        try:
            if self.run_once:
                logger.info("Running in RUN_ONCE mode")
                await self.execute_extraction()
                return

            logger.info("Running in scheduled mode")

            self.scheduler = AsyncIOScheduler()
            self.scheduler.add_job(
                self.execute_extraction,
                trigger=IntervalTrigger(seconds=settings.FETCH_INTERVAL_SECONDS),
                id="extraction_job",
                name="Periodic Score Relay",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )

            self.scheduler.start()
            logger.info("Scheduler started")

            job = self.scheduler.get_job("extraction_job")
            next_run = getattr(job, "next_run_time", None)

            logger.info(
                "Scheduled extraction job",
                extra={
                    "interval_seconds": settings.FETCH_INTERVAL_SECONDS,
                    "next_run": str(next_run) if next_run is not None else None,
                },
            )

            # Wait for shutdown signal
            await self.shutdown_event.wait()

            logger.info("Shutting down scheduler")
            self.scheduler.shutdown(wait=True)
            logger.info("Scheduler shutdown complete")

        finally:
            await self.job.close()


async def main() -> None:
    """Main entry point for scheduler."""
    setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)

    run_once = os.getenv("RUN_ONCE", "false").lower() in ("true", "1", "yes")

    scheduler = ExtractionScheduler(run_once=run_once)

    try:
        await scheduler.start()
    except Exception as e:
        logger.error("Scheduler failed", extra={"error": str(e)}, exc_info=True)
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
