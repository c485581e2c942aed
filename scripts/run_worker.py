"""Standalone worker consuming one partition of the activity queue."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from filelock import FileLock

from fitness_advisor.config import get_settings
from fitness_advisor.database import run_migrations
from fitness_advisor.logging_config import configure_logging
from fitness_advisor.services.activity_queue import ActivityEventQueue
from fitness_advisor.services.ingestion_loop import IngestionLoop
from fitness_advisor.services.recommendation_generator import RecommendationGenerator
from fitness_advisor.services.recommendation_store import RecommendationStore


logger = logging.getLogger("worker")


def acquire_lock(lock_path: Path) -> FileLock:
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(lock_path))
    lock.acquire(timeout=0)
    return lock


def build_loop() -> IngestionLoop:
    return IngestionLoop(
        generator=RecommendationGenerator(),
        store=RecommendationStore(),
        queue=ActivityEventQueue(),
    )


async def run_poll_job(loop: IngestionLoop, partition: int, batch_size: int) -> None:
    start = datetime.now(timezone.utc)

    try:
        summary = await asyncio.to_thread(loop.drain, partition, batch_size)
    except Exception:
        logger.exception("Polling partition %d failed", partition)
        return

    if summary["received"]:
        elapsed = (datetime.now(timezone.utc) - start).total_seconds()
        logger.info(
            "Partition %d drained %d message(s) in %.2fs | saved=%d failed=%d",
            partition,
            summary["received"],
            elapsed,
            summary["saved"],
            summary["failed"],
        )
    else:
        logger.debug("Partition %d idle", partition)


async def main(partition: int, run_now: bool) -> None:
    configure_logging()
    settings = get_settings()
    if not 0 <= partition < settings.queue_partitions:
        raise SystemExit(
            f"Partition must be between 0 and {settings.queue_partitions - 1}"
        )
    run_migrations()

    worker_log = settings.log_dir / "worker.log"
    if not any(isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == str(worker_log) for h in logger.handlers):
        handler = logging.FileHandler(worker_log, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    lock_path = settings.worker_lock_dir / f"partition-{partition}.lock"
    lock = acquire_lock(lock_path)
    logger.info("Acquired worker lock for partition %d at %s", partition, lock_path)
    loop = build_loop()
    try:
        if run_now:
            await run_poll_job(loop, partition, settings.worker_batch_size)
            return

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            run_poll_job,
            "interval",
            seconds=settings.worker_poll_seconds,
            args=[loop, partition, settings.worker_batch_size],
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        scheduler.start()

        logger.info(
            "Worker running for partition %d (every %ds). Press Ctrl+C to exit.",
            partition,
            settings.worker_poll_seconds,
        )
        await asyncio.Event().wait()
    finally:
        loop.generator.close()
        lock.release()
        logger.info("Released worker lock at %s", lock_path)
        if lock_path.exists():
            lock_path.unlink()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run activity recommendation worker")
    parser.add_argument("--partition", type=int, default=0, help="Queue partition to consume (default: 0)")
    parser.add_argument("--run-now", action="store_true", help="Drain one batch immediately and exit")
    args = parser.parse_args()

    try:
        asyncio.run(main(partition=args.partition, run_now=args.run_now))
    except TimeoutError:
        logger.warning("Worker for partition %d already running; exiting.", args.partition)
