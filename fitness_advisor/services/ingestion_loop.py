"""Consume activity messages and persist a recommendation for each one."""
from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError

from fitness_advisor.models.schemas import Activity, Recommendation
from fitness_advisor.services import pipeline_events as events
from fitness_advisor.services.activity_queue import ActivityEventQueue, QueuedActivity
from fitness_advisor.services.pipeline_events import (
    LoggingObserver,
    PipelineEvent,
    PipelineObserver,
)
from fitness_advisor.services.recommendation_generator import RecommendationGenerator
from fitness_advisor.services.recommendation_store import RecommendationStore


logger = logging.getLogger(__name__)


class IngestionLoop:
    """Drives one recommendation attempt per delivered activity.

    A failure while decoding, generating or saving one message is logged and
    the loop moves on; the recommendation for that message is dropped.
    """

    def __init__(
        self,
        generator: RecommendationGenerator,
        store: RecommendationStore,
        queue: ActivityEventQueue | None = None,
        observer: PipelineObserver | None = None,
    ) -> None:
        self.generator = generator
        self.store = store
        self.queue = queue
        self.observer = observer or LoggingObserver()

    def handle(self, activity: Activity) -> Recommendation | None:
        """Generate and persist a recommendation; None when either step failed."""

        logger.info("Received activity %s for user %s", activity.id, activity.user_id)
        try:
            recommendation = self.generator.generate(activity)
        except Exception as err:
            self._failed(events.GENERATE, activity.id, err)
            return None

        try:
            saved = self.store.save(recommendation)
        except Exception as err:
            self._failed(events.PERSIST, activity.id, err)
            return None

        logger.info("Saved recommendation %s for activity %s", saved.id, activity.id)
        return saved

    def process_message(self, message: QueuedActivity) -> Recommendation | None:
        try:
            activity = Activity.model_validate(message.payload)
        except ValidationError as err:
            activity_id = message.payload.get("id") if isinstance(message.payload, dict) else None
            if activity_id is not None:
                activity_id = str(activity_id)
            self._failed(events.DECODE, activity_id, err, f"event {message.id}")
            return None
        return self.handle(activity)

    def consume(self, activities: Iterable[Activity]) -> dict[str, int]:
        """Handle every activity in ``activities``; returns counts."""

        summary = {"received": 0, "saved": 0, "failed": 0}
        for activity in activities:
            summary["received"] += 1
            if self.handle(activity) is None:
                summary["failed"] += 1
            else:
                summary["saved"] += 1
        return summary

    def drain(self, partition: int, limit: int) -> dict[str, int]:
        """Process one batch of pending messages from a queue partition.

        Every polled message is acknowledged whatever its outcome. A failed
        acknowledgement leaves the message pending for redelivery.
        """
        if self.queue is None:
            raise RuntimeError("IngestionLoop.drain requires a queue")

        messages = self.queue.poll(partition, limit)
        summary = {"received": len(messages), "saved": 0, "failed": 0, "unacknowledged": 0}
        for message in messages:
            if self.process_message(message) is None:
                summary["failed"] += 1
            else:
                summary["saved"] += 1

            try:
                self.queue.ack(message.id)
            except Exception:
                summary["unacknowledged"] += 1
                logger.exception("Failed to acknowledge activity event %d", message.id)

        if messages:
            logger.info(
                "Partition %d batch | received=%d saved=%d failed=%d unacknowledged=%d",
                partition,
                summary["received"],
                summary["saved"],
                summary["failed"],
                summary["unacknowledged"],
            )
        return summary

    def _failed(
        self,
        stage: str,
        activity_id: str | None,
        err: Exception,
        detail: str = "",
    ) -> None:
        events.notify(
            self.observer,
            PipelineEvent(
                stage=stage,
                outcome=events.FAILED,
                activity_id=activity_id,
                detail=detail or f"{type(err).__name__}: {err}",
                error=err,
            ),
        )
