"""Database-backed activity queue partitioned by user."""
from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from fitness_advisor.config import get_settings
from fitness_advisor.database import SessionLocal
from fitness_advisor.models.database_models import ActivityEvent
from fitness_advisor.models.schemas import Activity


logger = logging.getLogger(__name__)


def partition_for(key: str | None, partitions: int) -> int:
    """Stable partition for a message key; keyless messages land in partition 0."""

    if not key:
        return 0
    return zlib.crc32(key.encode("utf-8")) % partitions


@dataclass(frozen=True)
class QueuedActivity:
    """An activity message as delivered to a consumer."""

    id: int
    partition: int
    key: str | None
    payload: Any


class ActivityEventQueue:
    """Publish/poll/ack over the ``activity_events`` table.

    Delivery is at-least-once: a message stays pending until acknowledged,
    and messages of one partition are delivered in publish order.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        partitions: int | None = None,
    ) -> None:
        self.session_factory = session_factory or SessionLocal
        self.partitions = partitions or get_settings().queue_partitions

    def publish(self, activity: Activity) -> int:
        """Enqueue an activity keyed by its user; returns the event id."""

        partition = partition_for(activity.user_id, self.partitions)
        with self.session_factory() as session:
            event = ActivityEvent(
                partition=partition,
                message_key=activity.user_id,
                payload=activity.model_dump(mode="json", by_alias=True),
            )
            session.add(event)
            session.commit()
            logger.info(
                "Published activity %s for user %s to partition %d (event %d)",
                activity.id,
                activity.user_id,
                partition,
                event.id,
            )
            return event.id

    def poll(self, partition: int, limit: int) -> list[QueuedActivity]:
        """Return up to ``limit`` unacknowledged messages of a partition, oldest first."""

        stmt = (
            select(ActivityEvent)
            .where(ActivityEvent.partition == partition)
            .where(ActivityEvent.acknowledged_at.is_(None))
            .order_by(ActivityEvent.id)
            .limit(limit)
        )
        with self.session_factory() as session:
            rows = session.scalars(stmt).all()
            return [
                QueuedActivity(
                    id=row.id,
                    partition=row.partition,
                    key=row.message_key,
                    payload=dict(row.payload),
                )
                for row in rows
            ]

    def ack(self, event_id: int) -> None:
        with self.session_factory() as session:
            event = session.get(ActivityEvent, event_id)
            if event is None:
                logger.warning("Cannot acknowledge unknown activity event %d", event_id)
                return
            event.acknowledged_at = datetime.now(timezone.utc)
            session.commit()

    def pending_count(self, partition: int | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(ActivityEvent)
            .where(ActivityEvent.acknowledged_at.is_(None))
        )
        if partition is not None:
            stmt = stmt.where(ActivityEvent.partition == partition)
        with self.session_factory() as session:
            return session.scalar(stmt) or 0
