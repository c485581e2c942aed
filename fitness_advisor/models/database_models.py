"""SQLAlchemy ORM models for the activity queue and stored recommendations."""
from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, String, Text, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from fitness_advisor.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityEvent(Base):
    """One activity published for recommendation processing."""

    __tablename__ = "activity_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)  # Delivery order
    partition: Mapped[int] = mapped_column(Integer, nullable=False)
    message_key: Mapped[str | None] = mapped_column(String(64), nullable=True)  # User id
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    enqueued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    acknowledged_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_activity_events_pending", "partition", "acknowledged_at", "id"),
    )


class RecommendationRecord(Base):
    """Persisted recommendation generated for one activity."""

    __tablename__ = "recommendations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    activity_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    recommendation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    improvements: Mapped[list] = mapped_column(JSON, nullable=False)
    suggestions: Mapped[list] = mapped_column(JSON, nullable=False)
    safety: Mapped[list] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
