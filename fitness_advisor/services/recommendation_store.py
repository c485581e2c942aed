"""Persistence for generated recommendations."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from fitness_advisor.database import SessionLocal
from fitness_advisor.models.database_models import RecommendationRecord
from fitness_advisor.models.schemas import Recommendation


logger = logging.getLogger(__name__)


class RecommendationStore:
    """Saves recommendations and looks them up by user or activity."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or SessionLocal

    def save(self, recommendation: Recommendation) -> Recommendation:
        """Persist a recommendation and return a copy carrying its assigned id."""

        with self.session_factory() as session:
            record = RecommendationRecord(
                activity_id=recommendation.activity_id,
                user_id=recommendation.user_id,
                activity_type=recommendation.activity_type,
                recommendation=recommendation.recommendation,
                improvements=list(recommendation.improvements),
                suggestions=list(recommendation.suggestions),
                safety=list(recommendation.safety),
                created_at=recommendation.created_at,
            )
            session.add(record)
            session.commit()
            logger.debug("Stored recommendation %d for activity %s", record.id, record.activity_id)
            return recommendation.model_copy(update={"id": record.id})

    def list_for_user(self, user_id: str) -> list[Recommendation]:
        stmt = (
            select(RecommendationRecord)
            .where(RecommendationRecord.user_id == user_id)
            .order_by(RecommendationRecord.created_at, RecommendationRecord.id)
        )
        with self.session_factory() as session:
            return [Recommendation.model_validate(row) for row in session.scalars(stmt)]

    def get_for_activity(self, activity_id: str) -> Recommendation | None:
        """Return the most recent recommendation generated for an activity."""

        stmt = (
            select(RecommendationRecord)
            .where(RecommendationRecord.activity_id == activity_id)
            .order_by(RecommendationRecord.id.desc())
            .limit(1)
        )
        with self.session_factory() as session:
            row = session.scalars(stmt).first()
            return Recommendation.model_validate(row) if row is not None else None
