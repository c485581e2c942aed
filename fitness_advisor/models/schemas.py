"""Pydantic models describing activities and the recommendations built from them."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


PLACEHOLDER_IMPROVEMENT = "No specific improvement provided"
PLACEHOLDER_SUGGESTION = "No specific suggestion provided"
PLACEHOLDER_SAFETY = "Follow general safety guidelines"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityType(str, Enum):
    """Kinds of exercise session an activity can record."""

    RUNNING = "RUNNING"
    WALKING = "WALKING"
    CYCLING = "CYCLING"
    SWIMMING = "SWIMMING"
    WEIGHT_TRAINING = "WEIGHT_TRAINING"
    YOGA = "YOGA"
    HIIT = "HIIT"
    CARDIO = "CARDIO"
    STRETCHING = "STRETCHING"
    OTHER = "OTHER"


class Activity(BaseModel):
    """One recorded exercise session as delivered on the activity queue.

    Producers publish camelCase keys (``userId``, ``caloriesBurned``...), so
    both spellings are accepted. Producers validate amounts, so they are not
    rechecked here; an unrecognised ``type`` is read as ``OTHER``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    id: str | None = None
    user_id: str | None = None
    type: ActivityType | None = None
    duration: int | None = Field(default=None, description="Duration in minutes")
    calories_burned: int | None = None
    start_time: datetime | None = None
    additional_metrics: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def lenient_type(cls, value: Any) -> Any:
        if value is None or isinstance(value, ActivityType):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if not name:
                return None
            if name in ActivityType.__members__:
                return ActivityType[name]
        return ActivityType.OTHER

    @field_validator("additional_metrics", mode="before")
    @classmethod
    def default_metrics(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def type_label(self) -> str:
        return self.type.value if self.type is not None else ""


class Recommendation(BaseModel):
    """Structured advisory output for one activity.

    The three advice sequences are never empty: an empty one is replaced by a
    single placeholder when the model is built.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True, validate_default=True)

    id: int | None = None
    activity_id: str | None = None
    user_id: str | None = None
    activity_type: str = ""
    recommendation: str = ""
    improvements: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    safety: tuple[str, ...] = ()
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("improvements", mode="after")
    @classmethod
    def ensure_improvements(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return value or (PLACEHOLDER_IMPROVEMENT,)

    @field_validator("suggestions", mode="after")
    @classmethod
    def ensure_suggestions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return value or (PLACEHOLDER_SUGGESTION,)

    @field_validator("safety", mode="after")
    @classmethod
    def ensure_safety(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return value or (PLACEHOLDER_SAFETY,)

    def content(self) -> dict[str, Any]:
        """Return the advisory fields, without store id and timestamp."""

        return self.model_dump(exclude={"id", "created_at"})
