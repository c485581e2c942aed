"""Tests for activity and recommendation models."""
from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from fitness_advisor.models.schemas import (
    PLACEHOLDER_IMPROVEMENT,
    PLACEHOLDER_SAFETY,
    PLACEHOLDER_SUGGESTION,
    Activity,
    ActivityType,
    Recommendation,
)


def test_activity_accepts_camel_case_payload():
    activity = Activity.model_validate(
        {
            "id": "6650f1",
            "userId": "user-9",
            "type": "CYCLING",
            "duration": 90,
            "caloriesBurned": 810,
            "startTime": "2026-10-18T06:15:00",
            "additionalMetrics": {"avgPowerWatts": 210},
        }
    )

    assert activity.user_id == "user-9"
    assert activity.type is ActivityType.CYCLING
    assert activity.calories_burned == 810
    assert activity.start_time == datetime(2026, 10, 18, 6, 15)
    assert activity.additional_metrics == {"avgPowerWatts": 210}
    assert activity.type_label == "CYCLING"


def test_activity_accepts_non_positive_amounts():
    activity = Activity.model_validate({"id": "a", "duration": 0, "caloriesBurned": -20})

    assert activity.duration == 0
    assert activity.calories_burned == -20


def test_activity_coerces_numeric_ids_to_text():
    activity = Activity.model_validate({"id": 42, "userId": 7})

    assert activity.id == "42"
    assert activity.user_id == "7"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("ROWING", ActivityType.OTHER),
        (3, ActivityType.OTHER),
        ("running", ActivityType.RUNNING),
        ("", None),
        (None, None),
    ],
)
def test_activity_type_is_lenient(raw, expected):
    assert Activity.model_validate({"type": raw}).type is expected


@pytest.mark.parametrize("metrics", [None, [], "fast", 12])
def test_activity_drops_malformed_metrics(metrics):
    assert Activity.model_validate({"additionalMetrics": metrics}).additional_metrics == {}


def test_activity_rejects_non_object_payload():
    with pytest.raises(ValidationError):
        Activity.model_validate(["not", "an", "activity"])


def test_activity_is_immutable(activity):
    with pytest.raises(ValidationError):
        activity.duration = 10


def test_recommendation_fills_empty_lists_with_placeholders():
    recommendation = Recommendation(activity_id="a", user_id="u", improvements=[], suggestions=[], safety=[])

    assert recommendation.improvements == (PLACEHOLDER_IMPROVEMENT,)
    assert recommendation.suggestions == (PLACEHOLDER_SUGGESTION,)
    assert recommendation.safety == (PLACEHOLDER_SAFETY,)


def test_recommendation_defaults_never_empty():
    recommendation = Recommendation()

    assert recommendation.improvements == (PLACEHOLDER_IMPROVEMENT,)
    assert recommendation.suggestions == (PLACEHOLDER_SUGGESTION,)
    assert recommendation.safety == (PLACEHOLDER_SAFETY,)
    assert recommendation.created_at.tzinfo is not None
    assert recommendation.id is None


def test_recommendation_keeps_provided_entries():
    recommendation = Recommendation(improvements=["Cadence: faster"], safety=["Hydrate", "Rest"])

    assert recommendation.improvements == ("Cadence: faster",)
    assert recommendation.safety == ("Hydrate", "Rest")


def test_recommendation_advice_cannot_be_emptied_in_place():
    recommendation = Recommendation(safety=["Hydrate"])

    assert isinstance(recommendation.safety, tuple)
    with pytest.raises(AttributeError):
        recommendation.safety.clear()


def test_recommendation_content_excludes_identity_fields():
    content = Recommendation(id=7, activity_id="a").content()

    assert "id" not in content
    assert "created_at" not in content
    assert content["activity_id"] == "a"
