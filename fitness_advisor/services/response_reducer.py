"""Reduce raw model replies into typed recommendations.

The model API wraps its answer in a transport envelope::

    {"candidates": [{"content": {"parts": [{"text": "<answer>"}]}}]}

and the answer itself is (usually fenced) JSON text. Each step below is a
named stage returning ``Parsed``, ``EnvelopeError`` or ``ParseError``;
``ResponseReducer.reduce`` chains them and falls back to the default
recommendation at the first stage that cannot continue.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from fitness_advisor.models.schemas import Activity, Recommendation
from fitness_advisor.services import pipeline_events as events
from fitness_advisor.services.pipeline_events import (
    LoggingObserver,
    PipelineEvent,
    PipelineObserver,
)


DEFAULT_ANALYSIS = "Unable to generate detailed analysis"
DEFAULT_IMPROVEMENTS = ("Continue With current routine",)
DEFAULT_SUGGESTIONS = ("Consider consulting a fitness consultant",)
DEFAULT_SAFETY = (
    "Always warm up before exercise",
    "Stay Hydrated",
    "Listen to your body",
)

# (response key, label) in output order
ANALYSIS_SECTIONS = (
    ("overall", "Overall"),
    ("pace", "Pace"),
    ("heartRate", "HeartRate"),
    ("caloriesBurned", "CaloriesBurned"),
)

_BLANK_LINES = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class EnvelopeError:
    reason: str


@dataclass(frozen=True)
class ParseError:
    reason: str


def _first(container: Any, key: str) -> Any:
    """Return ``container[key][0]`` or None when any hop is missing or mistyped."""

    if not isinstance(container, dict):
        return None
    items = container.get(key)
    if not isinstance(items, list) or not items:
        return None
    return items[0]


def unwrap_envelope(raw: str) -> Parsed | EnvelopeError:
    """Extract ``candidates[0].content.parts[0].text`` from the transport envelope."""

    try:
        root = json.loads(raw)
    except (ValueError, RecursionError) as err:
        return EnvelopeError(f"envelope is not valid JSON: {type(err).__name__}: {err}")

    candidate = _first(root, "candidates")
    if candidate is None:
        return EnvelopeError("no candidates in envelope")

    content = candidate.get("content") if isinstance(candidate, dict) else None
    if not isinstance(content, dict):
        return EnvelopeError("candidate has no content")

    part = _first(content, "parts")
    if not isinstance(part, dict):
        return EnvelopeError("content has no parts")

    text = part.get("text")
    if not isinstance(text, str):
        return EnvelopeError("part has no text")
    return Parsed(text)


def strip_fences(text: str) -> str:
    """Remove markdown code fences and blank-line runs around the model's JSON."""

    cleaned = text.replace("```json", "").replace("```", "")
    cleaned = _BLANK_LINES.sub("\n", cleaned)
    return cleaned.strip()


def parse_inner(text: str) -> Parsed | ParseError:
    """Parse the model's answer as a JSON object."""

    try:
        document = json.loads(text)
    except (ValueError, RecursionError) as err:
        return ParseError(f"answer is not valid JSON: {type(err).__name__}: {err}")
    if not isinstance(document, dict):
        return ParseError(f"answer is a JSON {type(document).__name__}, expected an object")
    return Parsed(document)


def _as_text(value: Any) -> str:
    """Render a scalar JSON value as text; missing values and containers become ''."""

    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def extract_analysis(document: dict[str, Any]) -> str:
    analysis = document.get("analysis")
    if not isinstance(analysis, dict):
        return ""

    sections = []
    for key, label in ANALYSIS_SECTIONS:
        if analysis.get(key) is not None:
            sections.append(f"{label}: {_as_text(analysis[key])}\n\n")
    return "".join(sections)


def _extract_pairs(node: Any, first: str, second: str) -> list[str]:
    if not isinstance(node, list):
        return []

    pairs = []
    for item in node:
        entry = item if isinstance(item, dict) else {}
        pairs.append(f"{_as_text(entry.get(first))}: {_as_text(entry.get(second))}")
    return pairs


def extract_improvements(document: dict[str, Any]) -> list[str]:
    return _extract_pairs(document.get("improvements"), "area", "recommendation")


def extract_suggestions(document: dict[str, Any]) -> list[str]:
    return _extract_pairs(document.get("suggestions"), "workout", "description")


def extract_safety(document: dict[str, Any]) -> list[str]:
    node = document.get("safety")
    if not isinstance(node, list):
        return []
    return [_as_text(item) for item in node]


def default_recommendation(activity: Activity) -> Recommendation:
    """Canned recommendation used whenever the model's reply is unusable."""

    return Recommendation(
        activity_id=activity.id,
        user_id=activity.user_id,
        activity_type=activity.type_label,
        recommendation=DEFAULT_ANALYSIS,
        improvements=DEFAULT_IMPROVEMENTS,
        suggestions=DEFAULT_SUGGESTIONS,
        safety=DEFAULT_SAFETY,
    )


class ResponseReducer:
    """Turns a raw model response into a Recommendation, never raising."""

    def __init__(self, observer: PipelineObserver | None = None) -> None:
        self.observer = observer or LoggingObserver()

    def reduce(self, activity: Activity, raw: str | None) -> Recommendation:
        if not isinstance(raw, str) or not raw.strip():
            return self._fallback(activity, events.ENVELOPE, "empty model response")

        try:
            envelope = unwrap_envelope(raw)
            if isinstance(envelope, EnvelopeError):
                return self._fallback(activity, events.ENVELOPE, envelope.reason)
            self._emit(events.ENVELOPE, events.OK, activity)

            cleaned = strip_fences(envelope.value)
            self._emit(events.FENCE_STRIP, events.OK, activity, f"{len(cleaned)} chars")

            inner = parse_inner(cleaned)
            if isinstance(inner, ParseError):
                return self._fallback(activity, events.INNER_PARSE, inner.reason)
            self._emit(events.INNER_PARSE, events.OK, activity)

            recommendation = self._build(activity, inner.value)
        except Exception as err:
            self._notify(
                PipelineEvent(
                    stage=events.EXTRACT,
                    outcome=events.FAILED,
                    activity_id=activity.id,
                    detail=f"{type(err).__name__}: {err}",
                    error=err,
                )
            )
            return self._fallback(activity, events.EXTRACT, type(err).__name__)

        self._emit(
            events.EXTRACT,
            events.OK,
            activity,
            f"improvements={len(recommendation.improvements)} "
            f"suggestions={len(recommendation.suggestions)} "
            f"safety={len(recommendation.safety)}",
        )
        return recommendation

    @staticmethod
    def _build(activity: Activity, document: dict[str, Any]) -> Recommendation:
        return Recommendation(
            activity_id=activity.id,
            user_id=activity.user_id,
            activity_type=activity.type_label,
            recommendation=extract_analysis(document),
            improvements=extract_improvements(document),
            suggestions=extract_suggestions(document),
            safety=extract_safety(document),
        )

    def _fallback(self, activity: Activity, stage: str, reason: str) -> Recommendation:
        self._emit(stage, events.FALLBACK, activity, reason)
        recommendation = default_recommendation(activity)
        self._emit(events.DEFAULT, events.OK, activity)
        return recommendation

    def _emit(self, stage: str, outcome: str, activity: Activity, detail: str = "") -> None:
        self._notify(
            PipelineEvent(stage=stage, outcome=outcome, activity_id=activity.id, detail=detail)
        )

    def _notify(self, event: PipelineEvent) -> None:
        events.notify(self.observer, event)
