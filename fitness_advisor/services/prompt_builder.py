"""Prompt construction for activity analysis.

The JSON shape requested here is the one ``response_reducer`` extracts;
change both together.
"""
from __future__ import annotations

import json
from typing import Any

from fitness_advisor.models.schemas import Activity


PROMPT_TEMPLATE = """\
Analyze this fitness activity and provide detailed recommendations in the following EXACT JSON format:
{{
  "analysis": {{
    "overall": "Overall analysis here",
    "pace": "Pace analysis here",
    "heartRate": "Heart rate analysis here",
    "caloriesBurned": "Calories analysis here"
  }},
  "improvements": [
    {{
      "area": "Area name",
      "recommendation": "Detailed recommendation"
    }}
  ],
  "suggestions": [
    {{
      "workout": "Workout name",
      "description": "Detailed workout description"
    }}
  ],
  "safety": [
    "Safety point 1",
    "Safety point 2"
  ]
}}

Analyze this activity:
Activity Type: {activity_type}
Duration: {duration} minutes
Calories Burned: {calories}
Additional Metrics: {metrics}

Provide detailed analysis focusing on performance, improvements, next workout suggestions, and safety guidelines.
Ensure the response follows the EXACT JSON format shown above.
"""


def _format_value(value: Any) -> str:
    return "" if value is None else str(value)


def format_metrics(metrics: dict[str, Any] | None) -> str:
    """Render additional metrics as JSON; an empty mapping renders as ``{}``."""

    return json.dumps(metrics or {}, default=str, ensure_ascii=False)


def build_prompt(activity: Activity) -> str:
    """Build the analysis prompt for a single activity."""

    return PROMPT_TEMPLATE.format(
        activity_type=activity.type_label,
        duration=_format_value(activity.duration),
        calories=_format_value(activity.calories_burned),
        metrics=format_metrics(activity.additional_metrics),
    )
