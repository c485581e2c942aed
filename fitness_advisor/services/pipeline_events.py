"""Stage-tagged events emitted while turning an activity into a recommendation."""
from __future__ import annotations

import logging
from dataclasses import dataclass


logger = logging.getLogger(__name__)

# Stage names
MODEL_CALL = "model_call"
ENVELOPE = "envelope"
FENCE_STRIP = "fence_strip"
INNER_PARSE = "inner_parse"
EXTRACT = "extract"
DEFAULT = "default"
GENERATE = "generate"
DECODE = "decode"
PERSIST = "persist"

# Outcomes
OK = "ok"
FALLBACK = "fallback"
FAILED = "failed"


@dataclass(frozen=True)
class PipelineEvent:
    """What happened at one stage for one activity."""

    stage: str
    outcome: str
    activity_id: str | None = None
    detail: str = ""
    error: BaseException | None = None


class PipelineObserver:
    """Receives pipeline events. The base implementation discards them."""

    def emit(self, event: PipelineEvent) -> None:
        return None


class LoggingObserver(PipelineObserver):
    """Writes pipeline events to the standard logging hierarchy."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def emit(self, event: PipelineEvent) -> None:
        if event.outcome == OK:
            level = logging.DEBUG
        elif event.outcome == FALLBACK:
            level = logging.WARNING
        else:
            level = logging.ERROR

        exc_info = None
        if event.error is not None:
            exc_info = (type(event.error), event.error, event.error.__traceback__)

        self.log.log(
            level,
            "stage=%s outcome=%s activity=%s %s",
            event.stage,
            event.outcome,
            event.activity_id or "-",
            event.detail,
            exc_info=exc_info,
        )


def notify(observer: PipelineObserver, event: PipelineEvent) -> None:
    """Deliver ``event``; an observer error is logged, never propagated."""

    try:
        observer.emit(event)
    except Exception:
        logger.exception("Pipeline observer failed on %s/%s", event.stage, event.outcome)
