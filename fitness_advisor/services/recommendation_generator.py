"""Generate a recommendation for a single activity."""
from __future__ import annotations

import logging

from fitness_advisor.models.schemas import Activity, Recommendation
from fitness_advisor.services import pipeline_events as events
from fitness_advisor.services.model_client import ModelClient, ModelClientError
from fitness_advisor.services.pipeline_events import (
    LoggingObserver,
    PipelineEvent,
    PipelineObserver,
)
from fitness_advisor.services.prompt_builder import build_prompt
from fitness_advisor.services.response_reducer import ResponseReducer


logger = logging.getLogger(__name__)


class RecommendationGenerator:
    """Prompt the model about an activity and reduce its reply.

    ``generate`` never raises: model failures and unusable replies both yield
    the default recommendation.
    """

    def __init__(
        self,
        client: ModelClient | None = None,
        reducer: ResponseReducer | None = None,
        observer: PipelineObserver | None = None,
    ) -> None:
        self.observer = observer or LoggingObserver()
        self._client = client
        self.reducer = reducer or ResponseReducer(self.observer)

    @property
    def client(self) -> ModelClient:
        if self._client is None:
            self._client = ModelClient()
        return self._client

    def generate(self, activity: Activity) -> Recommendation:
        logger.info(
            "Generating recommendation | activity=%s user=%s type=%s",
            activity.id,
            activity.user_id,
            activity.type_label or "-",
        )
        raw = self._invoke(activity)
        recommendation = self.reducer.reduce(activity, raw)
        logger.info(
            "Recommendation ready | activity=%s improvements=%d suggestions=%d safety=%d",
            activity.id,
            len(recommendation.improvements),
            len(recommendation.suggestions),
            len(recommendation.safety),
        )
        return recommendation

    def _invoke(self, activity: Activity) -> str | None:
        """Return the raw model reply, or None when the call failed."""

        try:
            raw = self.client.invoke(build_prompt(activity))
        except ModelClientError as err:
            self._report_failure(activity, err, str(err))
            return None
        except Exception as err:
            self._report_failure(activity, err, f"unexpected {type(err).__name__}: {err}")
            return None

        self._report(PipelineEvent(stage=events.MODEL_CALL, outcome=events.OK, activity_id=activity.id))
        return raw

    def _report_failure(self, activity: Activity, err: Exception, detail: str) -> None:
        self._report(
            PipelineEvent(
                stage=events.MODEL_CALL,
                outcome=events.FAILED,
                activity_id=activity.id,
                detail=detail,
                error=err,
            )
        )

    def _report(self, event: PipelineEvent) -> None:
        events.notify(self.observer, event)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
