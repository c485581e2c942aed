"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ["LLM_API_KEY"] = os.environ.get("LLM_API_KEY") or "test-llm-key"
os.environ["DATABASE_URL"] = os.environ.get("DATABASE_URL") or "sqlite://"

from fitness_advisor.logging_config import configure_logging

configure_logging()

from fitness_advisor.database import Base
from fitness_advisor.models import database_models  # noqa: F401  # Register tables on Base.metadata.
from fitness_advisor.models.schemas import Activity, ActivityType
from fitness_advisor.services.pipeline_events import PipelineEvent, PipelineObserver

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class RecordingObserver(PipelineObserver):
    """Collects pipeline events for assertions."""

    def __init__(self) -> None:
        self.events: list[PipelineEvent] = []

    def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def stages(self, outcome: str) -> list[str]:
        return [event.stage for event in self.events if event.outcome == outcome]


def make_envelope(text: str) -> str:
    """Wrap model answer text the way the generateContent endpoint does."""

    return json.dumps(
        {
            "candidates": [
                {
                    "content": {"parts": [{"text": text}], "role": "model"},
                    "finishReason": "STOP",
                }
            ]
        }
    )


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def envelope() -> Callable[[str], str]:
    return make_envelope


@pytest.fixture
def activity() -> Activity:
    return Activity(
        id="act-1",
        user_id="user-1",
        type=ActivityType.RUNNING,
        duration=45,
        calories_burned=420,
        start_time=datetime(2026, 10, 18, 7, 30),
        additional_metrics={"distanceKm": 8.2, "avgHeartRate": 152},
    )


@pytest.fixture
def session_factory() -> Iterator[sessionmaker[Session]]:
    """Provide sessions bound to a fresh in-memory database."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture(scope="session")
def model_answer_fixture() -> dict[str, Any]:
    """Return a complete structured answer as the model is asked to produce it."""

    with (FIXTURES_DIR / "model_answer.json").open("r", encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture(scope="session")
def gemini_response_fixture() -> str:
    """Return a raw generateContent response body with a fenced answer."""

    return (FIXTURES_DIR / "gemini_response.json").read_text(encoding="utf-8")
