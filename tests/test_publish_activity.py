"""Tests for the activity publishing script."""
from __future__ import annotations

import json

from fitness_advisor.services.activity_queue import ActivityEventQueue
from scripts import publish_activity


def test_publish_files_enqueues_single_and_list_documents(tmp_path, session_factory):
    single = tmp_path / "single.json"
    single.write_text(
        json.dumps({"id": "act-1", "userId": "user-1", "type": "RUNNING", "duration": 30, "caloriesBurned": 250}),
        encoding="utf-8",
    )
    batch = tmp_path / "batch.json"
    batch.write_text(
        json.dumps(
            [
                {"id": "act-2", "userId": "user-1", "type": "CYCLING", "duration": 60, "caloriesBurned": 500},
                {"id": "act-3", "userId": "user-1", "type": "YOGA", "duration": 45, "caloriesBurned": 150},
            ]
        ),
        encoding="utf-8",
    )
    queue = ActivityEventQueue(session_factory, partitions=1)

    summary = publish_activity.publish_files(queue, [single, batch])

    assert summary == {"published": 3, "skipped": 0}
    assert [message.payload["id"] for message in queue.poll(0, limit=10)] == ["act-1", "act-2", "act-3"]


def test_publish_files_skips_invalid_documents(tmp_path, session_factory):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps(["act-9", 42]), encoding="utf-8")
    missing = tmp_path / "missing.json"
    queue = ActivityEventQueue(session_factory, partitions=1)

    summary = publish_activity.publish_files(queue, [broken, invalid, missing])

    assert summary == {"published": 0, "skipped": 3}
    assert queue.pending_count() == 0
