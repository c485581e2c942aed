"""Publish activity JSON documents to the recommendation queue."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from fitness_advisor.database import run_migrations
from fitness_advisor.logging_config import configure_logging
from fitness_advisor.models.schemas import Activity
from fitness_advisor.services.activity_queue import ActivityEventQueue


logger = logging.getLogger("scripts.publish_activity")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish activities for recommendation processing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Publish a single activity
  python scripts/publish_activity.py activity.json

  # Publish a JSON array of activities
  python scripts/publish_activity.py week.json
        """
    )
    parser.add_argument("paths", nargs="+", type=Path, help="JSON file holding an activity or a list of activities")
    return parser.parse_args(argv)


def load_activities(path: Path) -> list[Activity]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    documents = data if isinstance(data, list) else [data]
    return [Activity.model_validate(document) for document in documents]


def publish_files(queue: ActivityEventQueue, paths: list[Path]) -> dict[str, int]:
    """Publish every activity found in ``paths``; returns published/skipped counts."""

    summary = {"published": 0, "skipped": 0}
    for path in paths:
        try:
            activities = load_activities(path)
        except (OSError, json.JSONDecodeError, ValidationError):
            logger.exception("Skipping %s: not a valid activity document", path)
            summary["skipped"] += 1
            continue

        for activity in activities:
            queue.publish(activity)
            summary["published"] += 1
    return summary


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()
    run_migrations()

    summary = publish_files(ActivityEventQueue(), args.paths)
    print(f"Published {summary['published']} activit{'y' if summary['published'] == 1 else 'ies'}, skipped {summary['skipped']} file(s)")
    return 0 if summary["skipped"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
