"""Shared factories for building timelines in tests."""

from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import pytest

from reelwright.timeline.schemas import Timeline

TimelineFactory = Callable[..., Timeline]


def build_metadata(
    *,
    video_file: str | None = "capture.webm",
    frame_manifest: Sequence[Mapping[str, Any]] | None = None,
    transition_markers: Sequence[Mapping[str, Any]] = (),
    video_duration_ms: float = 10_000,
) -> dict[str, Any]:
    """Return a valid metadata mapping."""
    return {
        "test_file": "checkout.spec.ts",
        "scenario_file": "checkout_scenario.py",
        "recorded_at": datetime(2026, 1, 1, tzinfo=UTC),
        "viewport": {"width": 1280, "height": 720},
        "video_duration_ms": video_duration_ms,
        "video_file": video_file,
        "frame_manifest": frame_manifest,
        "transition_markers": list(transition_markers),
    }


def build_timeline(events: Sequence[Mapping[str, Any]], **metadata: Any) -> Timeline:
    """Validate a timeline, numbering events that carry no id."""
    numbered = [
        {"id": f"ev-{index + 1:03d}", **event} for index, event in enumerate(events)
    ]
    return Timeline.model_validate({"metadata": build_metadata(**metadata), "events": numbered})


@pytest.fixture
def make_timeline() -> TimelineFactory:
    """Factory building a validated timeline from event mappings."""
    return build_timeline


@pytest.fixture
def metadata() -> dict[str, Any]:
    """Valid capture metadata backed by a single video file."""
    return build_metadata()
