"""Tests for timeline document validation and persistence."""

import json
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from reelwright.common.errors import StructuralError, TimelineValidationError
from reelwright.timeline.persistence import (
    TIMELINE_FILENAME,
    dump_timeline,
    load_timeline,
    parse_timeline,
    save_timeline,
)
from reelwright.timeline.schemas import (
    BoundingBox,
    HoldEntry,
    Timeline,
    TimelineMetadata,
)

from conftest import TimelineFactory, build_metadata


def _document(events: list[dict[str, Any]], **metadata: Any) -> str:
    meta = build_metadata(**metadata)
    meta["recorded_at"] = meta["recorded_at"].isoformat()
    return json.dumps({"version": 1, "metadata": meta, "events": events})


def test_bounding_box_center_is_rounded() -> None:
    """Element centers land on whole pixels."""
    box = BoundingBox(x=10, y=10, width=15, height=5)

    assert (box.center.x, box.center.y) == (18, 12)


def test_empty_manifest_is_rejected() -> None:
    """A present manifest must have at least one entry."""
    with pytest.raises(ValidationError, match="frameManifest must not be empty"):
        TimelineMetadata.model_validate(build_metadata(video_file=None, frame_manifest=[]))


def test_metadata_requires_a_visual_source() -> None:
    """Either a frame manifest or a video file is required."""
    with pytest.raises(ValidationError, match="either frameManifest or videoFile"):
        TimelineMetadata.model_validate(build_metadata(video_file=None))


def test_marker_beyond_manifest_is_structural() -> None:
    """Markers must address an existing manifest entry."""
    with pytest.raises(StructuralError, match="manifest entry 3"):
        TimelineMetadata.model_validate(
            build_metadata(
                video_file=None,
                frame_manifest=[{"type": "frame", "timestamp_ms": 0, "file": "a.png"}],
                transition_markers=[
                    {"after_entry_index": 3, "duration_frames": 10, "transition": "fade"}
                ],
            )
        )


def test_hold_entry_counts_its_frames() -> None:
    """Hold entries expand to their repeat count."""
    hold = HoldEntry(timestamp_ms=0, file="a.png", count=4)

    assert hold.frame_count == 4


def test_parse_rejects_unknown_event_type() -> None:
    """The event union is closed."""
    document = _document([{"id": "e1", "timestampMs": 0, "type": "teleport"}])

    with pytest.raises(TimelineValidationError) as exc_info:
        parse_timeline(document)

    assert exc_info.value.issues[0]["type"] == "union_tag_invalid"


def test_parse_rejects_unknown_version() -> None:
    """Only version 1 documents are accepted."""
    document = json.loads(_document([]))
    document["version"] = 2

    with pytest.raises(TimelineValidationError, match="version"):
        parse_timeline(json.dumps(document))


def test_parse_accepts_camel_case_document() -> None:
    """Documents use camelCase keys."""
    document = _document(
        [
            {
                "id": "e1",
                "timestampMs": 0,
                "type": "cursor_target",
                "fromX": 0,
                "fromY": 0,
                "toX": 10,
                "toY": 10,
                "moveDurationMs": 300,
                "easing": "bezier",
            }
        ]
    )

    timeline = parse_timeline(document)

    assert timeline.events[0].move_duration_ms == 300


def test_save_and_load_round_trip(tmp_path: Path, make_timeline: TimelineFactory) -> None:
    """A saved timeline loads back equal and keeps camelCase keys on disk."""
    timeline = make_timeline(
        [
            {"type": "scene", "timestamp_ms": 0, "title": "Intro", "slide": {"duration": 1500}},
            {
                "type": "action",
                "timestamp_ms": 100,
                "action": "click",
                "selector": "#go",
                "duration_ms": 200,
                "bounding_box": {"x": 1, "y": 2, "width": 3, "height": 4},
                "settled_at_ms": 450,
                "settled_snapshot": "frames/frame-00002.png",
            },
            {"type": "transition", "timestamp_ms": 500, "transition": "cube", "duration_ms": 600},
        ],
        video_file=None,
        frame_manifest=[
            {"type": "frame", "timestamp_ms": 0, "file": "frames/frame-00001.png"},
            {"type": "hold", "timestamp_ms": 100, "file": "frames/frame-00002.png", "count": 3},
        ],
        transition_markers=[
            {"after_entry_index": 0, "duration_frames": 12, "transition": "wipe"},
        ],
    )

    path = save_timeline(timeline, tmp_path)
    raw = json.loads(path.read_text(encoding="utf-8"))

    assert path == tmp_path / TIMELINE_FILENAME
    assert raw["version"] == 1
    assert "frameManifest" in raw["metadata"]
    assert raw["events"][1]["settledAtMs"] == 450
    assert raw["events"][0]["slide"] == {"duration": 1500}
    assert load_timeline(path) == timeline


def test_save_to_explicit_file_creates_parents(
    tmp_path: Path, make_timeline: TimelineFactory
) -> None:
    """A file path is written as given."""
    timeline = make_timeline([{"type": "scene", "timestamp_ms": 0, "title": "Intro"}])
    target = tmp_path / "nested" / "demo.json"

    save_timeline(timeline, target)

    assert target.read_text(encoding="utf-8") == dump_timeline(timeline)


def test_timeline_is_immutable(make_timeline: TimelineFactory) -> None:
    """Finalized timelines cannot be modified in place."""
    timeline = make_timeline([{"type": "scene", "timestamp_ms": 0, "title": "Intro"}])

    with pytest.raises(ValidationError):
        timeline.events = ()  # type: ignore[misc]

    assert isinstance(timeline, Timeline)
