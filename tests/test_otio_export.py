"""Tests for the OpenTimelineIO export."""

import logging
from pathlib import Path

import opentimelineio as otio
import pytest

from reelwright.config import RenderConfig
from reelwright.export.otio_export import (
    METADATA_KEY,
    SLIDE_GENERATOR,
    TRANSITION_GENERATOR,
    OtioExporter,
)
from reelwright.timeline.schemas import Timeline

from conftest import TimelineFactory

CONFIG = RenderConfig(fps=30)


@pytest.fixture
def timeline(make_timeline: TimelineFactory) -> Timeline:
    """A capture with an opening slide, a narrated click and a transition."""
    return make_timeline(
        [
            {
                "type": "scene",
                "timestamp_ms": 0,
                "title": "Checkout",
                "description": "Buying a thing",
                "slide": {"duration": 1000, "brand_color": "#112233"},
            },
            {
                "type": "narration",
                "timestamp_ms": 500,
                "text": "Click buy",
                "audio_file": "audio/narration-0.wav",
                "audio_duration_ms": 700,
            },
            {
                "type": "action",
                "timestamp_ms": 1500,
                "action": "click",
                "selector": "#buy",
                "duration_ms": 200,
                "bounding_box": None,
                "settled_snapshot": "frames/frame-00002.png",
            },
            {"type": "transition", "timestamp_ms": 2000, "transition": "cube", "duration_ms": 500},
        ],
        video_duration_ms=3000,
    )


def _seconds(time: otio.opentime.RationalTime) -> float:
    return time.to_seconds()


def test_video_track_tiles_the_output(timeline: Timeline) -> None:
    """Clips follow render order and add up to the output duration."""
    built = OtioExporter().build(timeline, CONFIG)
    video = built.video_tracks()[0]

    assert [clip.name for clip in video] == [
        "slide_ev-001",
        "capture_1",
        "transition_cube_3",
        "capture_3",
    ]
    assert _seconds(video.duration()) == pytest.approx(4.5)
    assert built.name == "checkout_scenario"


def test_captured_spans_reference_the_recording(timeline: Timeline) -> None:
    """Captured clips point at the video with the source range they cover."""
    video = OtioExporter().build(timeline, CONFIG).video_tracks()[0]
    first, second = video[1], video[3]

    assert first.media_reference.target_url == "capture.webm"
    assert _seconds(first.source_range.start_time) == pytest.approx(0)
    assert _seconds(first.source_range.duration) == pytest.approx(2)
    assert _seconds(second.source_range.start_time) == pytest.approx(2)
    assert first.metadata[METADATA_KEY]["output_start_ms"] == 1000


def test_slides_and_transitions_are_generator_clips(timeline: Timeline) -> None:
    """Generator parameters carry everything needed to draw the insert."""
    video = OtioExporter().build(timeline, CONFIG).video_tracks()[0]
    slide, transition = video[0], video[2]

    assert slide.media_reference.generator_kind == SLIDE_GENERATOR
    assert slide.media_reference.parameters["title"] == "Checkout"
    assert slide.media_reference.parameters["brand_color"] == "#112233"
    assert slide.media_reference.parameters["text_color"] == "#FFFFFF"
    assert _seconds(slide.source_range.duration) == pytest.approx(1)

    assert transition.media_reference.generator_kind == TRANSITION_GENERATOR
    parameters = transition.media_reference.parameters
    assert parameters["before_snapshot"] == "frames/frame-00002.png"
    assert parameters["has_content_before"]
    assert not parameters["has_content_after"]
    assert transition.metadata[METADATA_KEY]["output_start_ms"] == 3000


def test_narration_track_places_audio_at_output_time(timeline: Timeline) -> None:
    """Narration clips are shifted past the slide and separated by gaps."""
    built = OtioExporter().build(timeline, CONFIG)
    (audio,) = built.audio_tracks()

    gap, clip = audio[0], audio[1]
    assert isinstance(gap, otio.schema.Gap)
    assert _seconds(gap.source_range.duration) == pytest.approx(1.5)
    assert clip.name == "narration_ev-002"
    assert Path(clip.media_reference.target_url).is_absolute()
    assert _seconds(clip.source_range.duration) == pytest.approx(0.7)


def test_no_narration_track_without_audio(make_timeline: TimelineFactory) -> None:
    """Narration that was never synthesized is not exported."""
    timeline = make_timeline([{"type": "narration", "timestamp_ms": 0, "text": "Hi"}])

    built = OtioExporter().build(timeline, CONFIG)

    assert built.audio_tracks() == []
    assert [clip.name for clip in built.video_tracks()[0]] == ["capture_0"]


def test_frame_manifest_captures_reference_frame_directory(
    make_timeline: TimelineFactory,
) -> None:
    """Without a video file, captured clips point at the frames directory."""
    timeline = make_timeline(
        [],
        video_file=None,
        frame_manifest=[{"type": "frame", "timestamp_ms": 0, "file": "frames/frame-00001.png"}],
        video_duration_ms=1000,
    )

    video = OtioExporter().build(timeline, CONFIG).video_tracks()[0]

    assert video[0].media_reference.target_url == "frames"


def test_export_writes_readable_file(timeline: Timeline, tmp_path: Path) -> None:
    """The written file reads back with the same tracks."""
    output = OtioExporter().export(timeline, tmp_path / "out" / "checkout.otio", CONFIG)

    loaded = otio.adapters.read_from_file(str(output))

    assert output.exists()
    assert len(loaded.tracks) == 2
    assert _seconds(loaded.video_tracks()[0].duration()) == pytest.approx(4.5)
    slide = loaded.video_tracks()[0][0]
    assert slide.metadata[METADATA_KEY]["title"] == "Checkout"


def test_overlapping_narration_moves_to_another_track(
    make_timeline: TimelineFactory, caplog: pytest.LogCaptureFixture
) -> None:
    """Narration that starts before the previous clip ends gets its own track."""
    timeline = make_timeline(
        [
            {
                "type": "narration",
                "timestamp_ms": 0,
                "text": "First",
                "audio_file": "audio/narration-0.wav",
                "audio_duration_ms": 1000,
            },
            {
                "type": "narration",
                "timestamp_ms": 500,
                "text": "Second",
                "audio_file": "audio/narration-1.wav",
                "audio_duration_ms": 700,
            },
        ],
        video_duration_ms=3000,
    )

    with caplog.at_level(logging.WARNING, logger="reelwright.export.otio_export"):
        built = OtioExporter().build(timeline, CONFIG)

    first, second = built.audio_tracks()
    assert [clip.name for clip in first] == ["narration_ev-001"]
    assert second.name == "Narration 2"
    gap, clip = second[0], second[1]
    assert isinstance(gap, otio.schema.Gap)
    assert _seconds(gap.source_range.duration) == pytest.approx(0.5)
    assert clip.name == "narration_ev-002"
    assert "overlaps earlier audio" in caplog.text
