"""Tests for narration preprocessing and audio write-back."""

import asyncio
from pathlib import Path

import pytest

from reelwright.capture.helpers import ScenarioHelpers
from reelwright.capture.narration import (
    apply_narration_audio,
    extract_narrations,
    pregenerate_narrations,
    synthesize_timeline_narration,
    validate_narration_count,
)
from reelwright.capture.schemas import NarrationAudio
from reelwright.common.errors import TimingError
from reelwright.timeline.schemas import NarrationEvent, WaitEvent

from conftest import TimelineFactory


class FakeProvider:
    """Writes the text as the audio and takes 100ms per word."""

    extension = "wav"

    def __init__(self) -> None:
        self.requests: list[str] = []

    async def synthesize(self, text: str, output_path: Path) -> NarrationAudio:
        self.requests.append(text)
        output_path.write_text(text, encoding="utf-8")
        return NarrationAudio(
            text=text, audio_file=str(output_path), duration_ms=100 * len(text.split())
        )


async def tour(helpers: ScenarioHelpers) -> None:
    await helpers.navigate("https://app.test", narration="Open the app")
    await helpers.click("#reports", narration="Go to reports")
    await helpers.wait(100)
    await helpers.narrate("That is all")


def _narrated_timeline(make_timeline: TimelineFactory, sync_ms: float = 800):
    return make_timeline(
        [
            {"type": "narration", "timestamp_ms": 0, "text": "Welcome to the demo"},
            {"type": "wait", "timestamp_ms": 0, "duration_ms": sync_ms, "reason": "narration_sync"},
            {"type": "wait", "timestamp_ms": 800, "duration_ms": 300, "reason": "pacing"},
            {"type": "narration", "timestamp_ms": 1100, "text": "Bye"},
        ]
    )


def test_extract_narrations_dry_runs_scenario() -> None:
    """Every narration line is found in order without a real driver."""
    assert asyncio.run(extract_narrations(tour)) == [
        "Open the app",
        "Go to reports",
        "That is all",
    ]


def test_validate_narration_count() -> None:
    """Matching counts pass and differing counts fail."""
    validate_narration_count(3, 3)

    with pytest.raises(TimingError, match="3 narrations during preprocessing but 2"):
        validate_narration_count(3, 2)


def test_pregenerate_narrations_keeps_order(tmp_path: Path) -> None:
    """Results line up with the input texts and files are numbered."""
    provider = FakeProvider()

    results = asyncio.run(
        pregenerate_narrations(["Open the app", "Done"], provider, tmp_path / "audio")
    )

    assert [result.text for result in results] == ["Open the app", "Done"]
    assert [Path(result.audio_file).name for result in results] == [
        "narration-0.wav",
        "narration-1.wav",
    ]
    assert [result.duration_ms for result in results] == [300, 100]
    assert (tmp_path / "audio" / "narration-1.wav").read_text(encoding="utf-8") == "Done"


def test_apply_narration_audio_stretches_sync_wait(make_timeline: TimelineFactory) -> None:
    """A sync wait shorter than the audio grows to the audio length."""
    timeline = _narrated_timeline(make_timeline)
    audio = NarrationAudio(text="Welcome to the demo", audio_file="a.wav", duration_ms=1500)

    updated = apply_narration_audio(timeline, {"ev-001": audio})

    narration, sync, pacing = updated.events[:3]
    assert isinstance(narration, NarrationEvent)
    assert (narration.audio_file, narration.audio_duration_ms) == ("a.wav", 1500)
    assert isinstance(sync, WaitEvent)
    assert sync.duration_ms == 1500
    assert pacing.duration_ms == 300
    assert timeline.events[1].duration_ms == 800


def test_apply_narration_audio_never_shrinks_wait(make_timeline: TimelineFactory) -> None:
    """Waits longer than the audio are left alone."""
    timeline = _narrated_timeline(make_timeline, sync_ms=2000)
    audio = NarrationAudio(text="Welcome to the demo", audio_file="a.wav", duration_ms=1500)

    updated = apply_narration_audio(timeline, {"ev-001": audio})

    assert updated.events[1].duration_ms == 2000


def test_apply_narration_audio_ignores_unknown_ids(make_timeline: TimelineFactory) -> None:
    """Narrations without a result keep no audio."""
    timeline = _narrated_timeline(make_timeline)

    updated = apply_narration_audio(timeline, {})

    assert updated.events == timeline.events


def test_synthesize_timeline_narration(make_timeline: TimelineFactory, tmp_path: Path) -> None:
    """Every narration event gets a clip named after its id."""
    provider = FakeProvider()
    timeline = _narrated_timeline(make_timeline)

    updated = asyncio.run(synthesize_timeline_narration(timeline, provider, tmp_path))

    assert sorted(provider.requests) == ["Bye", "Welcome to the demo"]
    first, last = updated.events[0], updated.events[3]
    assert Path(first.audio_file).name == "narration-ev-001.wav"
    assert first.audio_duration_ms == 400
    assert last.audio_duration_ms == 100
    # 400ms of audio fits inside the existing 800ms wait
    assert updated.events[1].duration_ms == 800
