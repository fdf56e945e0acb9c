"""Narration preprocessing and audio write-back.

Narration audio is synthesized before recording so capture can wait exactly
as long as each line takes to speak. The scenario is dry-run once against a
no-op driver to learn its narration lines; recording then consumes the audio
in the same order.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from pathlib import Path
from typing import Protocol

from reelwright.capture.driver import NoopDriver
from reelwright.capture.helpers import ScenarioHelpers
from reelwright.capture.schemas import NarrationAudio
from reelwright.common.errors import TimingError
from reelwright.timeline.clock import VirtualClock
from reelwright.timeline.collector import TimelineCollector
from reelwright.timeline.schemas import NarrationEvent, Timeline, WaitEvent, WaitReason

logger = logging.getLogger(__name__)

ScenarioFn = Callable[[ScenarioHelpers], Awaitable[None]]


class NarrationProvider(Protocol):
    """Text-to-speech backend."""

    extension: str

    async def synthesize(self, text: str, output_path: Path) -> NarrationAudio:
        """Write speech for ``text`` to ``output_path`` and describe it."""
        ...


async def extract_narrations(scenario: ScenarioFn) -> list[str]:
    """Dry-run ``scenario`` and return its narration lines in order."""
    collector = TimelineCollector(VirtualClock())
    collector.start()
    helpers = ScenarioHelpers(NoopDriver(), collector, settle_ms=0)
    await scenario(helpers)
    logger.debug("Dry run found %d narration lines", len(helpers.narration_texts))
    return list(helpers.narration_texts)


async def pregenerate_narrations(
    texts: Sequence[str],
    provider: NarrationProvider,
    directory: Path,
) -> list[NarrationAudio]:
    """Synthesize every narration line concurrently.

    Args:
        texts: Narration lines in scenario order.
        provider: Speech backend.
        directory: Where audio files are written.

    Returns:
        One result per line, in the same order as ``texts``.
    """
    directory.mkdir(parents=True, exist_ok=True)
    results = await asyncio.gather(
        *(
            provider.synthesize(text, directory / f"narration-{index}.{provider.extension}")
            for index, text in enumerate(texts)
        )
    )
    logger.info("Pregenerated %d narration clips in %s", len(results), directory)
    return list(results)


def validate_narration_count(pregenerated: int, consumed: int) -> None:
    """Check that recording spoke exactly the lines that were pregenerated.

    Raises:
        TimingError: If the counts differ.
    """
    if pregenerated != consumed:
        msg = (
            f"Scenario produced {pregenerated} narrations during preprocessing but "
            f"{consumed} during recording. Conditional narration is not supported."
        )
        raise TimingError(msg)


def apply_narration_audio(timeline: Timeline, results: Mapping[str, NarrationAudio]) -> Timeline:
    """Attach audio to narration events and stretch their sync waits.

    Args:
        timeline: The captured timeline.
        results: Audio keyed by narration event id.

    Returns:
        A new timeline. A ``narration_sync`` wait directly after a narration
        is lengthened to the audio duration when it was shorter.
    """
    events = list(timeline.events)
    for index, event in enumerate(events):
        if not isinstance(event, NarrationEvent) or event.id not in results:
            continue
        audio = results[event.id]
        events[index] = event.model_copy(
            update={"audio_file": audio.audio_file, "audio_duration_ms": audio.duration_ms}
        )

        following = events[index + 1] if index + 1 < len(events) else None
        if (
            isinstance(following, WaitEvent)
            and following.reason is WaitReason.NARRATION_SYNC
            and following.duration_ms < audio.duration_ms
        ):
            events[index + 1] = following.model_copy(update={"duration_ms": audio.duration_ms})

    return timeline.model_copy(update={"events": tuple(events)})


async def synthesize_timeline_narration(
    timeline: Timeline,
    provider: NarrationProvider,
    directory: Path,
) -> Timeline:
    """Synthesize audio for every narration event of a finished timeline."""
    narrations = [event for event in timeline.events if isinstance(event, NarrationEvent)]
    directory.mkdir(parents=True, exist_ok=True)
    clips = await asyncio.gather(
        *(
            provider.synthesize(
                narration.text, directory / f"narration-{narration.id}.{provider.extension}"
            )
            for narration in narrations
        )
    )
    return apply_narration_audio(
        timeline, {narration.id: clip for narration, clip in zip(narrations, clips, strict=True)}
    )
