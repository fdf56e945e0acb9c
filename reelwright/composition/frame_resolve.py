"""Resolve output frame indices against a frame manifest with transitions.

For a transition marker after manifest entry ``e`` whose last expanded source
frame is ``S``:

- source frames up to ``S`` map 1:1 onto output (after earlier offsets);
- the next ``duration_frames`` output frames play the transition;
- ``consumed_frames`` source frames after ``S`` are skipped;
- later source frames resume 1:1 with the accumulated offset.
"""

import logging
from collections.abc import Sequence
from itertools import accumulate
from typing import TypeVar

from reelwright.common.errors import StructuralError
from reelwright.composition.schemas import (
    FrameResolution,
    SourceFrameResolution,
    TransitionFrameResolution,
)
from reelwright.timeline.schemas import ManifestEntry, TimelineEvent, TransitionMarker

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=TimelineEvent)


class FrameResolver:
    """Maps output frames to captured assets or in-progress transitions."""

    def __init__(
        self,
        manifest: Sequence[ManifestEntry],
        markers: Sequence[TransitionMarker] = (),
    ) -> None:
        """Expand the manifest and order the markers.

        Args:
            manifest: Captured frames and holds, in capture order.
            markers: Transition markers in any order.

        Raises:
            StructuralError: If the manifest is empty or a marker addresses a
                missing entry.
        """
        if not manifest:
            msg = "Empty frame manifest"
            raise StructuralError(msg)
        for marker in markers:
            if marker.after_entry_index >= len(manifest):
                msg = (
                    f"Transition marker references manifest entry {marker.after_entry_index} "
                    f"but the manifest has {len(manifest)} entries"
                )
                raise StructuralError(msg)

        self.manifest: tuple[ManifestEntry, ...] = tuple(manifest)
        self.markers: tuple[TransitionMarker, ...] = tuple(
            sorted(markers, key=lambda marker: marker.after_entry_index)
        )
        # Expanded source frame index of each entry's first frame
        self._entry_starts: tuple[int, ...] = (
            0,
            *accumulate(entry.frame_count for entry in self.manifest),
        )
        self.frames: tuple[str, ...] = tuple(
            entry.file for entry in self.manifest for _ in range(entry.frame_count)
        )
        logger.debug(
            "Expanded %d manifest entries to %d source frames, %d transitions",
            len(self.manifest),
            len(self.frames),
            len(self.markers),
        )

    @property
    def expanded_frame_count(self) -> int:
        """Number of source frames once holds are expanded."""
        return len(self.frames)

    def source_frame_image(self, source_frame: int) -> str:
        """Return the asset for an expanded source frame, clamped to the range."""
        clamped = max(0, min(source_frame, len(self.frames) - 1))
        return self.frames[clamped]

    def last_source_frame_of_entry(self, entry_index: int) -> int:
        """Return the last expanded source frame of a manifest entry."""
        return self._entry_starts[entry_index + 1] - 1

    def total_output_frames(self) -> int:
        """Number of output frames after transitions are inserted."""
        inserted = sum(marker.duration_frames for marker in self.markers)
        consumed = sum(marker.consumed_frames for marker in self.markers)
        return self.expanded_frame_count + inserted - consumed

    def resolve(self, output_frame: int) -> FrameResolution:
        """Resolve what to show at an output frame."""
        offset = 0

        for marker in self.markers:
            source_s = self.last_source_frame_of_entry(marker.after_entry_index)
            output_s = source_s + offset
            if output_frame <= output_s:
                break

            window_start = output_s + 1
            window_end = output_s + marker.duration_frames
            if output_frame <= window_end:
                after_index = marker.after_entry_index + 1
                after_entry = self.manifest[min(after_index, len(self.manifest) - 1)]
                return TransitionFrameResolution(
                    before_file=marker.before_file or self.source_frame_image(source_s),
                    after_file=marker.after_file or after_entry.file,
                    progress=(output_frame - window_start + 1) / marker.duration_frames,
                    transition=marker.transition,
                )

            offset += marker.duration_frames - marker.consumed_frames

        source_frame = max(0, min(output_frame - offset, self.expanded_frame_count - 1))
        return SourceFrameResolution(file=self.frames[source_frame], source_frame=source_frame)

    def remap_events_for_output(self, events: Sequence[EventT], fps: float = 30) -> list[EventT]:
        """Shift events captured after each marker by its net inserted time."""
        frame_ms = 1000 / fps
        remapped: list[EventT] = []
        for event in events:
            offset_ms = 0.0
            for marker in self.markers:
                marker_ms = self.last_source_frame_of_entry(marker.after_entry_index) * frame_ms
                if event.timestamp_ms > marker_ms:
                    offset_ms += (marker.duration_frames - marker.consumed_frames) * frame_ms
            if offset_ms == 0:
                remapped.append(event)
            else:
                remapped.append(
                    event.model_copy(update={"timestamp_ms": event.timestamp_ms + offset_ms})
                )
        return remapped


def expanded_frame_count(manifest: Sequence[ManifestEntry]) -> int:
    """Total source frames once holds are expanded."""
    return sum(entry.frame_count for entry in manifest)


def total_output_frames(
    manifest: Sequence[ManifestEntry],
    markers: Sequence[TransitionMarker],
) -> int:
    """Total output frames for a manifest with transition markers."""
    return FrameResolver(manifest, markers).total_output_frames()


def resolve_output_frame(
    output_frame: int,
    manifest: Sequence[ManifestEntry],
    markers: Sequence[TransitionMarker] = (),
) -> FrameResolution:
    """Resolve one output frame without keeping a resolver around."""
    return FrameResolver(manifest, markers).resolve(output_frame)
