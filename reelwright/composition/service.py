"""Composition service: everything a renderer needs for each output frame."""

import logging
import math
from itertools import accumulate

from reelwright.composition.cursor_path import get_cursor_position, precompute_cursor_paths
from reelwright.composition.frame_lookup import closest_frame_index
from reelwright.composition.frame_resolve import FrameResolver
from reelwright.composition.schemas import (
    ActiveTransition,
    FrameComposition,
    FrameResolution,
    OutputSegments,
    SlideSegment,
    SourceFrameResolution,
)
from reelwright.composition.time_remap import (
    InsertionSchedule,
    compute_output_segments,
    ms_to_frames,
)
from reelwright.composition.transition_styles import BACKDROP_COLOR, get_transition_styles
from reelwright.config import RenderConfig
from reelwright.timeline.schemas import (
    CursorTargetEvent,
    NarrationEvent,
    Timeline,
    TimelineEvent,
)

logger = logging.getLogger(__name__)


class CompositionService:
    """Precomputes a timeline's derived schedule and composes output frames.

    All derived data is built once in the constructor and never mutated, so
    ``compose_frame`` can be called for frames in any order, from any number
    of threads.
    """

    def __init__(self, timeline: Timeline, config: RenderConfig | None = None) -> None:
        """Derive schedule, segments, cursor paths and frame resolution.

        Args:
            timeline: A finalized timeline.
            config: Render configuration; defaults are used when omitted.

        Raises:
            StructuralError: If the frame manifest cannot be resolved.
        """
        self.timeline = timeline
        self.config = config or RenderConfig()
        metadata = timeline.metadata

        events: list[TimelineEvent] = list(timeline.events)
        source_duration_ms = metadata.video_duration_ms

        self.resolver: FrameResolver | None = None
        if metadata.frame_manifest and metadata.transition_markers:
            # Markers lengthen the captured stream itself; events follow suit
            self.resolver = FrameResolver(metadata.frame_manifest, metadata.transition_markers)
            events = self.resolver.remap_events_for_output(events, self.config.fps)
            source_duration_ms = max(
                source_duration_ms,
                self.resolver.total_output_frames() * self.config.frame_ms,
            )

        self.schedule = InsertionSchedule.from_events(
            events, self.config.default_slide_duration_ms
        )
        self.segments: OutputSegments = compute_output_segments(
            events,
            default_slide_duration_ms=self.config.default_slide_duration_ms,
            slide_defaults=self.config.slide_branding,
        )
        self.output_duration_ms = self.schedule.output_duration_ms(source_duration_ms)

        remapped = self.schedule.remap_events(events)
        self.cursor_paths = precompute_cursor_paths(
            [event for event in remapped if isinstance(event, CursorTargetEvent)],
            self.config.cursor_waypoint_count,
        )
        self.narrations: tuple[NarrationEvent, ...] = tuple(
            event for event in remapped if isinstance(event, NarrationEvent)
        )

        self._entry_starts: tuple[int, ...] = ()
        if metadata.frame_manifest:
            self._entry_starts = tuple(
                accumulate((entry.frame_count for entry in metadata.frame_manifest), initial=0)
            )

        logger.info(
            "Composed timeline: %d frames at %dfps (%d slides, %d transitions)",
            self.total_frames(),
            self.config.fps,
            len(self.segments.slides),
            len(self.segments.transitions),
        )

    def total_frames(self) -> int:
        """Number of output frames."""
        return ms_to_frames(self.output_duration_ms, self.config.fps)

    def compose_frame(self, frame: int) -> FrameComposition:
        """Compose one output frame."""
        output_time_ms = frame * self.config.frame_ms
        source_time_ms = self.schedule.source_time_ms(output_time_ms)
        viewport = self.timeline.metadata.viewport

        return FrameComposition(
            frame=frame,
            output_time_ms=output_time_ms,
            source_time_ms=source_time_ms,
            base=self._base_layer(source_time_ms),
            video_file=self.timeline.metadata.video_file,
            cursor=get_cursor_position(self.cursor_paths, output_time_ms, viewport),
            slide=self._active_slide(output_time_ms),
            transition=self._active_transition(output_time_ms),
            narration=self._active_narration(output_time_ms),
        )

    def _base_layer(self, source_time_ms: float) -> FrameResolution | None:
        manifest = self.timeline.metadata.frame_manifest
        if not manifest:
            return None
        if self.resolver is not None:
            # Whole frames survive the ms round trip at any fps
            frame = math.floor(source_time_ms * self.config.fps / 1000 + 1e-9)
            return self.resolver.resolve(frame)

        index = closest_frame_index(manifest, source_time_ms)
        return SourceFrameResolution(
            file=manifest[index].file,
            source_frame=self._entry_starts[index],
        )

    def _active_slide(self, output_time_ms: float) -> SlideSegment | None:
        return next(
            (
                slide
                for slide in self.segments.slides
                if slide.slide_start_ms <= output_time_ms < slide.slide_end_ms
            ),
            None,
        )

    def _active_transition(self, output_time_ms: float) -> ActiveTransition | None:
        segment = next(
            (
                seg
                for seg in self.segments.transitions
                if seg.output_start_ms <= output_time_ms < seg.output_end_ms
            ),
            None,
        )
        if segment is None:
            return None

        progress = (output_time_ms - segment.output_start_ms) / segment.duration_ms
        styles = get_transition_styles(
            segment.transition, progress, self.timeline.metadata.viewport.width
        )
        slide_before = (
            self.segments.slides[segment.adjacent_slide_before]
            if segment.adjacent_slide_before is not None
            else None
        )
        slide_after = (
            self.segments.slides[segment.adjacent_slide_after]
            if segment.adjacent_slide_after is not None
            else None
        )

        # A side with neither captured content nor a slide shows a flat backdrop
        missing_before = not segment.has_content_before and slide_before is None
        missing_after = not segment.has_content_after and slide_after is None
        if (missing_before or missing_after) and styles.backdrop is None:
            styles = styles.model_copy(update={"backdrop": BACKDROP_COLOR})

        return ActiveTransition(
            segment=segment,
            progress=progress,
            styles=styles,
            slide_before=slide_before,
            slide_after=slide_after,
        )

    def _active_narration(self, output_time_ms: float) -> NarrationEvent | None:
        active: NarrationEvent | None = None
        for narration in self.narrations:
            if narration.timestamp_ms > output_time_ms:
                break
            if narration.audio_duration_ms is None:
                continue
            if output_time_ms < narration.timestamp_ms + narration.audio_duration_ms:
                active = narration
        return active
