"""Export a compiled timeline to OpenTimelineIO."""

import logging
from pathlib import Path
from typing import Any

import opentimelineio as otio

from reelwright.composition.schemas import OutputSpan, ResolvedTransition, SpanKind
from reelwright.composition.time_remap import InsertionSchedule, resolve_transitions
from reelwright.config import RenderConfig
from reelwright.timeline.schemas import NarrationEvent, SceneEvent, SlideConfig, Timeline

logger = logging.getLogger(__name__)

METADATA_KEY = "reelwright"
SLIDE_GENERATOR = "reelwright.slide"
TRANSITION_GENERATOR = "reelwright.transition"


def _rational(ms: float, fps: float) -> otio.opentime.RationalTime:
    return otio.opentime.RationalTime(ms / 1000 * fps, fps)


def _time_range(start_ms: float, duration_ms: float, fps: float) -> otio.opentime.TimeRange:
    return otio.opentime.TimeRange(
        start_time=_rational(start_ms, fps),
        duration=_rational(duration_ms, fps),
    )


class OtioExporter:
    """Converts a timeline's output layout into an editable OTIO timeline.

    The video track alternates captured spans, which reference the recording
    with a source range, and generator clips for slides and transitions. Audio
    tracks carry synthesized narration at its output time, with overlapping
    clips spread over additional tracks.
    """

    def export(
        self,
        timeline: Timeline,
        output_path: Path,
        config: RenderConfig | None = None,
    ) -> Path:
        """Write ``timeline`` as an ``.otio`` file.

        Args:
            timeline: A finalized timeline.
            output_path: Where to save the .otio file.
            config: Supplies frame rate and default slide duration.

        Returns:
            The path to the saved OTIO file.
        """
        otio_timeline = self.build(timeline, config or RenderConfig())
        output_path.parent.mkdir(parents=True, exist_ok=True)
        otio.adapters.write_to_file(otio_timeline, str(output_path))
        logger.info("Exported OTIO timeline to %s", output_path)
        return output_path

    def build(self, timeline: Timeline, config: RenderConfig) -> otio.schema.Timeline:
        """Create the OTIO timeline in memory."""
        fps = config.fps
        schedule = InsertionSchedule.from_events(timeline.events, config.default_slide_duration_ms)
        spans = schedule.output_spans(timeline.metadata.video_duration_ms)

        name = Path(timeline.metadata.scenario_file).stem or "Reelwright Capture"
        otio_timeline = otio.schema.Timeline(name=name)
        otio_timeline.global_start_time = otio.opentime.RationalTime(0, fps)
        otio_timeline.tracks.append(
            self._create_video_track(timeline, spans, fps, config.slide_branding)
        )

        narrations = [
            event
            for event in schedule.remap_events(timeline.events)
            if isinstance(event, NarrationEvent)
            and event.audio_file
            and (event.audio_duration_ms or 0) > 0
        ]
        for track in self._create_narration_tracks(narrations, fps):
            otio_timeline.tracks.append(track)

        logger.debug(
            "Built OTIO timeline: %d spans, %d narration clips", len(spans), len(narrations)
        )
        return otio_timeline

    def _source_url(self, timeline: Timeline) -> str:
        metadata = timeline.metadata
        if metadata.video_file:
            return metadata.video_file
        assert metadata.frame_manifest is not None
        return str(Path(metadata.frame_manifest[0].file).parent)

    def _create_video_track(
        self,
        timeline: Timeline,
        spans: list[OutputSpan],
        fps: float,
        branding: SlideConfig,
    ) -> otio.schema.Track:
        video_track = otio.schema.Track(name="Video", kind=otio.schema.TrackKind.Video)
        source_url = self._source_url(timeline)
        transitions = {
            resolved.event_index: resolved for resolved in resolve_transitions(timeline.events)
        }

        for position, span in enumerate(spans):
            placement = {
                "kind": str(span.kind),
                "output_start_ms": span.output_start_ms,
                "output_end_ms": span.output_end_ms,
            }
            match span.kind:
                case SpanKind.SOURCE:
                    clip = otio.schema.Clip(
                        name=f"capture_{position}",
                        media_reference=otio.schema.ExternalReference(target_url=source_url),
                        source_range=_time_range(span.source_start_ms, span.duration_ms, fps),
                    )
                    clip.metadata[METADATA_KEY] = {
                        **placement,
                        "source_start_ms": span.source_start_ms,
                        "source_end_ms": span.source_end_ms,
                    }
                case SpanKind.SLIDE:
                    clip = self._create_slide_clip(timeline, span, fps, placement, branding)
                case SpanKind.TRANSITION:
                    assert span.event_index is not None
                    clip = self._create_transition_clip(
                        transitions[span.event_index], span, fps, placement
                    )
            video_track.append(clip)

        return video_track

    def _create_slide_clip(
        self,
        timeline: Timeline,
        span: OutputSpan,
        fps: float,
        placement: dict[str, Any],
        branding: SlideConfig,
    ) -> otio.schema.Clip:
        assert span.event_index is not None
        scene = timeline.events[span.event_index]
        assert isinstance(scene, SceneEvent) and scene.slide is not None
        parameters = {
            "title": scene.title,
            "description": scene.description or "",
            **scene.slide.with_defaults(branding).model_dump(exclude_none=True),
        }
        clip = otio.schema.Clip(
            name=f"slide_{scene.id}",
            media_reference=otio.schema.GeneratorReference(
                generator_kind=SLIDE_GENERATOR,
                parameters=parameters,
                available_range=_time_range(0, span.duration_ms, fps),
            ),
            source_range=_time_range(0, span.duration_ms, fps),
        )
        clip.metadata[METADATA_KEY] = {**placement, "event_id": scene.id, **parameters}
        return clip

    def _create_transition_clip(
        self,
        resolved: ResolvedTransition,
        span: OutputSpan,
        fps: float,
        placement: dict[str, Any],
    ) -> otio.schema.Clip:
        parameters = {
            "transition": str(resolved.transition),
            "before_snapshot": resolved.before_snapshot or "",
            "after_snapshot": resolved.after_snapshot or "",
            "has_content_before": resolved.has_content_before,
            "has_content_after": resolved.has_content_after,
        }
        clip = otio.schema.Clip(
            name=f"transition_{resolved.transition}_{resolved.event_index}",
            media_reference=otio.schema.GeneratorReference(
                generator_kind=TRANSITION_GENERATOR,
                parameters=parameters,
                available_range=_time_range(0, span.duration_ms, fps),
            ),
            source_range=_time_range(0, span.duration_ms, fps),
        )
        clip.metadata[METADATA_KEY] = {**placement, **parameters}
        return clip

    def _create_narration_tracks(
        self,
        narrations: list[NarrationEvent],
        fps: float,
    ) -> list[otio.schema.Track]:
        """Place narration clips at their output time.

        Clips that would overlap an earlier one go on the first track that is
        free at their start, opening a new track when none is.
        """
        lanes: list[tuple[otio.schema.Track, float]] = []

        for narration in narrations:
            assert narration.audio_file is not None and narration.audio_duration_ms
            start_ms = narration.timestamp_ms
            lane = next(
                (index for index, (_, end_ms) in enumerate(lanes) if end_ms <= start_ms),
                None,
            )
            if lane is None:
                if lanes:
                    logger.warning(
                        "Narration %s at %.0fms overlaps earlier audio; placing it on track %d",
                        narration.id,
                        start_ms,
                        len(lanes) + 1,
                    )
                name = "Narration" if not lanes else f"Narration {len(lanes) + 1}"
                lanes.append((otio.schema.Track(name=name, kind=otio.schema.TrackKind.Audio), 0.0))
                lane = len(lanes) - 1

            track, end_ms = lanes[lane]
            if start_ms > end_ms:
                track.append(otio.schema.Gap(source_range=_time_range(0, start_ms - end_ms, fps)))

            clip = otio.schema.Clip(
                name=f"narration_{narration.id}",
                media_reference=otio.schema.ExternalReference(
                    target_url=str(Path(narration.audio_file).absolute()),
                ),
                source_range=_time_range(0, narration.audio_duration_ms, fps),
            )
            clip.metadata[METADATA_KEY] = {"event_id": narration.id, "text": narration.text}
            track.append(clip)
            lanes[lane] = (track, start_ms + narration.audio_duration_ms)

        return [track for track, _ in lanes]
