"""Source-to-output time mapping induced by slide and transition insertions.

Scene events carrying a slide and transition events are zero-duration markers
in the captured stream. In the output each one plays for its own duration
while the captured content freezes, and everything after it shifts later.
Insertions at the same source instant play in emission order.
"""

import logging
from collections.abc import Sequence
from typing import TypeVar

from reelwright.composition.schemas import (
    Insertion,
    InsertionKind,
    OutputSegments,
    OutputSpan,
    ResolvedSlideScene,
    ResolvedTransition,
    SlideSegment,
    SpanKind,
    TransitionSegment,
)
from reelwright.timeline.schemas import (
    ActionEvent,
    CursorTargetEvent,
    SceneEvent,
    SlideConfig,
    TimelineEvent,
    TransitionEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_SLIDE_DURATION_MS = 2000

EventT = TypeVar("EventT", bound=TimelineEvent)


def ms_to_frames(ms: float, fps: float) -> int:
    """Convert milliseconds to a whole number of frames."""
    return round(ms / 1000 * fps)


def resolve_slide_scenes(
    events: Sequence[TimelineEvent],
    default_duration_ms: float = DEFAULT_SLIDE_DURATION_MS,
) -> list[ResolvedSlideScene]:
    """Collect slide-bearing scenes with their durations and event positions."""
    return [
        ResolvedSlideScene(
            timestamp_ms=event.timestamp_ms,
            slide_duration_ms=event.slide.duration or default_duration_ms,
            event_index=index,
        )
        for index, event in enumerate(events)
        if isinstance(event, SceneEvent) and event.slide is not None
    ]


def resolve_transitions(events: Sequence[TimelineEvent]) -> list[ResolvedTransition]:
    """Resolve the before/after content of every transition event.

    The before side is the last preceding action. The after side is the first
    following action, but only when nothing other than cursor movements lies
    between; otherwise the transition's own page snapshot stands in. When no
    action exists on a side the ``has_content_*`` flag is false and the
    renderer shows a flat backdrop there.
    """
    resolved: list[ResolvedTransition] = []

    for index, event in enumerate(events):
        if not isinstance(event, TransitionEvent):
            continue

        last_before: ActionEvent | None = None
        for candidate in reversed(events[:index]):
            if isinstance(candidate, ActionEvent):
                last_before = candidate
                break

        first_after: ActionEvent | None = None
        adjacent = True
        for candidate in events[index + 1 :]:
            if isinstance(candidate, ActionEvent):
                first_after = candidate
                break
            if not isinstance(candidate, CursorTargetEvent):
                adjacent = False

        before_snapshot = (
            last_before.settled_snapshot if last_before is not None else None
        ) or event.page_snapshot
        if first_after is not None and adjacent:
            after_snapshot = first_after.settled_snapshot
        else:
            after_snapshot = event.page_snapshot

        resolved.append(
            ResolvedTransition(
                timestamp_ms=event.timestamp_ms,
                transition_duration_ms=event.duration_ms,
                transition=event.transition,
                before_snapshot=before_snapshot,
                after_snapshot=after_snapshot,
                has_content_before=last_before is not None,
                has_content_after=first_after is not None,
                event_index=index,
            )
        )

    return resolved


def build_insertions(
    slide_scenes: Sequence[ResolvedSlideScene],
    transitions: Sequence[ResolvedTransition] = (),
) -> list[Insertion]:
    """Merge slides and transitions into one list in render order.

    Sorted by source time, then by emission index. Kind and duration never
    influence the order.
    """
    insertions = [
        Insertion(
            source_time_ms=slide.timestamp_ms,
            duration_ms=slide.slide_duration_ms,
            kind=InsertionKind.SLIDE,
            event_index=slide.event_index,
        )
        for slide in slide_scenes
    ]
    insertions.extend(
        Insertion(
            source_time_ms=transition.timestamp_ms,
            duration_ms=transition.transition_duration_ms,
            kind=InsertionKind.TRANSITION,
            event_index=transition.event_index,
        )
        for transition in transitions
    )
    insertions.sort(key=lambda ins: (ins.source_time_ms, ins.event_index))
    return insertions


class InsertionSchedule:
    """Sorted insertions and the time mappings they induce.

    Built once per timeline and shared read-only by every per-frame query.
    """

    def __init__(self, insertions: Sequence[Insertion]) -> None:
        self.insertions: tuple[Insertion, ...] = tuple(
            sorted(insertions, key=lambda ins: (ins.source_time_ms, ins.event_index))
        )

    @classmethod
    def from_events(
        cls,
        events: Sequence[TimelineEvent],
        default_slide_duration_ms: float = DEFAULT_SLIDE_DURATION_MS,
    ) -> "InsertionSchedule":
        """Build the schedule for a captured event sequence."""
        schedule = cls(
            build_insertions(
                resolve_slide_scenes(events, default_slide_duration_ms),
                resolve_transitions(events),
            )
        )
        logger.debug(
            "Built insertion schedule: %d insertions, %.0fms inserted",
            len(schedule.insertions),
            schedule.total_inserted_ms,
        )
        return schedule

    @property
    def total_inserted_ms(self) -> float:
        """Total output time added by all insertions."""
        return sum(ins.duration_ms for ins in self.insertions)

    def source_time_ms(self, output_time_ms: float) -> float:
        """Map an output time back to the source time on screen.

        Inside an insertion's half-open window the source time freezes at the
        insertion's own timestamp; elsewhere the accumulated inserted time is
        subtracted.
        """
        accumulated = 0.0
        for ins in self.insertions:
            start = ins.source_time_ms + accumulated
            end = start + ins.duration_ms
            if output_time_ms < start:
                return output_time_ms - accumulated
            if output_time_ms < end:
                return ins.source_time_ms
            accumulated += ins.duration_ms
        return output_time_ms - accumulated

    def offset_at(self, source_time_ms: float) -> float:
        """Inserted time preceding a source instant, insertions at it included."""
        offset = 0.0
        for ins in self.insertions:
            if source_time_ms < ins.source_time_ms:
                break
            offset += ins.duration_ms
        return offset

    def output_time_ms(self, source_time_ms: float) -> float:
        """Map a source timestamp to its shifted output timestamp."""
        return source_time_ms + self.offset_at(source_time_ms)

    def remap_events(self, events: Sequence[EventT]) -> list[EventT]:
        """Return copies of ``events`` shifted into output time."""
        if not self.insertions:
            return list(events)
        return [
            event.model_copy(update={"timestamp_ms": self.output_time_ms(event.timestamp_ms)})
            for event in events
        ]

    def output_duration_ms(self, source_duration_ms: float) -> float:
        """Length of the output for a capture of ``source_duration_ms``."""
        return source_duration_ms + self.total_inserted_ms

    def output_spans(self, source_duration_ms: float) -> list[OutputSpan]:
        """Split the whole output into contiguous source and insertion spans.

        Zero-length source spans between insertions at the same instant are
        omitted, so consecutive spans always share a boundary.
        """
        spans: list[OutputSpan] = []
        accumulated = 0.0
        source_cursor = 0.0

        for ins in self.insertions:
            if ins.source_time_ms > source_cursor:
                spans.append(
                    OutputSpan(
                        kind=SpanKind.SOURCE,
                        output_start_ms=source_cursor + accumulated,
                        output_end_ms=ins.source_time_ms + accumulated,
                        source_start_ms=source_cursor,
                        source_end_ms=ins.source_time_ms,
                    )
                )
                source_cursor = ins.source_time_ms

            start = ins.source_time_ms + accumulated
            spans.append(
                OutputSpan(
                    kind=SpanKind.SLIDE if ins.kind is InsertionKind.SLIDE else SpanKind.TRANSITION,
                    output_start_ms=start,
                    output_end_ms=start + ins.duration_ms,
                    source_start_ms=ins.source_time_ms,
                    source_end_ms=ins.source_time_ms,
                    event_index=ins.event_index,
                )
            )
            accumulated += ins.duration_ms

        if source_duration_ms > source_cursor:
            spans.append(
                OutputSpan(
                    kind=SpanKind.SOURCE,
                    output_start_ms=source_cursor + accumulated,
                    output_end_ms=source_duration_ms + accumulated,
                    source_start_ms=source_cursor,
                    source_end_ms=source_duration_ms,
                )
            )
        return spans


def source_time_ms(
    output_time_ms: float,
    slide_scenes: Sequence[ResolvedSlideScene],
    transitions: Sequence[ResolvedTransition] = (),
) -> float:
    """Map an output time to source time for the given insertions."""
    return InsertionSchedule(build_insertions(slide_scenes, transitions)).source_time_ms(
        output_time_ms
    )


def remap_events(
    events: Sequence[EventT],
    slide_scenes: Sequence[ResolvedSlideScene],
    transitions: Sequence[ResolvedTransition] = (),
) -> list[EventT]:
    """Shift each event by the insertions at or before its timestamp.

    Returns new event objects; the inputs are left untouched.
    """
    return InsertionSchedule(build_insertions(slide_scenes, transitions)).remap_events(events)


def total_slide_duration_ms(slide_scenes: Sequence[ResolvedSlideScene]) -> float:
    """Sum of all slide durations."""
    return sum(slide.slide_duration_ms for slide in slide_scenes)


def total_transition_duration_ms(transitions: Sequence[ResolvedTransition]) -> float:
    """Sum of all transition durations."""
    return sum(transition.transition_duration_ms for transition in transitions)


def compute_output_segments(
    events: Sequence[TimelineEvent],
    transitions: Sequence[ResolvedTransition] | None = None,
    default_slide_duration_ms: float = DEFAULT_SLIDE_DURATION_MS,
    slide_defaults: SlideConfig | None = None,
) -> OutputSegments:
    """Compute output windows for every slide and transition.

    A transition is linked to a slide through ``adjacent_slide_before`` or
    ``adjacent_slide_after`` when that slide is its neighbour in render order
    at the same source instant, which means the transition's visual on that
    side is the slide rather than captured content.

    Args:
        events: The captured event sequence (positions give emission order).
        transitions: Pre-resolved transitions; resolved from ``events`` when
            omitted.
        default_slide_duration_ms: Duration for slides without one.
        slide_defaults: Branding for fields a slide leaves unset.

    Returns:
        Slide and transition segments, each list in render order.
    """
    if transitions is None:
        transitions = resolve_transitions(events)

    scenes_by_index = {
        index: event
        for index, event in enumerate(events)
        if isinstance(event, SceneEvent) and event.slide is not None
    }
    transitions_by_index = {transition.event_index: transition for transition in transitions}
    insertions = build_insertions(
        resolve_slide_scenes(events, default_slide_duration_ms), transitions
    )

    slides: list[SlideSegment] = []
    transition_segments: list[TransitionSegment] = []
    # (kind, index into its own list) for each insertion, in render order
    order: list[tuple[InsertionKind, int]] = []

    accumulated = 0.0
    for ins in insertions:
        output_start = ins.source_time_ms + accumulated
        output_end = output_start + ins.duration_ms

        match ins.kind:
            case InsertionKind.SLIDE:
                scene = scenes_by_index[ins.event_index]
                assert scene.slide is not None
                order.append((InsertionKind.SLIDE, len(slides)))
                slides.append(
                    SlideSegment(
                        slide_start_ms=output_start,
                        slide_end_ms=output_end,
                        slide_duration_ms=ins.duration_ms,
                        scene_title=scene.title,
                        scene_description=scene.description,
                        slide_config=(
                            scene.slide.with_defaults(slide_defaults)
                            if slide_defaults is not None
                            else scene.slide
                        ),
                    )
                )
            case InsertionKind.TRANSITION:
                resolved = transitions_by_index[ins.event_index]
                order.append((InsertionKind.TRANSITION, len(transition_segments)))
                transition_segments.append(
                    TransitionSegment(
                        output_start_ms=output_start,
                        output_end_ms=output_end,
                        duration_ms=ins.duration_ms,
                        transition=resolved.transition,
                        before_snapshot=resolved.before_snapshot,
                        after_snapshot=resolved.after_snapshot,
                        has_content_before=resolved.has_content_before,
                        has_content_after=resolved.has_content_after,
                    )
                )

        accumulated += ins.duration_ms

    for position, (kind, index) in enumerate(order):
        if kind is not InsertionKind.TRANSITION:
            continue
        updates: dict[str, int] = {}
        same_instant = insertions[position].source_time_ms
        if position > 0:
            prev_kind, prev_index = order[position - 1]
            if (
                prev_kind is InsertionKind.SLIDE
                and insertions[position - 1].source_time_ms == same_instant
            ):
                updates["adjacent_slide_before"] = prev_index
        if position < len(order) - 1:
            next_kind, next_index = order[position + 1]
            if (
                next_kind is InsertionKind.SLIDE
                and insertions[position + 1].source_time_ms == same_instant
            ):
                updates["adjacent_slide_after"] = next_index
        if updates:
            transition_segments[index] = transition_segments[index].model_copy(update=updates)

    return OutputSegments(slides=tuple(slides), transitions=tuple(transition_segments))
