"""Schemas produced by the time-remap engine."""

from enum import StrEnum, auto

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.timeline.schemas import SlideConfig, TransitionKind


class InsertionKind(StrEnum):
    """What adds output time at an insertion."""

    SLIDE = auto()
    TRANSITION = auto()


class ResolvedSlideScene(BaseReelwrightModel):
    """A slide-bearing scene with its resolved duration."""

    timestamp_ms: float
    slide_duration_ms: float
    # Position in the captured event sequence, for stable ordering
    event_index: int


class ResolvedTransition(BaseReelwrightModel):
    """A transition event with its before/after content resolved."""

    timestamp_ms: float
    transition_duration_ms: float
    transition: TransitionKind
    before_snapshot: str | None
    after_snapshot: str | None
    has_content_before: bool
    has_content_after: bool
    event_index: int


class Insertion(BaseReelwrightModel):
    """A slide or transition that adds duration at a source instant."""

    source_time_ms: float
    duration_ms: float
    kind: InsertionKind
    event_index: int


class SlideSegment(BaseReelwrightModel):
    """Output-time window occupied by a slide."""

    slide_start_ms: float
    slide_end_ms: float
    slide_duration_ms: float
    scene_title: str
    scene_description: str | None = None
    slide_config: SlideConfig


class TransitionSegment(BaseReelwrightModel):
    """Output-time window occupied by a transition."""

    output_start_ms: float
    output_end_ms: float
    duration_ms: float
    transition: TransitionKind
    before_snapshot: str | None
    after_snapshot: str | None
    # Index into the slide segments for a slide at the same source instant
    adjacent_slide_before: int | None = None
    adjacent_slide_after: int | None = None
    has_content_before: bool
    has_content_after: bool


class OutputSegments(BaseReelwrightModel):
    """Slide and transition windows in output time."""

    slides: tuple[SlideSegment, ...]
    transitions: tuple[TransitionSegment, ...]


class SpanKind(StrEnum):
    """What plays during an output span."""

    SOURCE = auto()
    SLIDE = auto()
    TRANSITION = auto()


class OutputSpan(BaseReelwrightModel):
    """A contiguous piece of the output and the source time it shows.

    Source spans advance through ``[source_start_ms, source_end_ms)``; slide
    and transition spans freeze at ``source_start_ms``.
    """

    kind: SpanKind
    output_start_ms: float
    output_end_ms: float
    source_start_ms: float
    source_end_ms: float
    event_index: int | None = None

    @property
    def duration_ms(self) -> float:
        """Length of the span in output time."""
        return self.output_end_ms - self.output_start_ms
