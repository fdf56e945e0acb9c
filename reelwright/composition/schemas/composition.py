"""Per-output-frame composition schema."""

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.composition.schemas.remap import SlideSegment, TransitionSegment
from reelwright.composition.schemas.resolution import FrameResolution
from reelwright.composition.schemas.styles import TransitionStyles
from reelwright.timeline.schemas import NarrationEvent, Point


class ActiveTransition(BaseReelwrightModel):
    """A timeline transition playing at this frame."""

    segment: TransitionSegment
    progress: float
    styles: TransitionStyles
    # Slide shown on a side instead of captured content, when adjacent
    slide_before: SlideSegment | None = None
    slide_after: SlideSegment | None = None


class FrameComposition(BaseReelwrightModel):
    """Everything a renderer needs to draw one output frame."""

    frame: int
    output_time_ms: float
    source_time_ms: float
    base: FrameResolution | None
    # Legacy single-video captures seek instead of picking assets
    video_file: str | None = None
    cursor: Point
    slide: SlideSegment | None = None
    transition: ActiveTransition | None = None
    narration: NarrationEvent | None = None
