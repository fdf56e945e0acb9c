"""Composition schemas."""

from reelwright.composition.schemas.composition import ActiveTransition, FrameComposition
from reelwright.composition.schemas.cursor import CursorPath, Waypoint
from reelwright.composition.schemas.remap import (
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
from reelwright.composition.schemas.resolution import (
    FrameResolution,
    SourceFrameResolution,
    TransitionFrameResolution,
)
from reelwright.composition.schemas.styles import (
    FaceStyle,
    TransformOp,
    TransitionStyles,
    css_number,
)

__all__ = [
    "ActiveTransition",
    "CursorPath",
    "FaceStyle",
    "FrameComposition",
    "FrameResolution",
    "Insertion",
    "InsertionKind",
    "OutputSegments",
    "OutputSpan",
    "ResolvedSlideScene",
    "ResolvedTransition",
    "SlideSegment",
    "SourceFrameResolution",
    "SpanKind",
    "TransformOp",
    "TransitionFrameResolution",
    "TransitionSegment",
    "TransitionStyles",
    "Waypoint",
    "css_number",
]
