"""Timeline schemas."""

from reelwright.timeline.schemas.events import (
    ActionEvent,
    ActionType,
    CursorTargetEvent,
    NarrationEvent,
    SceneEvent,
    TimelineEvent,
    TransitionEvent,
    WaitEvent,
    WaitReason,
)
from reelwright.timeline.schemas.geometry import BoundingBox, Point, Viewport
from reelwright.timeline.schemas.manifest import FrameEntry, HoldEntry, ManifestEntry
from reelwright.timeline.schemas.slide import SlideConfig
from reelwright.timeline.schemas.timeline import (
    TIMELINE_VERSION,
    Timeline,
    TimelineMetadata,
)
from reelwright.timeline.schemas.transition import TransitionKind, TransitionMarker

__all__ = [
    "ActionEvent",
    "ActionType",
    "BoundingBox",
    "CursorTargetEvent",
    "FrameEntry",
    "HoldEntry",
    "ManifestEntry",
    "NarrationEvent",
    "Point",
    "SceneEvent",
    "SlideConfig",
    "TIMELINE_VERSION",
    "Timeline",
    "TimelineEvent",
    "TimelineMetadata",
    "TransitionEvent",
    "TransitionKind",
    "TransitionMarker",
    "Viewport",
    "WaitEvent",
    "WaitReason",
]
