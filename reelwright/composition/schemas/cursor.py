"""Cursor path schemas."""

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.timeline.schemas import CursorTargetEvent


class Waypoint(BaseReelwrightModel):
    """A precomputed point along a cursor's bezier path."""

    x: float
    y: float
    t: float = Field(ge=0, le=1)


class CursorPath(BaseReelwrightModel):
    """A cursor movement with its sampled waypoints."""

    event: CursorTargetEvent
    waypoints: tuple[Waypoint, ...]
