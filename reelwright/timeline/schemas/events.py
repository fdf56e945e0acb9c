"""Timeline event schemas.

Events form a closed union discriminated by ``type``. Consumers pick out the
kinds they care about with ``isinstance`` and ignore the rest.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field, model_validator

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.timeline.schemas.geometry import BoundingBox, Point
from reelwright.timeline.schemas.slide import SlideConfig
from reelwright.timeline.schemas.transition import TransitionKind


class ActionType(StrEnum):
    """Kind of UI interaction performed by the automation driver."""

    CLICK = "click"
    DBLCLICK = "dblclick"
    FILL = "fill"
    HOVER = "hover"
    SELECT = "select"
    PRESS = "press"
    NAVIGATE = "navigate"


class WaitReason(StrEnum):
    """Why the scenario paused."""

    PACING = "pacing"
    NARRATION_SYNC = "narration_sync"
    PAGE_LOAD = "page_load"


class SceneEvent(BaseReelwrightModel):
    """Scene boundary, optionally carrying a slide overlay."""

    type: Literal["scene"] = "scene"
    id: str
    timestamp_ms: float = Field(ge=0)
    title: str
    description: str | None = None
    slide: SlideConfig | None = None


class ActionEvent(BaseReelwrightModel):
    """A completed UI interaction."""

    type: Literal["action"] = "action"
    id: str
    timestamp_ms: float = Field(ge=0)
    action: ActionType
    selector: str
    value: str | None = None
    duration_ms: float = Field(ge=0)
    bounding_box: BoundingBox | None
    # When the UI visually stabilized after the action
    settled_at_ms: float | None = None
    settled_snapshot: str | None = None

    @model_validator(mode="after")
    def _settled_after_start(self) -> "ActionEvent":
        if self.settled_at_ms is not None and self.settled_at_ms < self.timestamp_ms:
            msg = (
                f"settledAtMs ({self.settled_at_ms}) must be >= "
                f"timestampMs ({self.timestamp_ms})"
            )
            raise ValueError(msg)
        return self


class CursorTargetEvent(BaseReelwrightModel):
    """Pointer movement between two viewport positions."""

    type: Literal["cursor_target"] = "cursor_target"
    id: str
    timestamp_ms: float = Field(ge=0)
    from_x: float
    from_y: float
    to_x: float
    to_y: float
    move_duration_ms: float = Field(gt=0)
    easing: Literal["bezier"] = "bezier"

    @property
    def start(self) -> Point:
        """Return the movement origin."""
        return Point(x=self.from_x, y=self.from_y)

    @property
    def end(self) -> Point:
        """Return the movement destination."""
        return Point(x=self.to_x, y=self.to_y)

    @property
    def end_ms(self) -> float:
        """Return the source time at which the movement completes."""
        return self.timestamp_ms + self.move_duration_ms


class NarrationEvent(BaseReelwrightModel):
    """A narration cue, with audio attached after synthesis."""

    type: Literal["narration"] = "narration"
    id: str
    timestamp_ms: float = Field(ge=0)
    text: str = Field(min_length=1)
    audio_duration_ms: float | None = Field(default=None, gt=0)
    audio_file: str | None = None


class WaitEvent(BaseReelwrightModel):
    """A pause in the scenario."""

    type: Literal["wait"] = "wait"
    id: str
    timestamp_ms: float = Field(ge=0)
    duration_ms: float = Field(gt=0)
    reason: WaitReason


class TransitionEvent(BaseReelwrightModel):
    """A request to bridge the surrounding content with a visual effect."""

    type: Literal["transition"] = "transition"
    id: str
    timestamp_ms: float = Field(ge=0)
    transition: TransitionKind
    duration_ms: float = Field(gt=0)
    # Page snapshot taken when the transition was requested
    page_snapshot: str | None = None


TimelineEvent = Annotated[
    SceneEvent | ActionEvent | CursorTargetEvent | NarrationEvent | WaitEvent | TransitionEvent,
    Field(discriminator="type"),
]
