"""Frame resolution schemas."""

from typing import Annotated, Literal

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.timeline.schemas import TransitionKind


class SourceFrameResolution(BaseReelwrightModel):
    """The output frame shows one captured asset."""

    type: Literal["source"] = "source"
    file: str
    source_frame: int


class TransitionFrameResolution(BaseReelwrightModel):
    """The output frame shows a transition between two assets."""

    type: Literal["transition"] = "transition"
    before_file: str
    after_file: str
    progress: float = Field(gt=0, le=1)
    transition: TransitionKind


FrameResolution = Annotated[
    SourceFrameResolution | TransitionFrameResolution,
    Field(discriminator="type"),
]
