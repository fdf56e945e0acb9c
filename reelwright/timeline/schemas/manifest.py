"""Frame manifest schemas."""

from typing import Annotated, Literal

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel


class FrameEntry(BaseReelwrightModel):
    """A single captured visual asset."""

    type: Literal["frame"] = "frame"
    timestamp_ms: float = Field(ge=0)
    file: str

    @property
    def frame_count(self) -> int:
        """Number of expanded source frames this entry occupies."""
        return 1


class HoldEntry(BaseReelwrightModel):
    """One captured asset repeated ``count`` times."""

    type: Literal["hold"] = "hold"
    timestamp_ms: float = Field(ge=0)
    file: str
    count: int = Field(ge=1)

    @property
    def frame_count(self) -> int:
        """Number of expanded source frames this entry occupies."""
        return self.count


ManifestEntry = Annotated[FrameEntry | HoldEntry, Field(discriminator="type")]
