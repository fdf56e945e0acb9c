"""Geometry schemas shared by events, cursor paths and metadata."""

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel


class Point(BaseReelwrightModel):
    """A position in viewport pixels."""

    x: float
    y: float


class BoundingBox(BaseReelwrightModel):
    """Bounding box of an element as reported by the automation driver."""

    x: float
    y: float
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    @property
    def center(self) -> Point:
        """Return the center of the box, rounded to whole pixels."""
        return Point(x=round(self.x + self.width / 2), y=round(self.y + self.height / 2))


class Viewport(BaseReelwrightModel):
    """Size of the captured page in pixels."""

    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def center(self) -> Point:
        """Return the geometric center of the viewport."""
        return Point(x=self.width / 2, y=self.height / 2)
