"""Slide overlay schema carried by scene events."""

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel


class SlideConfig(BaseReelwrightModel):
    """Title-card overlay shown at a scene boundary.

    Unset colors and fonts fall back to the render configuration's branding.
    """

    duration: int | None = Field(default=None, gt=0)
    brand_color: str | None = None
    text_color: str | None = None
    font_family: str | None = None
    title_font_size: int | None = Field(default=None, gt=0)

    def with_defaults(self, defaults: "SlideConfig") -> "SlideConfig":
        """Return a copy whose unset fields are taken from ``defaults``."""
        missing = {
            name: value
            for name, value in defaults.model_dump(exclude_none=True).items()
            if getattr(self, name) is None
        }
        return self.model_copy(update=missing) if missing else self
