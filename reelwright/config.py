"""Render and capture configuration."""

import os
from enum import StrEnum, auto

from dotenv import load_dotenv
from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.timeline.schemas import SlideConfig, Viewport

# Load .env file from the working directory
load_dotenv()


class Pacing(StrEnum):
    """How leisurely captured interactions are paced."""

    FAST = auto()
    NORMAL = auto()
    CINEMATIC = auto()


PACING_MULTIPLIERS: dict[Pacing, float] = {
    Pacing.FAST: 0.15,
    Pacing.NORMAL: 0.5,
    Pacing.CINEMATIC: 1.0,
}

NARRATION_OVERLAP: dict[Pacing, float] = {
    Pacing.FAST: 0.15,
    Pacing.NORMAL: 0.5,
    Pacing.CINEMATIC: 0.85,
}


class RenderConfig(BaseReelwrightModel):
    """Configuration for capture pacing and output composition."""

    fps: int = Field(default=30, gt=0)
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=720, gt=0)
    default_slide_duration_ms: int = Field(default=2000, gt=0)
    cursor_waypoint_count: int = Field(default=20, ge=2)

    # Slide branding defaults
    brand_color: str = "#000000"
    text_color: str = "#FFFFFF"
    font_family: str | None = None

    output_dir: str = "./output"
    pacing: Pacing = Pacing.NORMAL

    @property
    def viewport(self) -> Viewport:
        """Return the configured viewport."""
        return Viewport(width=self.viewport_width, height=self.viewport_height)

    @property
    def slide_branding(self) -> SlideConfig:
        """Branding for slides that leave colors or font unset."""
        return SlideConfig(
            brand_color=self.brand_color,
            text_color=self.text_color,
            font_family=self.font_family,
        )

    @property
    def frame_ms(self) -> float:
        """Duration of one output frame in milliseconds."""
        return 1000 / self.fps

    @property
    def pacing_multiplier(self) -> float:
        """Scale applied to pacing delays."""
        return PACING_MULTIPLIERS[self.pacing]

    @property
    def narration_overlap(self) -> float:
        """Fraction of a narration's length added as breathing room."""
        return NARRATION_OVERLAP[self.pacing]


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ValueError(msg) from e


def get_render_config() -> RenderConfig:
    """Get render configuration from environment variables.

    Environment variables:
        REELWRIGHT_FPS: Output frame rate (default: 30)
        REELWRIGHT_VIEWPORT_WIDTH / REELWRIGHT_VIEWPORT_HEIGHT: Capture size
            (default: 1280x720)
        REELWRIGHT_SLIDE_DURATION_MS: Default slide duration (default: 2000)
        REELWRIGHT_BRAND_COLOR / REELWRIGHT_TEXT_COLOR / REELWRIGHT_FONT_FAMILY:
            Slide branding
        REELWRIGHT_OUTPUT_DIR: Where captures are written (default: ./output)
        REELWRIGHT_PACING: fast, normal or cinematic (default: normal)
    """
    return RenderConfig(
        fps=_int_env("REELWRIGHT_FPS", 30),
        viewport_width=_int_env("REELWRIGHT_VIEWPORT_WIDTH", 1280),
        viewport_height=_int_env("REELWRIGHT_VIEWPORT_HEIGHT", 720),
        default_slide_duration_ms=_int_env("REELWRIGHT_SLIDE_DURATION_MS", 2000),
        brand_color=os.environ.get("REELWRIGHT_BRAND_COLOR", "#000000"),
        text_color=os.environ.get("REELWRIGHT_TEXT_COLOR", "#FFFFFF"),
        font_family=os.environ.get("REELWRIGHT_FONT_FAMILY") or None,
        output_dir=os.environ.get("REELWRIGHT_OUTPUT_DIR", "./output"),
        pacing=Pacing(os.environ.get("REELWRIGHT_PACING", Pacing.NORMAL.value)),
    )
