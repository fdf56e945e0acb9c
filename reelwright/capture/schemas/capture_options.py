"""Capture session options and results."""

from pathlib import Path

from pydantic import Field

from reelwright.capture.schemas.narration_audio import NarrationAudio
from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.timeline.schemas import Timeline

DEFAULT_STABILIZATION_TIMEOUT_MS = 10_000


class CaptureOptions(BaseReelwrightModel):
    """How a single capture session is run."""

    test_file: str = ""
    scenario_file: str = ""
    # Session directories are created under this; defaults to the render config's
    output_dir: Path | None = None
    virtual_time: bool = True
    capture_frames: bool = True
    # Externally recorded video, for drivers that record instead of screenshotting
    video_file: str | None = None
    stabilization_timeout_ms: int = Field(default=DEFAULT_STABILIZATION_TIMEOUT_MS, gt=0)
    settle_ms: int = Field(default=150, ge=0)
    pregenerated: tuple[NarrationAudio, ...] = ()


class CaptureResult(BaseReelwrightModel):
    """A completed capture."""

    session_id: str
    session_dir: Path
    timeline_path: Path
    timeline: Timeline
