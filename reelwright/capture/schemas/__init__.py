"""Capture schemas."""

from reelwright.capture.schemas.capture_options import (
    DEFAULT_STABILIZATION_TIMEOUT_MS,
    CaptureOptions,
    CaptureResult,
)
from reelwright.capture.schemas.narration_audio import NarrationAudio

__all__ = [
    "DEFAULT_STABILIZATION_TIMEOUT_MS",
    "CaptureOptions",
    "CaptureResult",
    "NarrationAudio",
]
