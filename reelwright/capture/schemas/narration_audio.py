"""Pregenerated narration audio schema."""

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel


class NarrationAudio(BaseReelwrightModel):
    """Synthesized audio for one narration line."""

    text: str
    audio_file: str
    duration_ms: float = Field(gt=0)
