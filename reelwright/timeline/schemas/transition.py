"""Transition kinds and frame-manifest transition markers."""

from enum import StrEnum

from pydantic import Field

from reelwright.common.base_reelwright_model import BaseReelwrightModel


class TransitionKind(StrEnum):
    """Visual effect used to bridge two pieces of content."""

    FADE = "fade"
    WIPE = "wipe"
    SLIDE_UP = "slide-up"
    SLIDE_LEFT = "slide-left"
    ZOOM = "zoom"
    DOORWAY = "doorway"
    SWAP = "swap"
    CUBE = "cube"


class TransitionMarker(BaseReelwrightModel):
    """Where, for how long and via which effect two manifest entries are bridged.

    ``after_entry_index`` addresses a manifest entry (not an expanded frame);
    the transition plays after the last expanded frame of that entry.
    ``consumed_frames`` captured frames after it are skipped.
    """

    after_entry_index: int = Field(ge=0)
    duration_frames: int = Field(gt=0)
    transition: TransitionKind
    before_file: str | None = None
    after_file: str | None = None
    consumed_frames: int = Field(default=1, ge=0)
