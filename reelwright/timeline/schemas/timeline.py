"""Timeline document schema."""

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from reelwright.common.base_reelwright_model import BaseReelwrightModel
from reelwright.common.errors import StructuralError
from reelwright.timeline.schemas.events import TimelineEvent
from reelwright.timeline.schemas.geometry import Viewport
from reelwright.timeline.schemas.manifest import ManifestEntry
from reelwright.timeline.schemas.transition import TransitionMarker

TIMELINE_VERSION = 1


class TimelineMetadata(BaseReelwrightModel):
    """Capture metadata and the visual assets produced by the capture."""

    test_file: str
    scenario_file: str
    recorded_at: datetime
    viewport: Viewport
    video_duration_ms: float = Field(ge=0)
    # Legacy single-video capture; frame manifests supersede it
    video_file: str | None = None
    frame_manifest: tuple[ManifestEntry, ...] | None = None
    transition_markers: tuple[TransitionMarker, ...] = ()

    @model_validator(mode="after")
    def _has_visual_source(self) -> "TimelineMetadata":
        if self.frame_manifest is not None and not self.frame_manifest:
            msg = "frameManifest must not be empty when present"
            raise ValueError(msg)
        if self.frame_manifest is None and not self.video_file:
            msg = "Timeline must have either frameManifest or videoFile"
            raise ValueError(msg)
        if self.transition_markers and self.frame_manifest is None:
            msg = "transitionMarkers require a frameManifest"
            raise StructuralError(msg)
        manifest_length = len(self.frame_manifest or ())
        for marker in self.transition_markers:
            if marker.after_entry_index >= manifest_length:
                msg = (
                    f"Transition marker references manifest entry {marker.after_entry_index} "
                    f"but the manifest has {manifest_length} entries"
                )
                raise StructuralError(msg)
        return self


class Timeline(BaseReelwrightModel):
    """A finalized, immutable capture: metadata plus the ordered event stream."""

    version: Literal[1] = TIMELINE_VERSION
    metadata: TimelineMetadata
    events: tuple[TimelineEvent, ...]

    @model_validator(mode="after")
    def _ordered_unique_events(self) -> "Timeline":
        seen: set[str] = set()
        previous_ms = 0.0
        for index, event in enumerate(self.events):
            if event.id in seen:
                msg = f"Duplicate event id {event.id!r} at index {index}"
                raise ValueError(msg)
            seen.add(event.id)
            if event.timestamp_ms < previous_ms:
                msg = (
                    f"Event {event.id!r} at index {index} has timestampMs "
                    f"{event.timestamp_ms} earlier than its predecessor ({previous_ms})"
                )
                raise ValueError(msg)
            previous_ms = event.timestamp_ms
        return self
