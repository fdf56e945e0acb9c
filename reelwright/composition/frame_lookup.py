"""Map a source time to the captured asset showing at that time."""

from bisect import bisect_right
from collections.abc import Sequence

from reelwright.common.errors import StructuralError
from reelwright.timeline.schemas import ManifestEntry


def closest_frame_index(manifest: Sequence[ManifestEntry], time_ms: float) -> int:
    """Index of the entry with the greatest ``timestamp_ms`` not after ``time_ms``.

    Queries before the first entry clamp to the first entry, queries after
    the last clamp to the last.

    Raises:
        StructuralError: If the manifest is empty.
    """
    if not manifest:
        msg = "Empty frame manifest"
        raise StructuralError(msg)

    index = bisect_right(manifest, time_ms, key=lambda entry: entry.timestamp_ms)
    return max(index - 1, 0)


def find_closest_frame(manifest: Sequence[ManifestEntry], time_ms: float) -> ManifestEntry:
    """Find the manifest entry showing at ``time_ms``."""
    return manifest[closest_frame_index(manifest, time_ms)]
