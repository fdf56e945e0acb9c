"""Read and write the versioned timeline document."""

import logging
from pathlib import Path

from pydantic import ValidationError

from reelwright.common.errors import TimelineValidationError
from reelwright.timeline.schemas import Timeline

logger = logging.getLogger(__name__)

TIMELINE_FILENAME = "timeline.json"


def dump_timeline(timeline: Timeline) -> str:
    """Serialize a timeline to its JSON document form (camelCase keys)."""
    return timeline.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def save_timeline(timeline: Timeline, path: Path) -> Path:
    """Write a timeline as UTF-8 JSON.

    Args:
        timeline: The finalized timeline.
        path: Destination file, or a directory to write ``timeline.json`` into.

    Returns:
        The path written.
    """
    if path.is_dir():
        path = path / TIMELINE_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_timeline(timeline), encoding="utf-8")
    logger.info("Wrote timeline (%d events) to %s", len(timeline.events), path)
    return path


def parse_timeline(document: str) -> Timeline:
    """Validate a JSON timeline document.

    Raises:
        TimelineValidationError: If the document does not match the schema.
    """
    try:
        return Timeline.model_validate_json(document)
    except ValidationError as e:
        raise TimelineValidationError.from_pydantic(e, "Invalid timeline document") from e


def load_timeline(path: Path) -> Timeline:
    """Load and validate a timeline document from disk."""
    return parse_timeline(path.read_text(encoding="utf-8"))
