"""Accumulates timeline events during capture and finalizes them."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from reelwright.common.errors import CollectorStateError, TimelineValidationError
from reelwright.timeline.clock import Clock, SystemClock
from reelwright.timeline.schemas import Timeline, TimelineMetadata

logger = logging.getLogger(__name__)


class TimelineCollector:
    """Collects events in emission order under an injected clock.

    Events are stored as supplied and validated as a whole by ``finalize``, so
    a capture never produces a partially valid timeline.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """Initialize the collector.

        Args:
            clock: Time source. Defaults to the wall clock.
        """
        self.clock: Clock = clock or SystemClock()
        self._events: list[dict[str, Any]] = []
        self._counter = 0
        self._epoch_ms: float | None = None

    @property
    def started(self) -> bool:
        """Whether ``start`` has been called."""
        return self._epoch_ms is not None

    def start(self) -> None:
        """Fix the epoch that event timestamps are measured from."""
        self._epoch_ms = self.clock.now()

    def advance(self, ms: float) -> None:
        """Add synthetic elapsed time (no effect on a wall clock)."""
        self.clock.advance(ms)

    def elapsed(self) -> int:
        """Return whole milliseconds since ``start``.

        Raises:
            CollectorStateError: If the collector was not started.
        """
        if self._epoch_ms is None:
            msg = "TimelineCollector not started"
            raise CollectorStateError(msg)
        return round(self.clock.now() - self._epoch_ms)

    def next_id(self) -> str:
        """Return the next sequential event id."""
        self._counter += 1
        return f"ev-{self._counter:03d}"

    def emit(self, partial: Mapping[str, Any]) -> str:
        """Append an event, filling in its id and timestamp when absent.

        Args:
            partial: Event fields using either snake_case or camelCase keys.
                ``type`` is required; ``id`` and ``timestamp_ms`` are optional.

        Returns:
            The id of the stored event.

        Raises:
            CollectorStateError: If the collector was not started.
        """
        if self._epoch_ms is None:
            msg = "TimelineCollector not started"
            raise CollectorStateError(msg)

        event = dict(partial)
        event_id = event.pop("id", None) or self.next_id()
        timestamp_ms = event.pop("timestamp_ms", None)
        if timestamp_ms is None:
            timestamp_ms = event.pop("timestampMs", None)
        else:
            event.pop("timestampMs", None)
        if timestamp_ms is None:
            timestamp_ms = self.elapsed()

        event["id"] = event_id
        event["timestamp_ms"] = timestamp_ms
        self._events.append(event)
        logger.debug("Emitted %s event %s at %sms", event.get("type"), event_id, timestamp_ms)
        return event_id

    @property
    def events(self) -> tuple[Mapping[str, Any], ...]:
        """Return a snapshot of the events emitted so far."""
        return tuple(dict(event) for event in self._events)

    def finalize(self, metadata: TimelineMetadata | Mapping[str, Any]) -> Timeline:
        """Assemble and validate the full timeline.

        Args:
            metadata: Capture metadata, as a model or a mapping.

        Returns:
            The validated, immutable timeline.

        Raises:
            TimelineValidationError: If any event or the metadata is invalid.
            StructuralError: If a transition marker addresses a missing entry.
        """
        document = {
            "metadata": metadata,
            "events": [dict(event) for event in self._events],
        }
        try:
            timeline = Timeline.model_validate(document)
        except ValidationError as e:
            raise TimelineValidationError.from_pydantic(e, "Invalid timeline") from e

        logger.info("Finalized timeline with %d events", len(timeline.events))
        return timeline
