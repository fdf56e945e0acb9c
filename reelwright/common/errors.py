"""Error taxonomy for timeline construction, compilation and capture."""

from typing import Any

from pydantic import ValidationError


class ReelwrightError(Exception):
    """Base class for every error raised by Reelwright."""


class TimelineValidationError(ReelwrightError):
    """A malformed event, manifest or violated timeline invariant.

    Attributes:
        issues: Structured description of each offending field, one dict per
            problem with ``loc``, ``msg`` and ``type`` keys.
    """

    def __init__(self, message: str, issues: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []

    @classmethod
    def from_pydantic(cls, error: ValidationError, context: str) -> "TimelineValidationError":
        """Build from a pydantic validation failure.

        Args:
            error: The pydantic error.
            context: What was being validated, used as the message prefix.

        Returns:
            The wrapped error with one issue per pydantic error entry.
        """
        issues = [
            {
                "loc": ".".join(str(part) for part in entry["loc"]),
                "msg": entry["msg"],
                "type": entry["type"],
            }
            for entry in error.errors()
        ]
        summary = "; ".join(f"{issue['loc'] or '<root>'}: {issue['msg']}" for issue in issues)
        return cls(f"{context}: {summary}", issues)


class StructuralError(ReelwrightError):
    """Structurally unusable input, such as an empty frame manifest."""


class TimingError(ReelwrightError):
    """Capture timing diverged from what the dry run predicted."""


class ResourceError(ReelwrightError):
    """An automation resource failed or timed out."""


class StabilizationTimeoutError(ResourceError):
    """The UI did not stabilize within the allotted time."""

    def __init__(self, selector: str, timeout_ms: int) -> None:
        super().__init__(f"Element {selector!r} not visible after {timeout_ms}ms")
        self.selector = selector
        self.timeout_ms = timeout_ms


class CollectorStateError(ReelwrightError, RuntimeError):
    """The timeline collector was used out of order."""
