"""Clocks used by the timeline collector.

The collector never reads process time directly; it is handed a clock. A
``VirtualClock`` only moves when told to, which makes captured durations
independent of how fast the host ran the scenario.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Millisecond clock injected into the collector."""

    def now(self) -> float:
        """Return the current time in milliseconds."""
        ...

    def advance(self, ms: float) -> None:
        """Add synthetic elapsed time."""
        ...

    @property
    def is_virtual(self) -> bool:
        """Whether elapsed time is synthetic."""
        ...


class SystemClock:
    """Wall clock backed by ``time.perf_counter``; ``advance`` does nothing."""

    def now(self) -> float:
        return time.perf_counter() * 1000.0

    def advance(self, ms: float) -> None:
        return None

    @property
    def is_virtual(self) -> bool:
        return False


class VirtualClock:
    """Clock that starts at zero and only moves through ``advance``."""

    def __init__(self) -> None:
        self._now_ms = 0.0

    def now(self) -> float:
        return self._now_ms

    def advance(self, ms: float) -> None:
        if ms < 0:
            msg = f"Cannot advance a clock by a negative amount ({ms}ms)"
            raise ValueError(msg)
        self._now_ms += ms

    @property
    def is_virtual(self) -> bool:
        return True
