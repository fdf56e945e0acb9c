"""Browser automation seam used by capture.

Capture only needs a handful of awaitable primitives from whatever drives the
UI. Anything implementing ``AutomationDriver`` can be used; ``NoopDriver`` is
the one built-in implementation and backs the narration dry run.
"""

from typing import Protocol

from reelwright.timeline.schemas import BoundingBox


class AutomationDriver(Protocol):
    """Awaitable UI primitives. Every call returns once the UI has reacted."""

    async def goto(self, url: str) -> None: ...

    async def wait_for_visible(self, selector: str, timeout_ms: int) -> None: ...

    async def bounding_box(self, selector: str) -> BoundingBox | None: ...

    async def click(self, selector: str, click_count: int = 1) -> None: ...

    async def fill(self, selector: str, value: str, char_delay_ms: int = 0) -> None: ...

    async def select_option(self, selector: str, value: str) -> None: ...

    async def hover(self, selector: str) -> None: ...

    async def press(self, key: str) -> None: ...

    async def screenshot(self) -> bytes: ...

    async def close(self) -> None: ...


class NoopDriver:
    """Driver that does nothing and reports no elements."""

    async def goto(self, url: str) -> None:
        return None

    async def wait_for_visible(self, selector: str, timeout_ms: int) -> None:
        return None

    async def bounding_box(self, selector: str) -> BoundingBox | None:
        return None

    async def click(self, selector: str, click_count: int = 1) -> None:
        return None

    async def fill(self, selector: str, value: str, char_delay_ms: int = 0) -> None:
        return None

    async def select_option(self, selector: str, value: str) -> None:
        return None

    async def hover(self, selector: str) -> None:
        return None

    async def press(self, key: str) -> None:
        return None

    async def screenshot(self) -> bytes:
        return b""

    async def close(self) -> None:
        return None
