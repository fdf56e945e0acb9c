"""Scenario-facing helpers that drive the UI and record what happened."""

import asyncio
import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from reelwright.capture.driver import AutomationDriver
from reelwright.capture.frame_grabber import FrameGrabber
from reelwright.capture.schemas import DEFAULT_STABILIZATION_TIMEOUT_MS, NarrationAudio
from reelwright.common.errors import StabilizationTimeoutError
from reelwright.config import RenderConfig
from reelwright.timeline.collector import TimelineCollector
from reelwright.timeline.schemas import (
    ActionType,
    BoundingBox,
    Point,
    SlideConfig,
    TransitionKind,
    WaitReason,
)

logger = logging.getLogger(__name__)

NARRATION_WPM = 150
POST_ACTION_DELAY_MS = 300
PAGE_LOAD_WAIT_MS = 600
CHAR_TYPE_DELAY_MS = 30
CURSOR_MOVE_MIN_MS = 200
CURSOR_MOVE_MAX_MS = 800
SETTLE_MS = 150
DEFAULT_TRANSITION_MS = 500

CLICK_DURATION_MS = 200
HOVER_DURATION_MS = 200
PRESS_DURATION_MS = 100


def estimate_narration_ms(text: str) -> int:
    """Estimate how long ``text`` takes to speak at 150 words per minute."""
    words = len(re.split(r"\s+", text.strip()))
    return round(words / NARRATION_WPM * 60 * 1000)


def calculate_move_duration(start: Point, end: Point, pacing_multiplier: float = 1.0) -> int:
    """Return a cursor move duration that grows with the log of the distance.

    The base duration is clamped to 200-800ms before pacing is applied.
    """
    distance = math.hypot(end.x - start.x, end.y - start.y)
    base = min(
        CURSOR_MOVE_MAX_MS,
        max(CURSOR_MOVE_MIN_MS, round(200 * math.log2(distance / 10 + 1))),
    )
    return round(base * pacing_multiplier)


class ScenarioHelpers:
    """The API a scenario is written against.

    Every helper performs its UI work through the driver and emits matching
    timeline events. Under virtual time, waits advance the collector's clock
    and only sleep for the short settle period the UI needs to render.
    """

    def __init__(
        self,
        driver: AutomationDriver,
        collector: TimelineCollector,
        *,
        config: RenderConfig | None = None,
        grabber: FrameGrabber | None = None,
        pregenerated: Sequence[NarrationAudio] = (),
        stabilization_timeout_ms: int = DEFAULT_STABILIZATION_TIMEOUT_MS,
        settle_ms: int = SETTLE_MS,
    ) -> None:
        """Initialize the helpers.

        Args:
            driver: UI automation driver.
            collector: Started collector receiving the events.
            config: Pacing and viewport configuration.
            grabber: Running frame grabber, when frames are captured.
            pregenerated: Synthesized narration audio, consumed in order.
            stabilization_timeout_ms: How long to wait for an element.
            settle_ms: Real time to let the UI render under virtual time.
        """
        self.driver = driver
        self.collector = collector
        self.config = config or RenderConfig()
        self.grabber = grabber
        self.pregenerated = tuple(pregenerated)
        self.stabilization_timeout_ms = stabilization_timeout_ms
        self.settle_ms = settle_ms
        self.narrations_consumed = 0
        self.narration_texts: list[str] = []
        self._cursor = self.config.viewport.center

    @property
    def virtual_time(self) -> bool:
        """Whether waits advance a virtual clock instead of sleeping."""
        return self.collector.clock.is_virtual

    def _scaled(self, ms: float) -> int:
        return round(ms * self.config.pacing_multiplier)

    async def _timed_wait(self, ms: float, settle_ms: int | None = None) -> None:
        if self.virtual_time:
            self.collector.advance(ms)
            settle = self.settle_ms if settle_ms is None else settle_ms
            if settle > 0:
                await asyncio.sleep(settle / 1000)
        else:
            await asyncio.sleep(ms / 1000)

    async def _capture_frame(self) -> str | None:
        if self.grabber is None:
            return None
        image = await self.driver.screenshot()
        return self.grabber.submit(image, self.collector.elapsed())

    async def _emit_narration(self, text: str) -> None:
        audio: NarrationAudio | None = None
        if self.narrations_consumed < len(self.pregenerated):
            audio = self.pregenerated[self.narrations_consumed]
        self.narrations_consumed += 1
        self.narration_texts.append(text)

        spoken_ms = audio.duration_ms if audio else estimate_narration_ms(text)
        # Never shorter than the narration itself; pacing adds breathing room
        padding = round(spoken_ms * self.config.narration_overlap * self.config.pacing_multiplier)
        wait_ms = round(spoken_ms) + padding

        event: dict[str, Any] = {"type": "narration", "text": text}
        if audio:
            event["audio_file"] = audio.audio_file
            event["audio_duration_ms"] = audio.duration_ms
        self.collector.emit(event)
        self.collector.emit(
            {"type": "wait", "duration_ms": wait_ms, "reason": WaitReason.NARRATION_SYNC}
        )
        await self._timed_wait(wait_ms, 0)

    async def _resolve_target(self, selector: str) -> tuple[Point, BoundingBox | None]:
        timeout_ms = self.stabilization_timeout_ms
        try:
            await asyncio.wait_for(
                self.driver.wait_for_visible(selector, timeout_ms), timeout_ms / 1000
            )
        except TimeoutError as e:
            raise StabilizationTimeoutError(selector, timeout_ms) from e

        box = await self.driver.bounding_box(selector)
        if box is None:
            return self._cursor, None
        return box.center, box

    async def _move_cursor_to(self, target: Point) -> None:
        move_ms = calculate_move_duration(self._cursor, target, self.config.pacing_multiplier)
        if move_ms <= 0:
            self._cursor = target
            return
        self.collector.emit(
            {
                "type": "cursor_target",
                "from_x": self._cursor.x,
                "from_y": self._cursor.y,
                "to_x": target.x,
                "to_y": target.y,
                "move_duration_ms": move_ms,
                "easing": "bezier",
            }
        )
        await self._timed_wait(move_ms, 0)
        self._cursor = target

    async def _record_action(
        self,
        action: ActionType,
        selector: str,
        started_ms: int,
        duration_ms: float,
        box: BoundingBox | None,
        value: str | None = None,
    ) -> None:
        await self._timed_wait(self._scaled(POST_ACTION_DELAY_MS))
        snapshot = await self._capture_frame()
        event: dict[str, Any] = {
            "type": "action",
            "timestamp_ms": started_ms,
            "action": action,
            "selector": selector,
            "duration_ms": duration_ms,
            "bounding_box": box,
            "settled_at_ms": self.collector.elapsed(),
            "settled_snapshot": snapshot,
        }
        if value is not None:
            event["value"] = value
        self.collector.emit(event)

    async def _approach(
        self, selector: str, narration: str | None
    ) -> tuple[int, BoundingBox | None]:
        if narration:
            await self._emit_narration(narration)
        target, box = await self._resolve_target(selector)
        await self._move_cursor_to(target)
        return self.collector.elapsed(), box

    async def scene(
        self,
        title: str,
        description: str | None = None,
        slide: SlideConfig | Mapping[str, Any] | None = None,
    ) -> None:
        """Mark a scene boundary, optionally shown as a slide."""
        event: dict[str, Any] = {"type": "scene", "title": title}
        if description is not None:
            event["description"] = description
        if slide is not None:
            event["slide"] = slide
        self.collector.emit(event)

    async def navigate(self, url: str, narration: str | None = None) -> None:
        """Load ``url`` and wait for the page to settle."""
        if narration:
            await self._emit_narration(narration)
        started_ms = self.collector.elapsed()
        await self.driver.goto(url)
        snapshot = await self._capture_frame()
        self.collector.emit(
            {
                "type": "action",
                "timestamp_ms": started_ms,
                "action": ActionType.NAVIGATE,
                "selector": url,
                "duration_ms": 0,
                "bounding_box": None,
                "settled_at_ms": self.collector.elapsed(),
                "settled_snapshot": snapshot,
            }
        )
        wait_ms = self._scaled(PAGE_LOAD_WAIT_MS)
        self.collector.emit(
            {"type": "wait", "duration_ms": wait_ms, "reason": WaitReason.PAGE_LOAD}
        )
        await self._timed_wait(wait_ms)

    async def click(self, selector: str, narration: str | None = None) -> None:
        """Move the cursor to an element and click it."""
        started_ms, box = await self._approach(selector, narration)
        await self.driver.click(selector)
        await self._record_action(ActionType.CLICK, selector, started_ms, CLICK_DURATION_MS, box)

    async def dblclick(self, selector: str, narration: str | None = None) -> None:
        """Move the cursor to an element and double-click it."""
        started_ms, box = await self._approach(selector, narration)
        await self.driver.click(selector, click_count=2)
        await self._record_action(ActionType.DBLCLICK, selector, started_ms, CLICK_DURATION_MS, box)

    async def fill(self, selector: str, value: str, narration: str | None = None) -> None:
        """Click into a field and type ``value`` one character at a time."""
        started_ms, box = await self._approach(selector, narration)
        char_delay_ms = self._scaled(CHAR_TYPE_DELAY_MS)
        await self.driver.click(selector)
        await self.driver.fill(selector, value, char_delay_ms)
        typing_ms = len(value) * char_delay_ms
        if self.virtual_time:
            self.collector.advance(typing_ms)
        await self._record_action(ActionType.FILL, selector, started_ms, typing_ms, box, value)

    async def select(self, selector: str, value: str, narration: str | None = None) -> None:
        """Choose ``value`` in a select element."""
        started_ms, box = await self._approach(selector, narration)
        await self.driver.select_option(selector, value)
        await self._record_action(
            ActionType.SELECT, selector, started_ms, CLICK_DURATION_MS, box, value
        )

    async def hover(self, selector: str, narration: str | None = None) -> None:
        """Move the cursor over an element."""
        started_ms, box = await self._approach(selector, narration)
        await self.driver.hover(selector)
        await self._record_action(ActionType.HOVER, selector, started_ms, HOVER_DURATION_MS, box)

    async def press(self, key: str, narration: str | None = None) -> None:
        """Press a keyboard key."""
        if narration:
            await self._emit_narration(narration)
        started_ms = self.collector.elapsed()
        await self.driver.press(key)
        await self._record_action(ActionType.PRESS, key, started_ms, PRESS_DURATION_MS, None)

    async def wait(self, ms: int) -> None:
        """Pause for ``ms`` milliseconds of captured time."""
        self.collector.emit({"type": "wait", "duration_ms": ms, "reason": WaitReason.PACING})
        await self._capture_frame()
        await self._timed_wait(ms, 0)

    async def narrate(self, text: str) -> None:
        """Speak ``text`` without interacting with the page."""
        await self._emit_narration(text)

    async def transition(
        self,
        kind: TransitionKind = TransitionKind.FADE,
        duration_ms: int = DEFAULT_TRANSITION_MS,
    ) -> None:
        """Insert an animated transition at the current point of the capture."""
        snapshot = await self._capture_frame()
        event: dict[str, Any] = {
            "type": "transition",
            "transition": kind,
            "duration_ms": duration_ms,
        }
        if snapshot is not None:
            event["page_snapshot"] = snapshot
        self.collector.emit(event)
        logger.debug("Transition %s (%dms) queued", kind, duration_ms)
