"""Capture session: run a scenario against a driver and persist its timeline."""

import logging
import shutil
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from reelwright.capture.driver import AutomationDriver
from reelwright.capture.frame_grabber import FRAMES_DIRNAME, FrameGrabber
from reelwright.capture.helpers import ScenarioHelpers
from reelwright.capture.narration import ScenarioFn, validate_narration_count
from reelwright.capture.schemas import CaptureOptions, CaptureResult
from reelwright.config import RenderConfig, get_render_config
from reelwright.timeline.clock import SystemClock, VirtualClock
from reelwright.timeline.collector import TimelineCollector
from reelwright.timeline.persistence import save_timeline

logger = logging.getLogger(__name__)

DriverFactory = Callable[[], Awaitable[AutomationDriver]]


@asynccontextmanager
async def open_driver(driver_factory: DriverFactory) -> AsyncIterator[AutomationDriver]:
    """Acquire a driver and close it however the block exits."""
    driver = await driver_factory()
    try:
        yield driver
    finally:
        await driver.close()


def captured_duration_ms(events: tuple[Mapping[str, Any], ...], elapsed_ms: float) -> float:
    """Length of the capture: the latest event end, or the elapsed time if later."""
    latest = float(elapsed_ms)
    for event in events:
        duration = event.get("duration_ms") or event.get("move_duration_ms") or 0
        latest = max(latest, event["timestamp_ms"] + duration)
    return latest


async def run_capture(
    scenario: ScenarioFn,
    driver_factory: DriverFactory,
    options: CaptureOptions | None = None,
    config: RenderConfig | None = None,
) -> CaptureResult:
    """Run one capture session end to end.

    The scenario runs sequentially against the driver while frames are written
    concurrently. The driver is closed on every path. If anything fails, the
    session directory is removed, so no partial timeline is left behind, and
    the error is re-raised.

    Args:
        scenario: Async function driving the UI through ``ScenarioHelpers``.
        driver_factory: Creates the automation driver.
        options: Session options.
        config: Render configuration. Read from the environment when omitted.

    Returns:
        The persisted timeline and where it was written.
    """
    options = options or CaptureOptions()
    config = config or get_render_config()
    session_id = uuid.uuid4().hex[:8]
    session_dir = Path(options.output_dir or config.output_dir) / f"capture-{session_id}"

    collector = TimelineCollector(VirtualClock() if options.virtual_time else SystemClock())
    grabber = FrameGrabber(session_dir / FRAMES_DIRNAME) if options.capture_frames else None

    logger.info(
        "[capture=%s] Starting capture: scenario=%s, virtual_time=%s, frames=%s",
        session_id,
        options.scenario_file or "<inline>",
        options.virtual_time,
        options.capture_frames,
    )

    try:
        session_dir.mkdir(parents=True, exist_ok=True)
        async with open_driver(driver_factory) as driver:
            collector.start()
            if grabber is not None:
                grabber.start()
            helpers = ScenarioHelpers(
                driver,
                collector,
                config=config,
                grabber=grabber,
                pregenerated=options.pregenerated,
                stabilization_timeout_ms=options.stabilization_timeout_ms,
                settle_ms=options.settle_ms,
            )
            try:
                await scenario(helpers)
            finally:
                if grabber is not None:
                    await grabber.close()

        if options.pregenerated:
            validate_narration_count(len(options.pregenerated), helpers.narrations_consumed)

        events = collector.events
        logger.info("[capture=%s] Scenario finished with %d events", session_id, len(events))

        timeline = collector.finalize(
            {
                "test_file": options.test_file,
                "scenario_file": options.scenario_file,
                "recorded_at": datetime.now(UTC),
                "viewport": config.viewport,
                "video_duration_ms": captured_duration_ms(events, collector.elapsed()),
                "video_file": options.video_file,
                "frame_manifest": (grabber.manifest or None) if grabber is not None else None,
            }
        )
        timeline_path = save_timeline(timeline, session_dir)

    except Exception:
        logger.exception("[capture=%s] Capture failed, discarding session", session_id)
        shutil.rmtree(session_dir, ignore_errors=True)
        raise

    logger.info("[capture=%s] Timeline written to %s", session_id, timeline_path)
    return CaptureResult(
        session_id=session_id,
        session_dir=session_dir,
        timeline_path=timeline_path,
        timeline=timeline,
    )
