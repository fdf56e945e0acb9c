"""Smooth cursor paths between discrete pointer targets."""

import math
from collections.abc import Sequence

import numpy as np

from reelwright.composition.schemas import CursorPath, Waypoint
from reelwright.timeline.schemas import CursorTargetEvent, Point, Viewport

DEFAULT_WAYPOINT_COUNT = 20
ARC_OFFSET_RATIO = 0.10
MAX_ARC_OFFSET_PX = 50.0
DEFAULT_VIEWPORT = Viewport(width=1280, height=720)


def bezier_control_points(start: Point, end: Point) -> tuple[Point, Point]:
    """Place control points for a single arc from ``start`` to ``end``.

    Both control points sit on the same side of the straight line, at 1/3 and
    2/3 along it, so the curve bows once and never forms an S. The side is
    taken from the sign of the horizontal displacement.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    distance = math.hypot(dx, dy)
    offset = min(distance * ARC_OFFSET_RATIO, MAX_ARC_OFFSET_PX)

    # Unit normal; zero-length moves get a zero normal instead of NaN
    scale = distance or 1.0
    nx = -dy / scale
    ny = dx / scale
    side = 1.0 if dx >= 0 else -1.0

    return (
        Point(x=start.x + dx / 3 + nx * offset * side, y=start.y + dy / 3 + ny * offset * side),
        Point(
            x=start.x + dx * 2 / 3 + nx * offset * side,
            y=start.y + dy * 2 / 3 + ny * offset * side,
        ),
    )


def compute_waypoints(
    start: Point,
    end: Point,
    count: int = DEFAULT_WAYPOINT_COUNT,
) -> tuple[Waypoint, ...]:
    """Sample a cubic bezier arc into ``count`` waypoints.

    Args:
        start: Where the cursor starts.
        end: Where the cursor ends.
        count: Number of waypoints, at least 2. ``t`` runs from exactly 0 to
            exactly 1 in uniform steps.

    Returns:
        Waypoints from ``start`` to ``end``.
    """
    if count < 2:
        msg = f"count must be at least 2, got {count}"
        raise ValueError(msg)

    cp1, cp2 = bezier_control_points(start, end)
    t = np.linspace(0.0, 1.0, count)
    u = 1.0 - t
    b0 = u**3
    b1 = 3 * u**2 * t
    b2 = 3 * u * t**2
    b3 = t**3
    xs = b0 * start.x + b1 * cp1.x + b2 * cp2.x + b3 * end.x
    ys = b0 * start.y + b1 * cp1.y + b2 * cp2.y + b3 * end.y

    return tuple(
        Waypoint(x=float(x), y=float(y), t=float(ti)) for x, y, ti in zip(xs, ys, t, strict=True)
    )


def precompute_cursor_paths(
    events: Sequence[CursorTargetEvent],
    count: int = DEFAULT_WAYPOINT_COUNT,
) -> tuple[CursorPath, ...]:
    """Attach waypoints to every cursor movement, once, before rendering."""
    return tuple(
        CursorPath(event=event, waypoints=compute_waypoints(event.start, event.end, count))
        for event in events
    )


def get_cursor_position(
    paths: Sequence[CursorPath],
    time_ms: float,
    viewport: Viewport | None = None,
) -> Point:
    """Return where the cursor is at ``time_ms``.

    During a movement ``[timestamp, timestamp + move_duration)`` this is the
    nearest preceding waypoint. Otherwise the cursor rests at the destination
    of the most recently completed movement, or at the viewport center when
    nothing has moved yet.
    """
    last_completed: CursorPath | None = None
    for path in paths:
        event = path.event
        if event.timestamp_ms <= time_ms < event.end_ms:
            progress = (time_ms - event.timestamp_ms) / event.move_duration_ms
            last_index = len(path.waypoints) - 1
            index = min(last_index, math.floor(progress * last_index))
            waypoint = path.waypoints[index]
            return Point(x=waypoint.x, y=waypoint.y)
        if event.end_ms <= time_ms and (
            last_completed is None or event.end_ms >= last_completed.event.end_ms
        ):
            last_completed = path

    if last_completed is not None:
        return last_completed.event.end
    return (viewport or DEFAULT_VIEWPORT).center
