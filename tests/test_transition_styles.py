"""Tests for transition style geometry."""

from collections.abc import Callable

import pytest

from reelwright.composition.schemas import TransitionStyles, css_number
from reelwright.composition.transition_styles import (
    BACKDROP_COLOR,
    ease_in_out,
    get_transition_styles,
)
from reelwright.timeline.schemas import TransitionKind

Measure = Callable[[TransitionStyles], float]


def _op(face: str, function: str) -> Measure:
    def measure(styles: TransitionStyles) -> float:
        op = getattr(styles, face).op(function)
        assert op is not None
        return op.value

    return measure


# One value per kind that sweeps from its start to its end value
MEASURES: dict[TransitionKind, tuple[Measure, float, float]] = {
    TransitionKind.FADE: (lambda s: s.entrance.opacity, 0, 1),
    TransitionKind.WIPE: (lambda s: s.exit.clip_inset[3], 0, 100),
    TransitionKind.SLIDE_UP: (_op("entrance", "translateY"), 100, 0),
    TransitionKind.SLIDE_LEFT: (_op("exit", "translateX"), 0, -100),
    TransitionKind.ZOOM: (_op("exit", "scale"), 1, 1.5),
    TransitionKind.DOORWAY: (_op("entrance", "scale"), 0.33, 1),
    TransitionKind.SWAP: (_op("exit", "rotateY"), 0, 45),
    TransitionKind.CUBE: (_op("container", "rotateY"), 0, -90),
}

SAMPLES = [step / 100 for step in range(101)]


def test_ease_in_out_fixed_points() -> None:
    """Easing preserves the endpoints and the midpoint."""
    assert (ease_in_out(0), ease_in_out(0.5), ease_in_out(1)) == (0, 0.5, 1)
    assert ease_in_out(0.25) < 0.25 < 0.75 < ease_in_out(0.75)


@pytest.mark.parametrize("kind", list(TransitionKind))
def test_endpoints(kind: TransitionKind) -> None:
    """Progress 0 and 1 land exactly on each kind's start and end geometry."""
    measure, start, end = MEASURES[kind]

    assert measure(get_transition_styles(kind, 0)) == pytest.approx(start)
    assert measure(get_transition_styles(kind, 1)) == pytest.approx(end)


@pytest.mark.parametrize("kind", list(TransitionKind))
def test_progress_is_clamped(kind: TransitionKind) -> None:
    """Out-of-range progress behaves like the nearest endpoint."""
    assert get_transition_styles(kind, -0.5) == get_transition_styles(kind, 0)
    assert get_transition_styles(kind, 1.5) == get_transition_styles(kind, 1)


@pytest.mark.parametrize("kind", list(TransitionKind))
def test_monotonic_and_continuous(kind: TransitionKind) -> None:
    """The measured value moves one way only, in small steps."""
    measure, start, end = MEASURES[kind]
    values = [measure(get_transition_styles(kind, p)) for p in SAMPLES]
    span = abs(end - start)
    steps = [b - a for a, b in zip(values, values[1:])]

    if end > start:
        assert all(step >= -1e-9 for step in steps)
    else:
        assert all(step <= 1e-9 for step in steps)
    # Eased slope peaks at 1.5, so one 1% step moves at most 1.5% of the span
    assert max(abs(step) for step in steps) <= span * 0.015 + 1e-9


def test_fade_crossfades() -> None:
    """Fade opacities always sum to one."""
    for progress in SAMPLES:
        styles = get_transition_styles(TransitionKind.FADE, progress)
        assert styles.exit.opacity + styles.entrance.opacity == pytest.approx(1)


def test_doorway_halves_open_outwards() -> None:
    """The two exit halves move in opposite directions."""
    styles = get_transition_styles(TransitionKind.DOORWAY, 1)

    assert styles.exit.op("translateX").value == pytest.approx(-50)
    assert styles.exit2 is not None
    assert styles.exit2.op("translateX").value == pytest.approx(50)


@pytest.mark.parametrize(
    ("kind", "has_backdrop"),
    [
        (TransitionKind.FADE, False),
        (TransitionKind.WIPE, False),
        (TransitionKind.DOORWAY, True),
        (TransitionKind.SWAP, True),
        (TransitionKind.CUBE, True),
    ],
)
def test_backdrop(kind: TransitionKind, has_backdrop: bool) -> None:
    """Kinds that expose the area behind the faces paint it black."""
    backdrop = get_transition_styles(kind, 0.5).backdrop

    assert backdrop == (BACKDROP_COLOR if has_backdrop else None)


def test_cube_depth_follows_viewport_width() -> None:
    """The cube's half-depth is half the viewport width, 1920 by default."""
    default = get_transition_styles(TransitionKind.CUBE, 0)
    narrow = get_transition_styles(TransitionKind.CUBE, 0, viewport_width=1280)

    assert default.container.op("translateZ").value == -960
    assert narrow.container.op("translateZ").value == -640
    assert narrow.perspective == 2560


def test_css_rendering() -> None:
    """Styles render to CSS property strings without negative zero."""
    wipe = get_transition_styles(TransitionKind.WIPE, 1).exit.to_css()
    slide = get_transition_styles(TransitionKind.SLIDE_LEFT, 0).exit.to_css()
    cube = get_transition_styles(TransitionKind.CUBE, 0, viewport_width=1000).container.to_css()

    assert wipe == {"clipPath": "inset(0 0 0 100%)"}
    assert slide == {"transform": "translateX(0%)"}
    assert cube == {
        "transform": "translateZ(-500px) rotateY(0deg)",
        "transformStyle": "preserve-3d",
    }
    assert css_number(-0.0) == "0"
    assert css_number(0.33333333) == "0.3333"
