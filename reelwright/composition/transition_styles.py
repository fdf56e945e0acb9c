"""Progress-to-style geometry for each transition kind.

Every kind receives eased progress: at 0 the exit face is at rest and the
entrance hidden or off position, at 1 the reverse. All values are affine in
the eased progress, so they move continuously and monotonically.
"""

from collections.abc import Callable

from reelwright.composition.schemas import FaceStyle, TransformOp, TransitionStyles
from reelwright.timeline.schemas import TransitionKind

BACKDROP_COLOR = "#000000"
DEFAULT_VIEWPORT_WIDTH = 1920


def ease_in_out(t: float) -> float:
    """Symmetric ease-in-out cubic."""
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


def _fade(p: float) -> TransitionStyles:
    return TransitionStyles(
        exit=FaceStyle(opacity=1 - p),
        entrance=FaceStyle(opacity=p),
    )


def _wipe(p: float) -> TransitionStyles:
    # Entrance sits underneath and is revealed as the exit is clipped away
    return TransitionStyles(
        exit=FaceStyle(clip_inset=(0, 0, 0, p * 100)),
        entrance=FaceStyle(),
    )


def _slide_up(p: float) -> TransitionStyles:
    return TransitionStyles(
        exit=FaceStyle(transform=(TransformOp(function="translateY", value=-p * 100, unit="%"),)),
        entrance=FaceStyle(
            transform=(TransformOp(function="translateY", value=(1 - p) * 100, unit="%"),)
        ),
    )


def _slide_left(p: float) -> TransitionStyles:
    return TransitionStyles(
        exit=FaceStyle(transform=(TransformOp(function="translateX", value=-p * 100, unit="%"),)),
        entrance=FaceStyle(
            transform=(TransformOp(function="translateX", value=(1 - p) * 100, unit="%"),)
        ),
    )


def _zoom(p: float) -> TransitionStyles:
    return TransitionStyles(
        exit=FaceStyle(
            opacity=1 - p,
            transform=(TransformOp(function="scale", value=1 + p * 0.5),),
        ),
        entrance=FaceStyle(
            opacity=p,
            transform=(TransformOp(function="scale", value=0.5 + p * 0.5),),
        ),
    )


def _doorway(p: float) -> TransitionStyles:
    # Two halves of the exit content open like doors over the growing entrance
    return TransitionStyles(
        exit=FaceStyle(
            clip_inset=(0, 50, 0, 0),
            transform=(TransformOp(function="translateX", value=-p * 50, unit="%"),),
        ),
        exit2=FaceStyle(
            clip_inset=(0, 0, 0, 50),
            transform=(TransformOp(function="translateX", value=p * 50, unit="%"),),
        ),
        entrance=FaceStyle(transform=(TransformOp(function="scale", value=0.33 + p * 0.67),)),
        backdrop=BACKDROP_COLOR,
    )


def _swap(p: float) -> TransitionStyles:
    return TransitionStyles(
        exit=FaceStyle(
            transform=(
                TransformOp(function="perspective", value=1200, unit="px"),
                TransformOp(function="translateX", value=-p * 100, unit="%"),
                TransformOp(function="rotateY", value=p * 45, unit="deg"),
                TransformOp(function="scale", value=1 - p * 0.35),
            )
        ),
        entrance=FaceStyle(
            transform=(
                TransformOp(function="perspective", value=1200, unit="px"),
                TransformOp(function="translateX", value=(1 - p) * 100, unit="%"),
                TransformOp(function="rotateY", value=-(1 - p) * 45, unit="deg"),
                TransformOp(function="scale", value=0.65 + p * 0.35),
            )
        ),
        backdrop=BACKDROP_COLOR,
    )


def _cube(p: float, viewport_width: float = DEFAULT_VIEWPORT_WIDTH) -> TransitionStyles:
    # Both faces are fixed on a cube; the container turns it a quarter
    half = viewport_width / 2
    return TransitionStyles(
        perspective=viewport_width * 2,
        container=FaceStyle(
            transform_style="preserve-3d",
            transform=(
                TransformOp(function="translateZ", value=-half, unit="px"),
                TransformOp(function="rotateY", value=-p * 90, unit="deg"),
            ),
        ),
        exit=FaceStyle(transform=(TransformOp(function="translateZ", value=half, unit="px"),)),
        entrance=FaceStyle(
            transform=(
                TransformOp(function="rotateY", value=90, unit="deg"),
                TransformOp(function="translateZ", value=half, unit="px"),
            )
        ),
        backdrop=BACKDROP_COLOR,
    )


STRATEGIES: dict[TransitionKind, Callable[[float], TransitionStyles]] = {
    TransitionKind.FADE: _fade,
    TransitionKind.WIPE: _wipe,
    TransitionKind.SLIDE_UP: _slide_up,
    TransitionKind.SLIDE_LEFT: _slide_left,
    TransitionKind.ZOOM: _zoom,
    TransitionKind.DOORWAY: _doorway,
    TransitionKind.SWAP: _swap,
    TransitionKind.CUBE: _cube,
}


def get_transition_styles(
    kind: TransitionKind,
    progress: float,
    viewport_width: float | None = None,
) -> TransitionStyles:
    """Return face styles for a transition at ``progress``.

    Args:
        kind: The transition kind.
        progress: Linear progress, clamped to ``[0, 1]`` and eased.
        viewport_width: Width used for the cube's depth; defaults to 1920.

    Returns:
        Styles for the exit face, entrance face and optional extras.
    """
    eased = ease_in_out(max(0.0, min(1.0, progress)))
    if kind is TransitionKind.CUBE and viewport_width:
        return _cube(eased, viewport_width)
    return STRATEGIES[kind](eased)
