"""Transition face style schemas.

Styles are kept numeric so they can be inspected and interpolated; ``to_css``
renders them into the property names a browser-based renderer expects.
"""

from reelwright.common.base_reelwright_model import BaseReelwrightModel


def css_number(value: float) -> str:
    """Format a number the way it appears in CSS, without ``-0`` or trailing zeros."""
    # Adding 0.0 turns -0.0 into 0.0
    rounded = round(value, 4) + 0.0
    return f"{rounded:g}"


class TransformOp(BaseReelwrightModel):
    """One CSS transform function, e.g. ``translateX(-50%)``."""

    function: str
    value: float
    unit: str = ""

    def to_css(self) -> str:
        """Render as a CSS transform function."""
        return f"{self.function}({css_number(self.value)}{self.unit})"


class FaceStyle(BaseReelwrightModel):
    """Style of one face (exit, entrance or container) of a transition."""

    opacity: float | None = None
    # top, right, bottom, left insets in percent
    clip_inset: tuple[float, float, float, float] | None = None
    transform: tuple[TransformOp, ...] = ()
    transform_style: str | None = None

    def op(self, function: str) -> TransformOp | None:
        """Return the first transform operation named ``function``."""
        return next((op for op in self.transform if op.function == function), None)

    def to_css(self) -> dict[str, str | float]:
        """Render as a CSS property mapping."""
        css: dict[str, str | float] = {}
        if self.opacity is not None:
            css["opacity"] = self.opacity
        if self.clip_inset is not None:
            insets = " ".join("0" if v == 0 else f"{css_number(v)}%" for v in self.clip_inset)
            css["clipPath"] = f"inset({insets})"
        if self.transform:
            css["transform"] = " ".join(op.to_css() for op in self.transform)
        if self.transform_style is not None:
            css["transformStyle"] = self.transform_style
        return css


class TransitionStyles(BaseReelwrightModel):
    """Face styles for one transition frame."""

    exit: FaceStyle
    entrance: FaceStyle
    # Second exit face for door-style kinds
    exit2: FaceStyle | None = None
    backdrop: str | None = None
    # Wrapper carrying a shared 3D rotation
    container: FaceStyle | None = None
    # Shared perspective distance for 3D kinds, in pixels
    perspective: float | None = None
