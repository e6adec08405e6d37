"""
Rectangle Rescaler
==================

Maps logical rectangles onto the exported bitmap.

The export is rendered at pixel_ratio, but its real size can drift a
pixel or two from logical_size * pixel_ratio because of rounding in the
exporter. The mapping therefore clamps against the ACTUAL bitmap size,
so every extraction request is satisfiable.
"""

from dataclasses import dataclass

from frameslice.geometry.intervals import clamp, round_half_up
from frameslice.models.geometry import SliceRect


@dataclass(frozen=True, slots=True)
class PixelRect:
    """
    Rectangle in source bitmap pixels.

    Attributes:
        left: Leftmost column
        top: Topmost row
        width: Column count, at least 1
        height: Row count, at least 1
    """

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


def _px(value: float, scale: float) -> int:
    return max(0, round_half_up(float(value) * scale))


def scale_rect(
    rect: SliceRect,
    scale: float,
    source_width: int,
    source_height: int,
) -> PixelRect:
    """
    Scale a logical rectangle and clamp it into the source bitmap.

    Args:
        rect: Rectangle in logical coordinates
        scale: Pixel ratio of the export (> 0)
        source_width: Actual bitmap width
        source_height: Actual bitmap height

    Returns:
        PixelRect fully inside [0, source_width) x [0, source_height)
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    left = int(clamp(_px(rect.x, scale), 0, max(0, source_width - 1)))
    top = int(clamp(_px(rect.y, scale), 0, max(0, source_height - 1)))

    desired_w = max(1, _px(rect.width, scale))
    desired_h = max(1, _px(rect.height, scale))

    width = int(clamp(desired_w, 1, max(1, source_width - left)))
    height = int(clamp(desired_h, 1, max(1, source_height - top)))

    return PixelRect(left=left, top=top, width=width, height=height)
