"""
Body Region
===========

The body region is the vertical span of a frame between the header and
footer bands. It is the only area eligible for slicing.
"""

from dataclasses import dataclass

from frameslice.errors import InvalidBodyRegionError
from frameslice.geometry.intervals import clamp, to_int


@dataclass(frozen=True, slots=True)
class BodyRegion:
    """
    Half-open span [top, bottom) of frame rows.

    Attributes:
        top: First body row (header height)
        bottom: One past the last body row (frame height - footer height)
    """

    top: int
    bottom: int

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.bottom <= self.top


def compute_body_region(
    frame_height: int,
    header_height: float = 0,
    footer_height: float = 0,
) -> BodyRegion:
    """
    Compute the body region, clamping each band into [0, frame_height].

    The result may be empty; use require_body_region when an empty body
    must fail the request.
    """
    header = int(clamp(to_int(header_height, 0), 0, frame_height))
    footer = int(clamp(to_int(footer_height, 0), 0, frame_height))
    return BodyRegion(top=header, bottom=frame_height - footer)


def require_body_region(
    frame_height: int,
    header_height: float = 0,
    footer_height: float = 0,
) -> BodyRegion:
    """
    Compute the body region or fail.

    Raises:
        InvalidBodyRegionError: If header and footer leave no rows
    """
    body = compute_body_region(frame_height, header_height, footer_height)
    if body.is_empty:
        raise InvalidBodyRegionError(
            f"Invalid header/footer crop. Body region is empty "
            f"(top={body.top}, bottom={body.bottom})."
        )
    return body
