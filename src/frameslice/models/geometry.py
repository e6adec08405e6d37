"""
Geometry Models
===============

Frame and rectangle shapes exchanged with the design tool.

Coordinate System:
    All values are LOGICAL coordinates: pixels at 1x, the design canvas's
    native resolution. Origin is the top-left of the frame, y grows
    downward. The exported bitmap is usually larger by the pixel ratio;
    see geometry.rescale for the mapping.

Example Frame:
    {
        "width": 600,
        "height": 2400,
        "children": [
            {"y": 0, "width": 600, "height": 180},
            {"y": 200, "width": 600, "height": 900, "visible": true}
        ]
    }
"""

from typing import List

from pydantic import ConfigDict, Field

from frameslice.models.base import CamelModel


class ChildBox(CamelModel):
    """
    Bounding box of a direct child of the frame.

    Only the vertical span and width matter for slicing, so x is not
    carried.

    Attributes:
        y: Top edge relative to the frame's top edge
        width: Child width
        height: Child height
        visible: Hidden children are ignored
    """

    y: float = Field(..., description="Top edge relative to the frame")
    width: float = Field(..., ge=0, description="Child width")
    height: float = Field(..., ge=0, description="Child height")
    visible: bool = Field(default=True, description="Whether the child is visible")


class FrameSpec(CamelModel):
    """
    Read-only description of the frame being sliced.

    Attributes:
        width: Logical frame width
        height: Logical frame height
        children: Direct children in document order
    """

    width: int = Field(..., gt=0, description="Logical frame width")
    height: int = Field(..., gt=0, description="Logical frame height")
    children: List[ChildBox] = Field(
        default_factory=list,
        description="Direct children used for auto-suggestion",
    )


class SliceRect(CamelModel):
    """
    One slice rectangle in logical coordinates.

    The url/label/alt fields are opaque to the pipeline and travel with
    the rectangle through to the result.
    """

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    url: str = Field(default="", description="Click-through link")
    label: str = Field(default="", description="Caller label")
    alt: str = Field(default="", description="Alt text")

    @property
    def bottom(self) -> int:
        return self.y + self.height
