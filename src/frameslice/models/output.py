"""
Response Models
===============

Output contract of the slice service.

Push Output:
    {
        "ok": true,
        "accountId": "acme",
        "batchName": "Spring Sale",
        "frameName": "Email / Spring",
        "sliceCount": 2,
        "mode": "v11-upload-only",
        "manualMode": false,
        "targetSliceKb": 250,
        "bodyTop": 100,
        "bodyBottom": 1900,
        "slices": [
            {
                "index": 1,
                "x": 0, "y": 100, "width": 1000, "height": 1200,
                "imageUrl": "https://...",
                "url": "", "label": "", "alt": "",
                "mimeType": "image/jpeg",
                "jpegQuality": 75,
                "originalKb": 812.4,
                "compressedKb": 231.77
            }
        ]
    }

Design Rules:
    - Slices are ordered top-to-bottom (auto) or in caller order (manual)
    - index is 1-based and matches the "-slice-N" upload name suffix
    - jpegQuality is null for lossless output
"""

from typing import List, Optional

from pydantic import Field

from frameslice.models.base import CamelModel
from frameslice.models.geometry import SliceRect
from frameslice.models.input import ManualSlice


class SliceResult(CamelModel):
    """
    A rectangle after compression and upload.

    Built once per rectangle by the orchestrator and never modified.
    """

    index: int = Field(..., ge=1, description="1-based position in the batch")
    x: int
    y: int
    width: int
    height: int
    image_url: str = Field(..., description="Public URL of the uploaded image")
    url: str = ""
    label: str = ""
    alt: str = ""
    mime_type: str = Field(..., description="image/png or image/jpeg")
    jpeg_quality: Optional[int] = Field(
        default=None,
        description="Final JPEG quality (null for lossless output)",
    )
    original_kb: float = Field(..., ge=0)
    compressed_kb: float = Field(..., ge=0)

    @classmethod
    def build(
        cls,
        index: int,
        rect: SliceRect,
        image_url: str,
        mime_type: str,
        jpeg_quality: Optional[int],
        original_kb: float,
        compressed_kb: float,
    ) -> "SliceResult":
        return cls(
            index=index,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            image_url=image_url,
            url=rect.url,
            label=rect.label,
            alt=rect.alt,
            mime_type=mime_type,
            jpeg_quality=jpeg_quality,
            original_kb=original_kb,
            compressed_kb=compressed_kb,
        )


class PushResponse(CamelModel):
    """Batch metadata plus the ordered slice results."""

    ok: bool = True
    account_id: str
    batch_name: str
    frame_name: Optional[str] = None
    slice_count: int = Field(..., ge=0)
    mode: str
    manual_mode: bool
    target_slice_kb: float
    body_top: int
    body_bottom: int
    slices: List[SliceResult]


class SuggestResponse(CamelModel):
    """Suggested slices, shaped so they can be sent back as manual slices."""

    ok: bool = True
    count: int = Field(..., ge=0)
    slices: List[ManualSlice]


class AccountsResponse(CamelModel):
    """Account identifiers the service can upload for."""

    ok: bool = True
    accounts: List[str]
