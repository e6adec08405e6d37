"""
FrameSlice
==========

Turns a single design-canvas frame into cropped, compressed and uploaded
image slices for email templates.

Components:
    - geometry: Body region, auto-suggestion, manual normalization, rescaling
    - imaging: Source decoding, extraction and adaptive compression
    - upload: Credential resolution and the image API clients
    - pipeline: Slice planning and the sequential upload run

Example:
    from frameslice.config import settings
    from frameslice.models import PushRequest

    # The service is started via the FastAPI application
    # See main.py for entry point
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
