"""
Slice Pipeline Orchestrator
===========================

Runs extraction -> compression -> upload over an ordered slice list.

Per slice, in order:
    1. Rescale the logical rectangle onto the source bitmap
    2. Extract the exact pixel region
    3. Detect transparency on the extracted pixels
    4. Compress (lossless PNG or budgeted JPEG)
    5. Upload as "{batch_name}-slice-{index}" (1-based)
    6. Record the URL and size metrics

Design Rules:
    - Strictly sequential: slice i+1 is not extracted before slice i's
      upload has finished
    - Pixel work runs in a worker thread so the event loop stays free
      for other requests
    - The first failure aborts the batch; no partial results are returned
    - The "-slice-N" name suffix is a contract with downstream consumers
"""

import asyncio
import logging
import time
from typing import List, Sequence

import numpy as np

from frameslice.errors import SlicePipelineError
from frameslice.geometry.rescale import scale_rect
from frameslice.imaging.compressor import AdaptiveCompressor
from frameslice.imaging.decoder import decode_source_image, extract_region, has_transparency
from frameslice.models.geometry import SliceRect
from frameslice.models.input import PushRequest
from frameslice.models.output import PushResponse, SliceResult
from frameslice.pipeline.planner import plan_slices
from frameslice.upload.client import ImageUploader


logger = logging.getLogger(__name__)


def slice_name(batch_name: str, index: int) -> str:
    """Upload name of the index-th (1-based) slice of a batch."""
    return f"{batch_name}-slice-{index}"


class SlicePipeline:
    """
    Sequential slice processor bound to one uploader.

    A pipeline holds no per-invocation state, so one instance may serve
    several concurrent invocations as long as its uploader can.

    Attributes:
        compressor: Slice encoder
        uploader: Upload backend bound to the invocation's credential

    Example:
        pipeline = SlicePipeline(AdaptiveCompressor(), MockImageUploader())
        response = await pipeline.push(request, account_id="acme", mode="v11-upload-only")
    """

    def __init__(self, compressor: AdaptiveCompressor, uploader: ImageUploader) -> None:
        self.compressor = compressor
        self.uploader = uploader

    async def run(
        self,
        source: np.ndarray,
        rects: Sequence[SliceRect],
        pixel_ratio: float,
        batch_name: str,
    ) -> List[SliceResult]:
        """
        Process every rectangle in order.

        Args:
            source: Decoded source bitmap
            rects: Logical rectangles in output order
            pixel_ratio: Source pixels per logical pixel
            batch_name: Upload name prefix

        Returns:
            One SliceResult per rectangle, same order

        Raises:
            SlicePipelineError: The first slice failure, annotated with its index
        """
        source_height, source_width = source.shape[:2]
        total = len(rects)
        results = []

        for index, rect in enumerate(rects, start=1):
            name = slice_name(batch_name, index)
            started = time.perf_counter()

            try:
                pixel_rect = scale_rect(rect, pixel_ratio, source_width, source_height)
                region = await asyncio.to_thread(extract_region, source, pixel_rect)
                alpha = has_transparency(region)
                compressed = await asyncio.to_thread(self.compressor.compress, region, alpha)
                image_url = await self.uploader.upload_image(
                    name, compressed.data, compressed.mime_type
                )
            except SlicePipelineError as e:
                logger.error(f"Slice {index}/{total} ({name}) failed: {e}")
                raise type(e)(f"Slice {index}: {e}") from e

            results.append(
                SliceResult.build(
                    index=index,
                    rect=rect,
                    image_url=image_url,
                    mime_type=compressed.mime_type,
                    jpeg_quality=compressed.quality,
                    original_kb=compressed.original_kb,
                    compressed_kb=compressed.compressed_kb,
                )
            )

            logger.info(
                f"Slice {index}/{total}: {pixel_rect.width}x{pixel_rect.height}px, "
                f"{compressed.mime_type} q={compressed.quality}, "
                f"{compressed.original_kb}KB -> {compressed.compressed_kb}KB "
                f"in {time.perf_counter() - started:.2f}s"
            )

        return results

    async def push(self, request: PushRequest, account_id: str, mode: str) -> PushResponse:
        """
        Plan, process and upload a full push request.

        Args:
            request: Validated push request
            account_id: Account the credential was resolved for
            mode: Service mode label echoed in the response

        Returns:
            PushResponse with batch metadata and ordered slices
        """
        plan = plan_slices(request)
        source = await asyncio.to_thread(decode_source_image, request.image_base64)
        batch_name = request.resolved_batch_name

        logger.info(
            f"Push {batch_name!r}: {len(plan.rects)} slice(s), "
            f"source={source.shape[1]}x{source.shape[0]}, pixel_ratio={request.pixel_ratio}"
        )

        slices = await self.run(source, plan.rects, request.pixel_ratio, batch_name)

        return PushResponse(
            account_id=account_id,
            batch_name=batch_name,
            frame_name=request.frame_name,
            slice_count=len(slices),
            mode=mode,
            manual_mode=plan.manual_mode,
            target_slice_kb=self.compressor.target_kb,
            body_top=plan.body.top,
            body_bottom=plan.body.bottom,
            slices=slices,
        )
