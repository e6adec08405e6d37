#!/usr/bin/env python3
"""
Push Frame Script
=================

Standalone script to push an exported frame to a running FrameSlice
service, the same way the design-tool plugin does.

This script:
    1. Reads a PNG export from disk
    2. Optionally previews the auto-suggested slices locally
    3. POSTs the frame to /api/push
    4. Reports per-slice formats, sizes and URLs

Prerequisites:
    - FrameSlice must be running at the configured URL
    - Install dependencies: pip install -e .

Usage:
    python scripts/push_frame.py export.png --width 600 --height 2400 --pixel-ratio 2
    python scripts/push_frame.py export.png --width 600 --height 2400 --header 120 --dry-run
"""

import argparse
import base64
import logging
import os
import sys
import time

import requests

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from frameslice.geometry.suggester import suggest_slices
from frameslice.models.geometry import FrameSpec


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def preview(args: argparse.Namespace) -> None:
    """Log the slices the service would suggest for this frame."""
    frame = FrameSpec(width=args.width, height=args.height)
    rects = suggest_slices(
        frame,
        header_height=args.header,
        footer_height=args.footer,
        max_slice_height=args.max_slice_height,
    )

    logger.info(f"Suggested {len(rects)} slice(s):")
    for index, rect in enumerate(rects, start=1):
        logger.info(f"  {index}: y={rect.y} height={rect.height}")


def push(args: argparse.Namespace) -> dict:
    """
    Push the frame and return the response body.

    Raises:
        SystemExit: If the service answers with an error
    """
    with open(args.image, "rb") as f:
        image_b64 = base64.b64encode(f.read()).decode("ascii")

    payload = {
        "imageBase64": image_b64,
        "logicalWidth": args.width,
        "logicalHeight": args.height,
        "pixelRatio": args.pixel_ratio,
        "headerHeight": args.header,
        "footerHeight": args.footer,
        "maxSliceHeight": args.max_slice_height,
        "batchName": args.batch_name,
        "frameName": os.path.basename(args.image),
    }
    if args.account:
        payload["accountId"] = args.account

    url = args.url.rstrip("/") + "/api/push"
    logger.info(f"POST {url} ({len(image_b64) // 1024} KB base64)")

    started = time.time()
    response = requests.post(url, json=payload, timeout=args.timeout)

    try:
        body = response.json()
    except ValueError:
        body = {"error": response.text}

    if not response.ok:
        logger.error(f"Push failed ({response.status_code}): {body.get('error', body)}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info(f"Batch: {body['batchName']} (account={body['accountId']})")
    logger.info(f"Slices: {body['sliceCount']} in {time.time() - started:.1f}s")
    for s in body["slices"]:
        quality = s["jpegQuality"] if s["jpegQuality"] is not None else "-"
        logger.info(
            f"  {s['index']}: {s['mimeType']} q={quality} "
            f"{s['originalKb']}KB -> {s['compressedKb']}KB  {s['imageUrl']}"
        )
    logger.info("=" * 60)

    return body


def main():
    parser = argparse.ArgumentParser(
        description="Push an exported frame to the FrameSlice service"
    )
    parser.add_argument("image", type=str, help="PNG export of the frame")
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("FRAMESLICE_URL", "http://localhost:8787"),
        help="Base URL of the service",
    )
    parser.add_argument("--width", type=int, required=True, help="Logical frame width")
    parser.add_argument("--height", type=int, required=True, help="Logical frame height")
    parser.add_argument(
        "--pixel-ratio",
        type=float,
        default=2.0,
        help="Export scale relative to logical size (default: 2)",
    )
    parser.add_argument("--header", type=int, default=0, help="Header band height")
    parser.add_argument("--footer", type=int, default=0, help="Footer band height")
    parser.add_argument(
        "--max-slice-height",
        type=int,
        default=1200,
        help="Tallest auto slice (default: 1200)",
    )
    parser.add_argument("--batch-name", type=str, default=None, help="Upload name prefix")
    parser.add_argument("--account", type=str, default=None, help="Account id")
    parser.add_argument(
        "--timeout",
        type=float,
        default=300.0,
        help="Request timeout in seconds (default: 300)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only preview suggested slices, do not push",
    )

    args = parser.parse_args()

    preview(args)
    if not args.dry_run:
        push(args)


if __name__ == "__main__":
    main()
