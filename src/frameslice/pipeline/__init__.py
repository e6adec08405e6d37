"""
Pipeline Module
===============

Slice planning and the sequential extraction/compression/upload run.
"""

from frameslice.pipeline.orchestrator import SlicePipeline, slice_name
from frameslice.pipeline.planner import SlicePlan, plan_slices

__all__ = [
    "SlicePipeline",
    "slice_name",
    "SlicePlan",
    "plan_slices",
]
