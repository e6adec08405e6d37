"""
Interval Primitives
===================

Pure numeric helpers shared by the slicing stages.

All slicing happens on the vertical axis, so an interval is just a
half-open span [start, end) of pixel rows.

Rounding:
    Coordinates coming from the design tool are floats. They are rounded
    half-up (2.5 -> 3), not with Python's banker's rounding, so the same
    frame always produces the same cut lines as the exporter.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List


# Chunks shorter than this are treated as noise rather than real slices.
MIN_CHUNK_HEIGHT = 8


@dataclass(frozen=True, slots=True)
class Interval:
    """
    Half-open vertical span [start, end).

    Attributes:
        start: First row (inclusive)
        end: Last row (exclusive), always greater than start
    """

    start: int
    end: int

    @property
    def height(self) -> int:
        return self.end - self.start


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 rounding toward +infinity."""
    return int(math.floor(value + 0.5))


def to_int(value, fallback: int) -> int:
    """
    Coerce a loosely typed number to an int.

    Non-finite or non-numeric values return the fallback.
    """
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return round_half_up(parsed)


def merge_intervals(intervals: Iterable[Interval], join_gap: int) -> List[Interval]:
    """
    Merge intervals whose gap is at most join_gap.

    Intervals are sorted by start (stable) and merged in a single linear
    pass, so overlapping or nearly touching spans collapse into one.

    Args:
        intervals: Spans in any order
        join_gap: Largest gap (in rows) that is absorbed into a merge

    Returns:
        New list of disjoint intervals in ascending order
    """
    ordered = sorted(intervals, key=lambda iv: iv.start)
    if not ordered:
        return []

    merged = [ordered[0]]
    for current in ordered[1:]:
        previous = merged[-1]
        if current.start <= previous.end + join_gap:
            merged[-1] = Interval(previous.start, max(previous.end, current.end))
        else:
            merged.append(current)
    return merged


def split_interval(interval: Interval, max_height: int) -> List[Interval]:
    """
    Split an interval top-to-bottom into chunks no taller than max_height.

    The chunks cover the interval exactly. When the last chunk would be a
    sliver shorter than MIN_CHUNK_HEIGHT, the preceding cut moves up so
    the last chunk is exactly MIN_CHUNK_HEIGHT rows tall.

    Args:
        interval: Span to split
        max_height: Maximum chunk height, must exceed MIN_CHUNK_HEIGHT

    Returns:
        Ordered chunks covering the interval
    """
    if max_height <= MIN_CHUNK_HEIGHT:
        raise ValueError(f"max_height must exceed {MIN_CHUNK_HEIGHT}, got {max_height}")

    chunks: List[Interval] = []
    y = interval.start
    while y < interval.end:
        h = min(max_height, interval.end - y)
        chunks.append(Interval(y, y + h))
        y += h

    if len(chunks) > 1 and chunks[-1].height < MIN_CHUNK_HEIGHT:
        shortfall = MIN_CHUNK_HEIGHT - chunks[-1].height
        cut = chunks[-2].end - shortfall
        chunks[-2] = Interval(chunks[-2].start, cut)
        chunks[-1] = Interval(cut, interval.end)

    return chunks


def fill_gaps(intervals: List[Interval], top: int, bottom: int) -> List[Interval]:
    """
    Partition [top, bottom) using the given disjoint sorted intervals.

    Gaps between and around the intervals become intervals of their own,
    so every row in [top, bottom) belongs to exactly one output span.
    Leading and trailing gaps shorter than MIN_CHUNK_HEIGHT are folded
    into the neighbouring interval instead.
    """
    if not intervals:
        return [Interval(top, bottom)] if bottom > top else []

    spans = list(intervals)

    first = spans[0]
    if first.start > top:
        if first.start - top < MIN_CHUNK_HEIGHT:
            spans[0] = Interval(top, first.end)
        else:
            spans.insert(0, Interval(top, first.start))

    last = spans[-1]
    if last.end < bottom:
        if bottom - last.end < MIN_CHUNK_HEIGHT:
            spans[-1] = Interval(last.start, bottom)
        else:
            spans.append(Interval(last.end, bottom))

    partition = [spans[0]]
    for span in spans[1:]:
        previous = partition[-1]
        if span.start > previous.end:
            partition.append(Interval(previous.end, span.start))
        partition.append(span)
    return partition
