"""
Auto-Slice Suggester Tests
==========================
"""

import random

import pytest

from frameslice.geometry.body import compute_body_region
from frameslice.geometry.suggester import effective_max_slice_height, suggest_slices, tile_body
from frameslice.models.geometry import ChildBox, FrameSpec


def _spans(slices):
    return [(s.y, s.height) for s in slices]


def _assert_partition(slices, top, bottom, max_h, width):
    """Slices must tile [top, bottom) exactly, top-to-bottom, within max_h."""
    y = top
    for s in slices:
        assert s.x == 0
        assert s.width == width
        assert s.y == y
        assert 0 < s.height <= max_h
        y += s.height
    assert y == bottom


class TestSuggestSlices:
    """Tests for suggest_slices()."""

    def test_childless_frame_tiles_body(self):
        frame = FrameSpec(width=1000, height=2000)
        slices = suggest_slices(frame, header_height=100, footer_height=100, max_slice_height=1200)

        assert _spans(slices) == [(100, 1200), (1300, 600)]
        assert all(s.width == 1000 and s.x == 0 for s in slices)

    def test_sections_cut_at_boundaries(self):
        frame = FrameSpec(
            width=600,
            height=3000,
            children=[
                ChildBox(y=0, width=600, height=150),     # inside header, discarded
                ChildBox(y=200, width=600, height=800),
                ChildBox(y=1005, width=600, height=500),  # 5px gap, merged with above
                ChildBox(y=1800, width=600, height=600),
            ],
        )
        slices = suggest_slices(frame, header_height=150, footer_height=150, max_slice_height=1200)

        assert _spans(slices) == [
            (150, 50),
            (200, 1200),
            (1400, 105),
            (1505, 295),
            (1800, 600),
            (2400, 450),
        ]
        _assert_partition(slices, 150, 2850, 1200, 600)

    def test_hidden_and_narrow_children_ignored(self):
        frame = FrameSpec(
            width=600,
            height=1000,
            children=[
                ChildBox(y=100, width=600, height=300, visible=False),
                ChildBox(y=500, width=100, height=300),
                ChildBox(y=400, width=600, height=10),
            ],
        )
        slices = suggest_slices(frame)
        assert _spans(slices) == [(0, 1000)]

    def test_empty_body_returns_empty_list(self):
        frame = FrameSpec(width=600, height=400)
        assert suggest_slices(frame, header_height=300, footer_height=200) == []

    def test_max_height_floor(self):
        frame = FrameSpec(width=600, height=500)
        slices = suggest_slices(frame, max_slice_height=50)
        assert _spans(slices) == [(0, 200), (200, 200), (400, 100)]

    def test_sliver_not_emitted(self):
        frame = FrameSpec(width=600, height=1205)
        slices = suggest_slices(frame, max_slice_height=1200)
        assert _spans(slices) == [(0, 1197), (1197, 8)]

    def test_tiny_body_still_yields_a_slice(self):
        frame = FrameSpec(width=600, height=500)
        slices = suggest_slices(frame, header_height=250, footer_height=245)
        assert _spans(slices) == [(250, 5)]

    def test_body_partition_property(self):
        """Every body row is covered exactly once for arbitrary layouts."""
        rng = random.Random(1234)
        for _ in range(200):
            width = rng.randint(50, 1400)
            height = rng.randint(20, 6000)
            header = rng.randint(0, height // 3)
            footer = rng.randint(0, height // 3)
            max_h = rng.choice([0, 150, 200, 333, 800, 1200, 5000])
            children = [
                ChildBox(
                    y=rng.uniform(-100, height),
                    width=rng.uniform(0, width * 1.2),
                    height=rng.uniform(0, height / 2),
                    visible=rng.random() > 0.1,
                )
                for _ in range(rng.randint(0, 12))
            ]
            frame = FrameSpec(width=width, height=height, children=children)

            slices = suggest_slices(frame, header, footer, max_h)

            body = compute_body_region(height, header, footer)
            if body.is_empty:
                assert slices == []
                continue
            _assert_partition(
                slices, body.top, body.bottom, effective_max_slice_height(max_h), width
            )


class TestHelpers:
    """Tests for suggester helpers."""

    @pytest.mark.parametrize(
        "requested,expected",
        [(1200, 1200), (199, 200), (250.4, 250), (250.5, 251), (float("nan"), 1200)],
    )
    def test_effective_max_slice_height(self, requested, expected):
        assert effective_max_slice_height(requested) == expected

    def test_tile_body(self):
        body = compute_body_region(1000, 100, 100)
        tiles = tile_body(300, body, 300)
        assert _spans(tiles) == [(100, 300), (400, 300), (700, 200)]
