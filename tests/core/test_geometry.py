"""
Tests for the percentage region resolver
"""

import pytest

from core.geometry import ResolvedPercentRegion, resolve, round_half_away
from schemas.iiif import RegionPercent, SourceDimensions


class TestRoundHalfAway:
    """Test rounding rule"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (2.5, 3),
            (-2.5, -3),
            (0.5, 1),
            (-0.5, -1),
            (1.5, 2),  # round-half-to-even would give 2 as well
            (3.5, 4),
            (4.5, 5),  # round-half-to-even would give 4
            (2.4, 2),
            (-2.4, -2),
            (0.0, 0),
        ],
    )
    def test_rounding(self, value, expected):
        assert round_half_away(value) == expected

    def test_differs_from_builtin_round(self):
        assert round(4.5) == 4
        assert round_half_away(4.5) == 5


class TestResolve:
    """Test offset resolution"""

    def test_offsets_resolved_to_pixels(self):
        region = RegionPercent(x=10, y=25, width=50, height=40)
        dims = SourceDimensions(width=640, height=480)

        resolved = resolve(region, dims)

        assert resolved == ResolvedPercentRegion(
            offset_x=64, offset_y=120, width_percent=50, height_percent=40
        )

    def test_half_pixel_rounds_up(self):
        # 5 * 50 / 100 = 2.5 -> 3
        region = RegionPercent(x=50, y=50, width=10, height=10)
        resolved = resolve(region, SourceDimensions(width=5, height=5))
        assert resolved.offset_x == 3
        assert resolved.offset_y == 3

    def test_width_and_height_pass_through(self):
        region = RegionPercent(x=0, y=0, width=70.2, height=80.3)
        resolved = resolve(region, SourceDimensions(width=100, height=100))
        assert resolved.width_percent == 70.2
        assert resolved.height_percent == 80.3

    @pytest.mark.parametrize("width,height", [(1, 1), (7, 3), (640, 480), (10001, 3333)])
    @pytest.mark.parametrize("pct", [0, 0.1, 33.3, 50, 66.6, 99.99, 100])
    def test_offsets_within_bounds(self, width, height, pct):
        """Offsets stay inside the image for percentages in [0, 100]"""
        region = RegionPercent(x=pct, y=100 - pct, width=10, height=10)
        resolved = resolve(region, SourceDimensions(width=width, height=height))

        assert 0 <= resolved.offset_x <= width
        assert 0 <= resolved.offset_y <= height
