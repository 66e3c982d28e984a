"""Tests for elliptical arc conversion."""

from __future__ import annotations

import math

import pytest

from curve_kernel.geometry import Point, bezier_point
from svg_codec.arc import arc_to_cubics, endpoint_to_center


def on_circle(point, center, radius):
    return math.hypot(point.x - center.x, point.y - center.y) == pytest.approx(radius)


class TestEndpointToCenter:
    """Test cases for the center parameterization."""

    def test_half_circle(self):
        arc = endpoint_to_center(Point(0, 0), Point(100, 0), 50, 50, 0, False, True)
        assert arc.center.x == pytest.approx(50)
        assert arc.center.y == pytest.approx(0, abs=1e-9)
        assert abs(arc.delta_theta) == pytest.approx(math.pi)

    def test_small_radii_scaled_up(self):
        """Test radii too small to span the chord are enlarged."""
        arc = endpoint_to_center(Point(0, 0), Point(100, 0), 10, 10, 0, False, True)
        assert arc.rx == pytest.approx(50)
        assert arc.ry == pytest.approx(50)

    def test_sweep_sign(self):
        clockwise = endpoint_to_center(Point(0, 0), Point(50, 50), 50, 50, 0, False, True)
        counter = endpoint_to_center(Point(0, 0), Point(50, 50), 50, 50, 0, False, False)
        assert clockwise.delta_theta > 0
        assert counter.delta_theta < 0


class TestArcToCubics:
    """Test cases for cubic approximation."""

    def test_zero_radius_returns_nothing(self):
        assert arc_to_cubics(Point(0, 0), 0, 10, 0, False, True, Point(10, 0)) == []

    def test_identical_endpoints_return_nothing(self):
        assert arc_to_cubics(Point(5, 5), 10, 10, 0, False, True, Point(5, 5)) == []

    def test_endpoints_exact(self):
        segments = arc_to_cubics(Point(0, 0), 50, 50, 0, False, True, Point(100, 0))
        assert segments[0][0] == Point(0, 0)
        assert segments[-1][3] == Point(100, 0)

    def test_segments_are_contiguous(self):
        segments = arc_to_cubics(Point(0, 0), 50, 50, 0, True, True, Point(50, 50))
        for previous, current in zip(segments, segments[1:]):
            assert previous[3] == current[0]

    @pytest.mark.parametrize(
        "large_arc,expected",
        [(False, 1), (True, 3)],
    )
    def test_at_most_quarter_turn_per_segment(self, large_arc, expected):
        """Test a 90 degree arc is one cubic and a 270 degree arc three."""
        segments = arc_to_cubics(Point(0, 0), 50, 50, 0, large_arc, True, Point(50, 50))
        assert len(segments) == expected

    def test_segment_ends_on_circle(self):
        arc = endpoint_to_center(Point(0, 0), Point(100, 0), 50, 50, 0, False, True)
        segments = arc_to_cubics(Point(0, 0), 50, 50, 0, False, True, Point(100, 0))
        assert len(segments) == 2
        assert on_circle(segments[0][3], arc.center, 50)

    def test_rotated_ellipse_reaches_end(self):
        segments = arc_to_cubics(Point(10, 10), 40, 20, 30, False, False, Point(60, 40))
        assert segments
        assert segments[-1][3] == Point(60, 40)
        assert all(p.is_finite() for segment in segments for p in segment)

    def test_quarter_circle_midpoint_on_circle(self):
        """Test the interior of a 90 degree segment stays on the circle."""
        arc = endpoint_to_center(Point(0, 0), Point(50, 50), 50, 50, 0, False, True)
        (segment,) = arc_to_cubics(Point(0, 0), 50, 50, 0, False, True, Point(50, 50))
        middle = bezier_point(*segment, 0.5)
        distance = math.hypot(middle.x - arc.center.x, middle.y - arc.center.y)
        assert distance == pytest.approx(50, abs=50e-3)

    def test_control_points_follow_tangent_constant(self):
        arc = endpoint_to_center(Point(0, 0), Point(50, 50), 50, 50, 0, False, True)
        p0, c1, c2, p3 = arc_to_cubics(Point(0, 0), 50, 50, 0, False, True, Point(50, 50))[0]
        step = arc.delta_theta
        alpha = math.sin(step) * (math.sqrt(4 + 3 * math.tan(step / 2) ** 2) - 1) / 3
        expected_c1 = p0 + arc.derivative_at(arc.theta1).scale(alpha)
        expected_c2 = p3 - arc.derivative_at(arc.theta1 + step).scale(alpha)
        assert c1.x == pytest.approx(expected_c1.x)
        assert c1.y == pytest.approx(expected_c1.y)
        assert c2.x == pytest.approx(expected_c2.x)
        assert c2.y == pytest.approx(expected_c2.y)
        assert abs(alpha) == pytest.approx((math.sqrt(7) - 1) / 3)
