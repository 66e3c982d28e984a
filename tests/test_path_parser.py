"""Tests for SVG path data tokenizing and parsing."""

from __future__ import annotations

import math

import pytest

from curve_kernel.geometry import Point
from svg_codec.commands import ParseError, PathCommand, normalize_path_data, parse_commands, tokenize
from svg_codec.parser import (
    InsufficientGeometryError,
    ParserConfig,
    PointArena,
    parse_path,
    setup_handles,
    simplify_points,
)
from svg_codec.writer import generate_path_data


def anchors(parsed):
    return [p.anchor for p in parsed.points]


def approx_point(point, x, y):
    return point.x == pytest.approx(x, abs=1e-9) and point.y == pytest.approx(y, abs=1e-9)


class TestTokenizer:
    """Test cases for normalization and tokenizing."""

    def test_scientific_notation_expanded(self):
        assert normalize_path_data("M1e2,  2.5E-1") == "M100 0.25"

    def test_adjacent_numbers_split_on_sign(self):
        """Test ``10-5`` is two numbers."""
        values = [t.value for t in tokenize("10-5") if not t.is_command]
        assert values == [10, -5]

    def test_second_decimal_point_starts_number(self):
        """Test ``1.5.5`` is ``1.5`` then ``.5``."""
        values = [t.value for t in tokenize("1.5.5") if not t.is_command]
        assert values == [1.5, 0.5]

    def test_exponent_expanded_per_token(self):
        """Test an exponent after a packed decimal keeps its own number."""
        assert normalize_path_data("M0 0L1.5.5e2") == "M0 0L1.5 50"

    def test_huge_exponent_becomes_infinite(self):
        normalized = normalize_path_data("M1e20000000 0 L1 1")
        assert normalized == "Minf 0 L1 1"
        assert len(normalized) < 20

    def test_tiny_exponent_becomes_zero(self):
        assert normalize_path_data("L1e-20000000 2") == "L0 2"

    def test_stray_character_becomes_nan(self):
        tokens = tokenize("L 1 # 2")
        assert math.isnan(tokens[2].value)


class TestCommandStream:
    """Test cases for grouping tokens into commands."""

    def test_repeated_groups(self):
        """Test implicit repetition of a command letter."""
        stream = parse_commands("M0 0 L10 0 20 0 30 0")
        assert [c.kind for c in stream] == ["M", "L", "L", "L"]

    def test_extra_moveto_pairs_become_lines(self):
        stream = parse_commands("m0 0 10 0 20 0")
        assert [c.letter for c in stream] == ["m", "l", "l"]

    def test_compact_arc_flags(self):
        """Test flags written without separators are split."""
        stream = parse_commands("M0 0 A10 10 0 0110 0")
        arc = stream.commands[1]
        assert arc.args == (10, 10, 0, 0, 1, 10, 0)

    def test_incomplete_group_reported(self):
        """Test a trailing partial group is malformed, not read past the end."""
        stream = parse_commands("M0 0 L10 0 L5")
        assert len(stream) == 2
        assert stream.malformed[0].letter == "L"
        assert "incomplete group" in stream.malformed[0].reason

    def test_arguments_after_close(self):
        stream = parse_commands("M0 0 L10 0 Z 5 5")
        assert stream.commands[-1].kind == "Z"
        assert stream.malformed[0].reason == "arguments after close"

    def test_blank_input_is_empty(self):
        assert len(parse_commands("   ")) == 0

    def test_must_start_with_command(self):
        with pytest.raises(ParseError, match="must start with a command"):
            parse_commands("10 20 L30 40")

    def test_no_commands(self):
        with pytest.raises(ParseError, match="No path commands"):
            parse_commands("12 34")

    def test_path_command_arity_checked(self):
        with pytest.raises(ValueError):
            PathCommand("C", False, (1.0, 2.0))


class TestParsePath:
    """Test cases for building control points from path data."""

    def test_closed_triangle(self):
        """Test a closed polyline keeps three anchors and the closed flag."""
        parsed = parse_path("M0 0 L100 0 L100 100 Z")
        assert anchors(parsed) == [Point(0, 0), Point(100, 0), Point(100, 100)]
        assert parsed.closed
        assert parsed.subpaths == 1
        data = generate_path_data(parsed.points)
        assert data.startswith("M 0 0 C")
        assert data.count("C") == 2

    def test_close_points_handles_at_start(self):
        parsed = parse_path("M0 0 L30 0 L30 30 Z")
        assert approx_point(parsed.points[0].handle_in, 10, 10)
        assert approx_point(parsed.points[-1].handle_out, 20, 20)

    def test_relative_commands(self):
        parsed = parse_path("m10 10 l20 0 l0 20")
        assert anchors(parsed) == [Point(10, 10), Point(30, 10), Point(30, 30)]

    def test_horizontal_and_vertical(self):
        parsed = parse_path("M0 0 H50 V30 h-10 v-10")
        assert anchors(parsed) == [
            Point(0, 0), Point(50, 0), Point(50, 30), Point(40, 30), Point(40, 20)
        ]

    def test_line_handles_are_a_third(self):
        """Test straight segments get handles of a third of their length."""
        parsed = parse_path("M0 0 L30 0")
        assert approx_point(parsed.points[0].handle_out, 10, 0)
        assert approx_point(parsed.points[1].handle_in, 20, 0)

    def test_line_handles_are_capped(self):
        parsed = parse_path("M0 0 L300 0")
        assert approx_point(parsed.points[0].handle_out, 40, 0)

    def test_cubic_handles(self):
        """Test cubic control points land on the adjacent anchors."""
        parsed = parse_path("M0 0 C10 20 30 20 40 0")
        assert parsed.points[0].handle_out == Point(10, 20)
        assert parsed.points[1].handle_in == Point(30, 20)
        assert parsed.points[1].handle_out == Point(50, -20)

    def test_smooth_cubic_reflects_previous_control(self):
        parsed = parse_path("M0 0 C10 20 30 20 40 0 S70 -20 80 0")
        assert parsed.points[1].handle_out == Point(50, -20)
        assert parsed.points[2].handle_in == Point(70, -20)

    def test_smooth_cubic_without_previous_uses_current_point(self):
        parsed = parse_path("M0 0 S20 20 40 0")
        assert parsed.points[0].handle_out == Point(0, 0)

    def test_quadratic_raised_to_cubic(self):
        parsed = parse_path("M0 0 Q30 30 60 0")
        assert approx_point(parsed.points[0].handle_out, 20, 20)
        assert approx_point(parsed.points[1].handle_in, 40, 20)

    def test_smooth_quadratic(self):
        parsed = parse_path("M0 0 Q30 30 60 0 T120 0")
        assert approx_point(parsed.points[1].handle_out, 80, -20)
        assert parsed.points[2].anchor == Point(120, 0)

    def test_scientific_and_packed_numbers(self):
        parsed = parse_path("M1e1-5 L1.5.5")
        assert anchors(parsed) == [Point(10, -5), Point(1.5, 0.5)]

    def test_exponent_after_packed_decimal(self):
        parsed = parse_path("M0 0L1.5.5e2")
        assert anchors(parsed) == [Point(0, 0), Point(1.5, 50)]

    def test_overflowing_exponent_group_skipped(self):
        parsed = parse_path("M0 0 L1e20000000 0 L10 0")
        assert anchors(parsed) == [Point(0, 0), Point(10, 0)]
        assert parsed.skipped_groups == 1

    def test_non_numeric_group_skipped(self):
        """Test a NaN coordinate drops only its own group."""
        parsed = parse_path("M0 0 L NaN 5 L10 0 L20 0")
        assert anchors(parsed) == [Point(0, 0), Point(10, 0), Point(20, 0)]
        assert parsed.skipped_groups == 1
        assert any("non-numeric" in w for w in parsed.warnings)

    def test_malformed_group_warns(self):
        parsed = parse_path("M0 0 L10 0 L5")
        assert len(parsed.points) == 2
        assert any("malformed L group" in w for w in parsed.warnings)

    def test_moveto_onto_last_anchor_does_not_duplicate(self):
        parsed = parse_path("M0 0 L10 0 M10 0 L20 0")
        assert anchors(parsed) == [Point(0, 0), Point(10, 0), Point(20, 0)]
        assert parsed.subpaths == 2

    def test_drawing_after_close_restarts_at_subpath_start(self):
        """Test a segment after Z starts from the closed subpath's first anchor."""
        parsed = parse_path("M0 0 L30 0 L30 30 Z L0 -30")
        assert anchors(parsed) == [
            Point(0, 0), Point(30, 0), Point(30, 30), Point(0, 0), Point(0, -30)
        ]
        assert approx_point(parsed.points[2].handle_out, 20, 20)
        assert parsed.subpaths == 2
        assert parsed.closed

    def test_drawing_before_moveto_starts_at_origin(self):
        parsed = parse_path("L10 0 L20 0")
        assert anchors(parsed)[0] == Point(0, 0)
        assert len(parsed.points) == 3

    def test_zero_radius_arc_is_a_line(self):
        parsed = parse_path("M0 0 A0 10 0 0 1 50 0")
        assert anchors(parsed) == [Point(0, 0), Point(50, 0)]

    def test_arc_to_own_position_is_ignored(self):
        parsed = parse_path("M0 0 L10 0 A5 5 0 0 1 10 0")
        assert len(parsed.points) == 2

    def test_arc_ends_exactly(self):
        parsed = parse_path("M0 0 A10 10 0 0110 0")
        assert parsed.points[-1].anchor == Point(10, 0)

    def test_single_anchor_is_insufficient(self):
        with pytest.raises(InsufficientGeometryError) as exc_info:
            parse_path("M0 0")
        assert exc_info.value.anchor_count == 1

    def test_empty_text_is_insufficient(self):
        with pytest.raises(InsufficientGeometryError) as exc_info:
            parse_path("")
        assert exc_info.value.anchor_count == 0

    def test_round_trip_through_writer(self, sample_points):
        """Test generated path data parses back to the same geometry."""
        parsed = parse_path(generate_path_data(sample_points))
        assert anchors(parsed) == [p.anchor for p in sample_points]
        assert parsed.points[0].handle_out == sample_points[0].handle_out
        assert parsed.points[1].handle_in == sample_points[1].handle_in
        assert parsed.points[1].handle_out == sample_points[1].handle_out
        assert parsed.points[2].handle_in == sample_points[2].handle_in


class TestParserConfig:
    """Test cases for limits and simplification."""

    def test_max_commands_truncates(self):
        parsed = parse_path("M0 0 L10 0 L20 0 L30 0 L40 0", ParserConfig(max_commands=3))
        assert len(parsed.points) == 3
        assert parsed.truncated
        assert parsed.commands_processed == 3

    def test_min_spacing_drops_close_anchors(self):
        parsed = parse_path("M0 0 L1 0 L10 0", ParserConfig(min_point_spacing=5))
        assert anchors(parsed) == [Point(0, 0), Point(10, 0)]

    def test_simplification_target(self):
        """Test long paths are reduced keeping both ends."""
        d = "M0 0 " + " ".join(f"L{x} 0" for x in range(10, 100, 10))
        parsed = parse_path(d, ParserConfig(target_point_count=4))
        assert [p.x for p in parsed.points] == [0, 40, 80, 90]
        assert any("Simplified 10 anchors to 4" in w for w in parsed.warnings)

    def test_presets(self):
        safe = ParserConfig.safe()
        assert (safe.max_commands, safe.min_point_spacing, safe.target_point_count) == (30, 1.0, 12)
        assert ParserConfig.full().max_commands is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_commands": 0}, {"min_point_spacing": -1}, {"target_point_count": 1}],
    )
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            ParserConfig(**kwargs)


class TestHandleHelpers:
    """Test cases for handle rebuilding and the point arena."""

    def test_setup_handles_point_at_neighbours(self, sample_points):
        rebuilt = setup_handles(sample_points)
        middle = rebuilt[1]
        assert middle.handle_in.x < middle.anchor.x
        assert middle.handle_out.x > middle.anchor.x
        assert [p.id for p in rebuilt] == ["p0", "p1", "p2"]

    def test_simplify_below_target_is_noop(self, sample_points):
        assert simplify_points(sample_points, 10) == sample_points

    def test_arena_patch(self):
        arena = PointArena()
        arena.append(Point(0, 0), Point(-1, 0), Point(1, 0))
        arena.patch_last(handle_out=Point(5, 5))
        assert arena.last.handle_out == Point(5, 5)
        assert arena.last.handle_in == Point(-1, 0)

    def test_arena_patch_last_empty(self):
        with pytest.raises(IndexError):
            PointArena().patch_last(handle_out=Point(0, 0))
