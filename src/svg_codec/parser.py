"""SVG path data to control points.

A single state machine turns a :class:`~svg_codec.commands.CommandStream`
into anchors with handles. How much of the input is kept is controlled by
:class:`ParserConfig` (command limit, minimum spacing, simplification
target), so lightweight and full-fidelity imports share one grammar.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

import structlog

from curve_ir.schema import ControlPoint, new_id
from curve_kernel.geometry import Point

from .arc import arc_to_cubics
from .commands import CommandStream, PathCommand, parse_commands

logger = structlog.get_logger(__name__)


class InsufficientGeometryError(Exception):
    """Parsing produced fewer than two anchors.

    The anchors that were produced are available on ``points``.
    """

    def __init__(self, points: Sequence[ControlPoint], message: Optional[str] = None):
        self.points = list(points)
        super().__init__(
            message or f"Path produced {len(self.points)} anchor(s); at least 2 are required"
        )

    @property
    def anchor_count(self) -> int:
        return len(self.points)


@dataclass
class ParserConfig:
    """Fidelity and limit settings for :func:`parse_path`.

    Attributes:
        max_commands: Stop after this many command groups (None = no limit)
        min_point_spacing: Drop anchors closer than this to the previous one
        target_point_count: Simplify down to this many anchors when exceeded
        default_handle_offset: Horizontal handle length for moveto anchors
        line_handle_cap: Upper bound for handles synthesized on straight lines
    """

    max_commands: Optional[int] = None
    min_point_spacing: float = 0.0
    target_point_count: Optional[int] = None
    default_handle_offset: float = 10.0
    line_handle_cap: float = 40.0

    def __post_init__(self) -> None:
        if self.max_commands is not None and self.max_commands < 1:
            raise ValueError("max_commands must be at least 1")
        if self.min_point_spacing < 0:
            raise ValueError("min_point_spacing cannot be negative")
        if self.target_point_count is not None and self.target_point_count < 2:
            raise ValueError("target_point_count must be at least 2")

    @classmethod
    def full(cls) -> "ParserConfig":
        """Keep every command and anchor."""
        return cls()

    @classmethod
    def balanced(cls) -> "ParserConfig":
        return cls(max_commands=5000, min_point_spacing=0.5, target_point_count=500)

    @classmethod
    def safe(cls) -> "ParserConfig":
        """Small limits for untrusted or very large inputs."""
        return cls(max_commands=30, min_point_spacing=1.0, target_point_count=12)


@dataclass
class ParsedPath:
    """Result of parsing one path's data."""

    points: List[ControlPoint]
    closed: bool = False
    subpaths: int = 0
    commands_processed: int = 0
    skipped_groups: int = 0
    truncated: bool = False
    warnings: List[str] = field(default_factory=list)


class PointArena:
    """Append-only storage for the anchors of one path.

    Handles of already appended anchors only change through :meth:`patch`.
    """

    def __init__(self) -> None:
        self._points: List[ControlPoint] = []

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> ControlPoint:
        return self._points[index]

    @property
    def last(self) -> Optional[ControlPoint]:
        return self._points[-1] if self._points else None

    def append(self, anchor: Point, handle_in: Point, handle_out: Point) -> int:
        self._points.append(ControlPoint(new_id(), anchor, handle_in, handle_out))
        return len(self._points) - 1

    def patch(
        self,
        index: int,
        *,
        handle_in: Optional[Point] = None,
        handle_out: Optional[Point] = None,
    ) -> None:
        changes = {}
        if handle_in is not None:
            changes["handle_in"] = handle_in
        if handle_out is not None:
            changes["handle_out"] = handle_out
        self._points[index] = replace(self._points[index], **changes)

    def patch_last(self, **handles: Point) -> None:
        if not self._points:
            raise IndexError("patch_last on an empty arena")
        self.patch(len(self._points) - 1, **handles)

    def to_list(self) -> List[ControlPoint]:
        return list(self._points)


def _direction(a: Point, b: Point) -> tuple[Point, float]:
    """Unit vector from ``a`` to ``b`` and the distance between them."""
    delta = b - a
    length = delta.length()
    if length == 0:
        return Point(0.0, 0.0), 0.0
    return delta.scale(1.0 / length), length


class _PathBuilder:
    """Parser state: current point, subpath start and reflection controls."""

    def __init__(self, config: ParserConfig):
        self.config = config
        self.arena = PointArena()
        self.current = Point(0.0, 0.0)
        self.start = Point(0.0, 0.0)
        self.start_index: Optional[int] = None
        self.last_cubic: Optional[Point] = None
        self.last_quad: Optional[Point] = None
        self.closed = False
        self.reopen_at_start = False
        self.subpaths = 0

    def _resolve(self, cmd: PathCommand, x: float, y: float) -> Point:
        if cmd.relative:
            return Point(self.current.x + x, self.current.y + y)
        return Point(x, y)

    def _too_close(self, anchor: Point) -> bool:
        last = self.arena.last
        if last is None or self.config.min_point_spacing <= 0:
            return False
        _, dist = _direction(last.anchor, anchor)
        return dist < self.config.min_point_spacing

    def _append_default(self, anchor: Point) -> int:
        offset = self.config.default_handle_offset
        return self.arena.append(
            anchor,
            Point(anchor.x - offset, anchor.y),
            Point(anchor.x + offset, anchor.y),
        )

    def _ensure_anchor(self) -> None:
        # Drawing before any moveto starts from the current point
        if len(self.arena) == 0:
            self.start_index = self._append_default(self.current)
            self.start = self.current
            self.subpaths += 1
        elif self.reopen_at_start:
            # Drawing after a close starts a new subpath at the closed one's start
            self.move_to(self.current)
        self.reopen_at_start = False

    def move_to(self, target: Point) -> None:
        self.reopen_at_start = False
        last = self.arena.last
        if last is not None and last.anchor == target:
            index = len(self.arena) - 1
        else:
            index = self._append_default(target)
        self.start = target
        self.start_index = index
        self.current = target
        self.subpaths += 1

    def line_to(self, target: Point) -> None:
        self._ensure_anchor()
        if not self._too_close(target):
            origin = self.arena.last.anchor
            unit, dist = _direction(origin, target)
            h = min(dist / 3.0, self.config.line_handle_cap)
            self.arena.patch_last(handle_out=origin + unit.scale(h))
            self.arena.append(target, target - unit.scale(h), target + unit.scale(h))
        self.current = target

    def curve_to(self, c1: Point, c2: Point, target: Point) -> None:
        self._ensure_anchor()
        if not self._too_close(target):
            self.arena.patch_last(handle_out=c1)
            self.arena.append(target, c2, c2.reflect_through(target))
        self.current = target

    def close(self) -> None:
        if self.start_index is None or len(self.arena) == 0:
            return
        last = self.arena.last
        first = self.arena[self.start_index]
        if last.anchor != first.anchor:
            unit, dist = _direction(last.anchor, first.anchor)
            h = min(dist / 3.0, self.config.line_handle_cap)
            self.arena.patch_last(handle_out=last.anchor + unit.scale(h))
            self.arena.patch(self.start_index, handle_in=first.anchor - unit.scale(h))
        self.closed = True
        self.current = self.start
        self.reopen_at_start = True

    def apply(self, cmd: PathCommand) -> None:
        kind = cmd.kind
        a = cmd.args

        if kind == "M":
            self.move_to(self._resolve(cmd, a[0], a[1]))
        elif kind == "L":
            self.line_to(self._resolve(cmd, a[0], a[1]))
        elif kind == "H":
            x = self.current.x + a[0] if cmd.relative else a[0]
            self.line_to(Point(x, self.current.y))
        elif kind == "V":
            y = self.current.y + a[0] if cmd.relative else a[0]
            self.line_to(Point(self.current.x, y))
        elif kind == "C":
            c1 = self._resolve(cmd, a[0], a[1])
            c2 = self._resolve(cmd, a[2], a[3])
            end = self._resolve(cmd, a[4], a[5])
            self.curve_to(c1, c2, end)
            self.last_cubic = c2
        elif kind == "S":
            c1 = self.last_cubic.reflect_through(self.current) if self.last_cubic else self.current
            c2 = self._resolve(cmd, a[0], a[1])
            end = self._resolve(cmd, a[2], a[3])
            self.curve_to(c1, c2, end)
            self.last_cubic = c2
        elif kind in ("Q", "T"):
            if kind == "Q":
                q = self._resolve(cmd, a[0], a[1])
                end = self._resolve(cmd, a[2], a[3])
            else:
                q = self.last_quad.reflect_through(self.current) if self.last_quad else self.current
                end = self._resolve(cmd, a[0], a[1])
            p0 = self.current
            c1 = p0 + (q - p0).scale(2.0 / 3.0)
            c2 = end + (q - end).scale(2.0 / 3.0)
            self.curve_to(c1, c2, end)
            self.last_quad = q
        elif kind == "A":
            self.arc_to(cmd)
        elif kind == "Z":
            self.close()

        # Reflection only carries over between commands of the same family
        if kind not in ("C", "S"):
            self.last_cubic = None
        if kind not in ("Q", "T"):
            self.last_quad = None

    def arc_to(self, cmd: PathCommand) -> None:
        rx, ry, rotation, large_arc, sweep = cmd.args[:5]
        end = self._resolve(cmd, cmd.args[5], cmd.args[6])
        if end == self.current:
            return
        if rx == 0 or ry == 0:
            self.line_to(end)
            return

        segments = arc_to_cubics(self.current, rx, ry, rotation, bool(large_arc), bool(sweep), end)
        if not segments:
            self.line_to(end)
            return
        for _, c1, c2, p3 in segments:
            self.curve_to(c1, c2, p3)


def setup_handles(points: Sequence[ControlPoint], handle_cap: float = 40.0) -> List[ControlPoint]:
    """Rebuild handles so each points toward its neighbouring anchors.

    Handle length is a third of the shorter neighbour distance, capped at
    ``handle_cap``. Endpoints only have one neighbour.
    """
    if len(points) < 2:
        return list(points)

    rebuilt: List[ControlPoint] = []
    for i, cp in enumerate(points):
        prev_anchor = points[i - 1].anchor if i > 0 else None
        next_anchor = points[i + 1].anchor if i < len(points) - 1 else None

        to_prev, prev_len = _direction(cp.anchor, prev_anchor) if prev_anchor else (None, 0.0)
        to_next, next_len = _direction(cp.anchor, next_anchor) if next_anchor else (None, 0.0)
        lengths = [d for d in (prev_len, next_len) if d > 0]
        h = min(handle_cap, min(lengths) / 3.0) if lengths else 0.0

        handle_in = cp.handle_in
        handle_out = cp.handle_out
        if prev_len > 0:
            handle_in = cp.anchor + to_prev.scale(h)
        if next_len > 0:
            handle_out = cp.anchor + to_next.scale(h)
        rebuilt.append(replace(cp, handle_in=handle_in, handle_out=handle_out))
    return rebuilt


def simplify_points(
    points: Sequence[ControlPoint],
    target_count: int,
    handle_cap: float = 40.0,
) -> List[ControlPoint]:
    """Reduce ``points`` to at most ``target_count`` anchors.

    First and last anchors are always kept; interior anchors are taken at a
    regular stride. Handles of the result are rebuilt with
    :func:`setup_handles`.
    """
    if len(points) <= target_count:
        return list(points)

    simplified = [points[0]]
    interior = target_count - 2
    if interior > 0:
        stride = max(1, (len(points) - 2) // interior)
        for i in range(stride, len(points) - 1, stride):
            simplified.append(points[i])
            if len(simplified) >= target_count - 1:
                break
    simplified.append(points[-1])

    return setup_handles(simplified, handle_cap)


def parse_path(
    d: str,
    config: Optional[ParserConfig] = None,
    stream: Optional[CommandStream] = None,
) -> ParsedPath:
    """Parse SVG path data into control points.

    Args:
        d: Path data (the ``d`` attribute)
        config: Fidelity and limit settings (defaults to full fidelity)
        stream: Pre-parsed commands for ``d``, if the caller already has them

    Returns:
        ParsedPath with at least two anchors

    Raises:
        ParseError: If the text is not path data at all
        InsufficientGeometryError: If fewer than two anchors result
    """
    config = config or ParserConfig()
    if stream is None:
        stream = parse_commands(d)

    builder = _PathBuilder(config)
    result = ParsedPath(points=[])

    for group in stream.malformed:
        result.warnings.append(f"Ignored malformed {group.letter} group: {group.reason}")

    for cmd in stream.commands:
        if config.max_commands is not None and result.commands_processed >= config.max_commands:
            result.truncated = True
            result.warnings.append(
                f"Stopped after {config.max_commands} of {len(stream.commands)} commands"
            )
            break

        result.commands_processed += 1
        if not cmd.is_finite:
            result.skipped_groups += 1
            continue
        builder.apply(cmd)

    if result.skipped_groups:
        result.warnings.append(f"Skipped {result.skipped_groups} non-numeric coordinate group(s)")

    points = builder.arena.to_list()
    if config.target_point_count is not None and len(points) > config.target_point_count:
        original = len(points)
        points = simplify_points(points, config.target_point_count, config.line_handle_cap)
        result.warnings.append(f"Simplified {original} anchors to {len(points)}")

    if len(points) < 2:
        raise InsufficientGeometryError(points)

    result.points = points
    result.closed = builder.closed
    result.subpaths = builder.subpaths

    if result.warnings:
        logger.debug(
            "Parsed path with warnings",
            anchors=len(points),
            warnings=len(result.warnings),
            truncated=result.truncated,
        )
    return result
