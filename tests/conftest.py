"""Pytest configuration and shared fixtures.

Provides common test fixtures and configuration for the CurveBridge test suite.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator, List

import pytest
import structlog

from curve_ir.schema import ControlPoint, Design, PathObject, Style, create_control_point, create_path_object
from curve_kernel.geometry import Point


# Configure test logging
structlog.configure(
    processors=[
        structlog.testing.LogCapture(),
    ],
    logger_factory=structlog.testing.CapturingLoggerFactory(),
    cache_logger_on_first_use=False,
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_points() -> List[ControlPoint]:
    """Three anchors with explicit, asymmetric handles."""
    return [
        ControlPoint("p0", Point(0, 0), Point(-10, 0), Point(10, 5)),
        ControlPoint("p1", Point(50, 20), Point(40, 20), Point(60, 20)),
        ControlPoint("p2", Point(100, 0), Point(90, -5), Point(110, 0)),
    ]


@pytest.fixture
def sample_object(sample_points: List[ControlPoint]) -> PathObject:
    return PathObject(
        id="obj1",
        name="Wave",
        points=sample_points,
        styles=[Style(color="#ff0000", width=3.0), Style(color="#00ff00", width=1.0)],
    )


@pytest.fixture
def sample_design(sample_object: PathObject) -> Design:
    """Design with one renderable object and one single-point object."""
    lonely = create_path_object("Lonely", points=[create_control_point(5, 5)], object_id="obj2")
    return Design(objects=[sample_object, lonely])


@pytest.fixture
def sample_svg() -> str:
    """Foreign SVG document with two paths, one nested in a plain group."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200">
  <path id="triangle" d="M10 10 L90 10 L50 80 Z" stroke="#336699" stroke-width="4" fill="none"/>
  <g id="layer">
    <path d="M0 0 C 20 0 40 20 60 20" style="stroke: #ff0000; stroke-width: 2.5; stroke-dasharray: 4,2"/>
  </g>
</svg>
"""


@pytest.fixture
def sample_json_design() -> dict:
    """Interchange document in the camelCase JSON format."""
    return {
        "objects": [
            {
                "id": "a",
                "name": "First",
                "points": [
                    {"id": "a0", "x": 0, "y": 0, "handleIn": {"x": -5, "y": 0}, "handleOut": {"x": 5, "y": 0}},
                    {"id": "a1", "x": 30, "y": 0, "handleIn": {"x": 25, "y": 0}, "handleOut": {"x": 35, "y": 0}},
                ],
                "curveConfig": {
                    "styles": [{"color": "#123456", "width": 4, "dashArray": "5,5"}],
                    "parallelCount": 2,
                    "spacing": 8,
                },
                "transform": {"rotation": 15, "scaleX": 1.5, "scaleY": 1},
            },
            {
                "points": [
                    {"x": 1, "y": 2},
                    {"x": "NaN", "y": 4, "handleIn": {"x": 0, "y": 4}},
                ],
            },
        ]
    }
