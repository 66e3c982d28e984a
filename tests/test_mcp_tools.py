"""Tests for MCP tools and session management."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from curve_import import FormatError, ImportResult
from curve_ir.schema import Design
from curvebridge_mcp.tools import (
    CurveBridgeSession,
    SessionError,
    tool_export_svg,
    tool_import_design,
    tool_parse_path,
    tool_path_data,
    tool_session_info,
)


@pytest.fixture
def fresh_session():
    """Replace the global tool session for the duration of a test."""
    session = CurveBridgeSession()
    with patch("curvebridge_mcp.tools._session", session):
        yield session


class TestCurveBridgeSession:
    """Test cases for CurveBridgeSession class."""

    def test_session_creation(self):
        """Test session creation with default settings."""
        session = CurveBridgeSession()
        assert session._max_designs == 10
        assert session.list_designs() == []

    def test_session_stats(self):
        session = CurveBridgeSession(max_designs=5)
        stats = session.get_session_stats()

        assert stats["loaded_designs"] == 0
        assert stats["max_designs"] == 5
        assert stats["design_ids"] == []

    def test_get_design_missing(self):
        """Test unknown design ids raise SessionError."""
        with pytest.raises(SessionError, match="Design not found"):
            CurveBridgeSession().get_design("nonexistent")

    def test_import_design(self):
        session = CurveBridgeSession()
        design_id, result = session.import_design(
            '{"objects": [{"id": "a", "points": [{"x": 0, "y": 0}, {"x": 9, "y": 9}]}]}'
        )

        assert design_id.startswith("design-")
        assert session.has_design(design_id)
        assert session.get_result(design_id) is result
        assert session.get_source(design_id) == "inline"
        assert len(session.get_design(design_id)) == 1

    def test_import_design_uses_file_stem(self):
        session = CurveBridgeSession()
        design_id, _ = session.import_design("M0 0 L1 1", source="/tmp/logo.svg")
        assert design_id.startswith("logo-")

    @patch("curvebridge_mcp.tools.ImportPipeline")
    def test_import_failure(self, mock_pipeline):
        """Test format errors become SessionError and nothing is stored."""
        mock_pipeline.return_value.run.side_effect = FormatError("Unrecognized payload")
        session = CurveBridgeSession()

        with pytest.raises(SessionError, match="Failed to import design"):
            session.import_design("???")

        assert session.list_designs() == []

    def test_remove_design(self):
        session = CurveBridgeSession()
        session._designs["d"] = Design()
        session._results["d"] = Mock(spec=ImportResult)
        session._load_times["d"] = 1.0

        session.remove_design("d")

        assert not session.has_design("d")
        assert session.get_result("d") is None
        assert "d" not in session._load_times
        session.remove_design("nonexistent")

    def test_cleanup_old_designs(self):
        """Test only the newest designs are kept."""
        session = CurveBridgeSession(max_designs=2)
        for i in range(3):
            session._designs[f"d{i}"] = Design()
            session._load_times[f"d{i}"] = i

        session.cleanup_old_designs()

        assert sorted(session.list_designs()) == ["d1", "d2"]

    def test_path_data(self, sample_design):
        session = CurveBridgeSession()
        session._designs["d"] = sample_design

        paths = session.path_data("d")

        assert paths[0]["object_id"] == "obj1"
        assert paths[0]["path_data"].startswith("M 0 0 C")
        assert paths[1]["path_data"] == ""


class TestMCPTools:
    """Test cases for the tool functions."""

    def test_import_requires_source(self, fresh_session):
        with pytest.raises(ValueError, match="path or content"):
            tool_import_design({})

    def test_import_unknown_preset(self, fresh_session):
        with pytest.raises(ValueError, match="Unknown import preset"):
            tool_import_design({"content": "M0 0 L1 1", "preset": "turbo"})

    def test_import_missing_file(self, fresh_session, temp_dir):
        with pytest.raises(ValueError, match="File not found"):
            tool_import_design({"path": str(temp_dir / "absent.svg")})

    def test_import_from_file(self, fresh_session, temp_dir, sample_svg):
        svg_file = temp_dir / "shapes.svg"
        svg_file.write_text(sample_svg, encoding="utf-8")

        result = tool_import_design({"path": str(svg_file)})

        assert result["success"]
        assert result["design_id"].startswith("shapes-")
        assert result["format"] == "svg_document"
        assert result["object_count"] == 2
        assert result["objects"][0]["name"] == "triangle"

    def test_import_unrecognized_content(self, fresh_session):
        result = tool_import_design({"content": "hello world"})
        assert not result["success"]
        assert result["design_id"] is None

    def test_parse_path(self):
        result = tool_parse_path({"path_data": "M0 0 L100 0 L100 100 Z"})
        assert result["success"]
        assert len(result["points"]) == 3
        assert result["closed"]
        assert result["path_data"].count("C") == 2

    def test_parse_path_insufficient(self):
        result = tool_parse_path({"path_data": "M0 0"})
        assert not result["success"]
        assert result["error_type"] == "InsufficientGeometryError"

    def test_parse_path_validation(self):
        with pytest.raises(ValueError, match="Missing required parameter"):
            tool_parse_path({})
        with pytest.raises(ValueError, match="Unsupported preset"):
            tool_parse_path({"path_data": "M0 0 L1 1", "preset": "turbo"})

    def test_path_data_unknown_design(self, fresh_session):
        result = tool_path_data({"design_id": "missing"})
        assert not result["success"]
        assert result["paths"] == []

    def test_export_inline_and_file(self, fresh_session, temp_dir):
        """Test export returns data inline or writes the file."""
        design_id, _ = fresh_session.import_design("M0 0 L50 0 L50 50")

        inline = tool_export_svg({"design_id": design_id, "width": 400, "height": 300})
        assert inline["uri"] == f"memory://{design_id}.svg"
        assert inline["data"].startswith("<svg")

        out = temp_dir / "out" / "design.svg"
        written = tool_export_svg({"design_id": design_id, "out_path": str(out)})
        assert written["success"]
        assert out.exists()
        assert written["size_bytes"] == len(out.read_bytes())

    def test_export_invalid_size(self, fresh_session):
        with pytest.raises(ValueError, match="positive"):
            tool_export_svg({"design_id": "x", "width": 0})

    def test_session_info(self, fresh_session):
        design_id, _ = fresh_session.import_design("M0 0 L1 1")

        info = tool_session_info()

        assert info["session_stats"]["loaded_designs"] == 1
        assert info["designs"] == [{
            "design_id": design_id,
            "source": "inline",
            "format": "svg_path",
            "object_count": 1,
        }]
