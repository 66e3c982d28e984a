"""Tests for the command-line interface."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from curve_ir.serialize import dump_json, load_json
from curvebridge.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def setup_logging_mock():
    """Keep the test structlog configuration; CliRunner closes its streams."""
    with patch("curvebridge.cli._setup_logging") as mock_setup:
        yield mock_setup


class TestCLI:
    """Test cases for CLI commands."""

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "Import Limits" in result.output

    def test_parse(self):
        result = runner.invoke(app, ["parse", "M0 0 L30 0"])
        assert result.exit_code == 0
        assert "M 0 0 C" in result.output

    def test_parse_failure(self):
        result = runner.invoke(app, ["parse", "M0 0"])
        assert result.exit_code == 1

    def test_path_data(self, sample_design, temp_dir):
        """Test one line per renderable object."""
        design_file = dump_json(sample_design, temp_dir / "design.json")
        result = runner.invoke(app, ["path-data", str(design_file), "--names"])
        assert result.exit_code == 0
        assert "Wave\tM 0 0 C 10 5 40 20 50 20 C 60 20 90 -5 100 0" in result.output

    def test_path_data_configures_logging(self, sample_design, temp_dir, setup_logging_mock):
        """Test warnings for empty objects go through the stderr logging setup."""
        design_file = dump_json(sample_design, temp_dir / "design.json")
        result = runner.invoke(app, ["path-data", str(design_file), "-v"])
        assert result.exit_code == 0
        setup_logging_mock.assert_called_once_with(True)
        assert result.output.count("\n") == 1

    def test_export_to_file(self, sample_design, temp_dir):
        design_file = dump_json(sample_design, temp_dir / "design.json")
        out = temp_dir / "design.svg"
        result = runner.invoke(app, ["export", str(design_file), "-o", str(out), "--no-background"])
        assert result.exit_code == 0
        text = out.read_text(encoding="utf-8")
        assert "<rect" not in text
        assert 'id="obj1"' in text

    def test_import_writes_json(self, sample_svg, temp_dir):
        source = temp_dir / "shapes.svg"
        source.write_text(sample_svg, encoding="utf-8")
        out = temp_dir / "imported.json"

        result = runner.invoke(app, ["import", str(source), "-o", str(out), "--fit", "400x300"])

        assert result.exit_code == 0
        assert json.loads(out.read_text(encoding="utf-8"))["version"] == "1.0"
        assert [o.name for o in load_json(out).objects] == ["triangle", "Imported Object 2"]

    def test_import_missing_file(self, temp_dir):
        result = runner.invoke(app, ["import", str(temp_dir / "absent.svg")])
        assert result.exit_code == 1

    def test_import_bad_fit(self, sample_svg, temp_dir):
        source = temp_dir / "shapes.svg"
        source.write_text(sample_svg, encoding="utf-8")
        result = runner.invoke(app, ["import", str(source), "--fit", "wide"])
        assert result.exit_code != 0
