"""CurveBridge CLI for local development and testing.

Provides command-line access to path data parsing, design import with the
batch pipeline, SVG export and path data generation.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table
from rich.text import Text

from curve_import import ImportConfig, ImportPipeline, ImportProgress, PRESETS
from curve_ir.schema import Design
from curve_ir.serialize import dump_json, load_json
from curve_kernel.summary import PathSummary, summarize_design
from curve_kernel.transform import fit_to_canvas
from svg_codec import (
    InsufficientGeometryError,
    ParseError,
    ParserConfig,
    export_svg,
    generate_path_data,
    parse_path,
)

from . import __version__
from .logging_setup import configure_logging

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="curvebridge",
    help="CurveBridge CLI for bezier path import, SVG path data and SVG export",
    add_completion=False,
)

console = Console()

PARSER_PRESETS = {
    "full": ParserConfig.full,
    "balanced": ParserConfig.balanced,
    "safe": ParserConfig.safe,
}


def _display_error(message: str, error: Optional[Exception] = None) -> None:
    """Display error message with styling."""
    error_text = Text(f"❌ {message}", style="bold red")
    if error:
        error_text.append(f"\n   {str(error)}", style="red")
    console.print(Panel(error_text, title="Error", border_style="red"))


def _display_success(message: str) -> None:
    """Display success message with styling."""
    success_text = Text(f"✅ {message}", style="bold green")
    console.print(Panel(success_text, title="Success", border_style="green"))


def _display_warning(message: str) -> None:
    """Display warning message with styling."""
    warning_text = Text(f"⚠️  {message}", style="bold yellow")
    console.print(Panel(warning_text, title="Warning", border_style="yellow"))


def _setup_logging(verbose: bool) -> None:
    configure_logging(level="DEBUG" if verbose else "WARNING", enable_colors=True)


def _parse_size(value: str) -> Tuple[float, float]:
    """Parse a ``WIDTHxHEIGHT`` canvas size."""
    try:
        width, height = (float(part) for part in value.lower().split("x"))
    except ValueError:
        raise typer.BadParameter(f"Expected WIDTHxHEIGHT, got '{value}'") from None
    if width <= 0 or height <= 0:
        raise typer.BadParameter("Canvas dimensions must be positive")
    return width, height


def _load_design(path: str) -> Design:
    try:
        return load_json(path)
    except (FileNotFoundError, ValueError) as e:
        _display_error("Failed to load design", e)
        raise typer.Exit(1)


@app.command()
def info() -> None:
    """Display CurveBridge version and the available import presets."""
    console.print(Panel(
        f"CurveBridge {__version__}\n"
        "Bezier path import, SVG path data and SVG export",
        title="CurveBridge",
        border_style="blue"
    ))

    active = ImportConfig.from_env()

    table = Table(title="Import Limits")
    table.add_column("Preset", style="cyan")
    table.add_column("Max Objects", style="yellow")
    table.add_column("Max Points", style="yellow")
    table.add_column("Batch Size", style="yellow")
    table.add_column("Max Commands", style="white")
    table.add_column("Target Points", style="white")

    rows = [(name, factory()) for name, factory in PRESETS.items()]
    rows.append(("active (env)", active))
    for name, config in rows:
        table.add_row(
            name,
            str(config.max_objects),
            str(config.max_points_per_object),
            str(config.batch_size),
            str(config.parser.max_commands or "unlimited"),
            str(config.parser.target_point_count or "-"),
        )

    console.print(table)


@app.command()
def parse(
    path_data: str = typer.Argument(..., help="SVG path data, e.g. 'M0 0 L100 0'"),
    preset: str = typer.Option("full", "--preset", "-p", help="Parser preset (full, balanced, safe)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Parse SVG path data and show the resulting control points."""
    _setup_logging(verbose)

    if preset not in PARSER_PRESETS:
        _display_error(f"Unknown parser preset '{preset}'")
        raise typer.Exit(1)

    try:
        parsed = parse_path(path_data, PARSER_PRESETS[preset]())
    except (ParseError, InsufficientGeometryError) as e:
        _display_error("Failed to parse path data", e)
        raise typer.Exit(1)

    table = Table(title=f"Anchors ({len(parsed.points)})")
    table.add_column("#", style="cyan")
    table.add_column("Anchor", style="white")
    table.add_column("Handle In", style="yellow")
    table.add_column("Handle Out", style="yellow")

    for i, cp in enumerate(parsed.points):
        table.add_row(
            str(i),
            f"({cp.anchor.x:.2f}, {cp.anchor.y:.2f})",
            f"({cp.handle_in.x:.2f}, {cp.handle_in.y:.2f})",
            f"({cp.handle_out.x:.2f}, {cp.handle_out.y:.2f})",
        )

    console.print(table)
    console.print(f"Closed: {'✅' if parsed.closed else '❌'}  Subpaths: {parsed.subpaths}  "
                  f"Commands: {parsed.commands_processed}")

    for warning in parsed.warnings:
        _display_warning(warning)

    console.print("\n[bold]Path data:[/bold]")
    typer.echo(generate_path_data(parsed.points))


@app.command("import")
def import_design(
    path: str = typer.Argument(..., help="JSON design, SVG document or path data file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the imported design as JSON"),
    preset: str = typer.Option("default", "--preset", "-p", help="Import preset (safe, default, balanced, full)"),
    fit: Optional[str] = typer.Option(None, "--fit", help="Center and fit on a WIDTHxHEIGHT canvas"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Import a design file through the batch pipeline."""
    _setup_logging(verbose)

    file_path = Path(path)
    if not file_path.exists():
        _display_error(f"File not found: {file_path}")
        raise typer.Exit(1)

    try:
        config = ImportConfig.from_env(ImportConfig.preset(preset))
    except KeyError as e:
        _display_error("Invalid preset", e)
        raise typer.Exit(1)

    canvas = _parse_size(fit) if fit else None
    errors: List[Exception] = []

    console.print(f"🔄 Importing: {file_path}")
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Importing objects", total=100)

        def on_progress(update: ImportProgress) -> None:
            progress.update(task, completed=update.percent)

        result = ImportPipeline(config).run(
            file_path.read_bytes(),
            on_progress=on_progress,
            on_error=errors.append,
        )

    if result is None:
        _display_error("Unrecognized file format", errors[0] if errors else None)
        raise typer.Exit(1)

    design = Design(objects=result.objects)
    if canvas:
        scale = fit_to_canvas(design.objects, *canvas)
        console.print(f"Fitted to {canvas[0]:g}x{canvas[1]:g} canvas (scale {scale:.3f})")

    _display_summaries(summarize_design(design), title=f"Imported ({result.format})")

    if result.skipped:
        for skipped in result.skipped:
            _display_warning(f"Skipped object {skipped.index + 1}: {skipped.reason}")
    for warning in result.warnings:
        console.print(f"  ⚠️  {warning}")
    if result.repairs:
        console.print(f"[yellow]{len(result.repairs)} value(s) repaired during import[/yellow]")

    if output:
        written = dump_json(design, output, pretty=True)
        _display_success(f"Design written to: {written}")
    elif not design.objects:
        _display_warning("No objects were imported")


@app.command()
def export(
    path: str = typer.Argument(..., help="Design JSON file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output path for the SVG file"),
    width: float = typer.Option(800, "--width", help="Canvas width"),
    height: float = typer.Option(600, "--height", help="Canvas height"),
    background: bool = typer.Option(True, "--background/--no-background", help="Include a white background"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Export a design as an SVG document."""
    _setup_logging(verbose)

    design = _load_design(path)
    svg = export_svg(design, width=width, height=height, include_background=background)

    if output is None:
        typer.echo(svg)
        return

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(svg, encoding="utf-8")
    _display_success(f"SVG written to: {output_path}")

    skipped = len(design) - len(design.renderable_objects())
    if skipped:
        _display_warning(f"{skipped} object(s) with fewer than 2 points were not exported")


@app.command("path-data")
def path_data(
    path: str = typer.Argument(..., help="Design JSON file"),
    offset: float = typer.Option(0.0, "--offset", help="Parallel curve offset"),
    names: bool = typer.Option(False, "--names", help="Prefix each line with the object name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Print SVG path data, one line per object."""
    _setup_logging(verbose)
    design = _load_design(path)

    for obj in design.objects:
        data = generate_path_data(obj.points, offset=offset)
        if not data:
            logger.warning("Object has no path data", object_id=obj.id, points=len(obj.points))
            continue
        typer.echo(f"{obj.name}\t{data}" if names else data)


def _display_summaries(summaries: List[PathSummary], title: str) -> None:
    """Display per-object summaries in a formatted table."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Anchors", style="yellow")
    table.add_column("Segments", style="yellow")
    table.add_column("Length", style="white")
    table.add_column("Bounds", style="white")

    for summary in summaries:
        bbox = summary.bounding_box
        bounds = (f"({bbox.min_x:.1f}, {bbox.min_y:.1f}) → ({bbox.max_x:.1f}, {bbox.max_y:.1f})"
                  if bbox else "-")
        table.add_row(
            summary.name,
            str(summary.anchors),
            str(summary.segments),
            f"{summary.length:.2f}",
            bounds,
        )

    console.print(table)


if __name__ == "__main__":
    app()
