"""Jianpu CLI entry point."""

import json
import logging
import sys
from pathlib import Path

import click

from jianpu import __version__
from jianpu.diagnostics import LogEntry, Severity
from jianpu.sheet_models import Options, Sheet, SheetStyle


def _echo_logs(logs: list[LogEntry]) -> None:
    for entry in logs:
        click.echo(f"  {entry}", err=entry.severity is Severity.ERROR)


def _build_options(
    options_file: str | None,
    width: float | None,
    font_size: float | None,
    padding_x: float | None,
    padding_y: float | None,
    line_padding: float | None,
    font: str | None,
    fill_color: str | None,
    background_color: str | None,
) -> Options:
    """Start from an options file (or the defaults) and apply the command-line overrides."""
    if options_file is not None:
        with open(options_file, encoding="utf-8") as fh:
            base = Options.from_dict(json.load(fh))
    else:
        base = Options()

    style = SheetStyle(
        font=font if font is not None else base.style.font,
        fill_color=fill_color if fill_color is not None else base.style.fill_color,
        background_color=background_color if background_color is not None else base.style.background_color,
    )
    return Options(
        width=width if width is not None else base.width,
        padding_x=padding_x if padding_x is not None else base.padding_x,
        padding_y=padding_y if padding_y is not None else base.padding_y,
        font_size=font_size if font_size is not None else base.font_size,
        line_padding=line_padding if line_padding is not None else base.line_padding,
        style=style,
    )


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="jianpu")
@click.option("--verbose", "-v", is_flag=True, help="Log layout decisions to stderr.")
def main(verbose: bool) -> None:
    """Jianpu — numbered musical notation typesetter."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.CRITICAL, format="%(levelname)s %(message)s")


# ── render subcommand ──────────────────────────────────────────────────────────

@main.command(name="render")
@click.argument("sheet_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file path. Defaults to the sheet path with the format's extension.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["svg", "html"], case_sensitive=False),
    default="svg",
    show_default=True,
    help="Output format: standalone SVG page or self-contained HTML page.",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 when the layout pass logged errors.",
)
@click.option(
    "--options",
    "options_file",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    default=None,
    metavar="PATH",
    help="JSON layout options (width, paddingX, paddingY, fontSize, linePadding, style).",
)
@click.option("--width", type=click.FloatRange(min=1), default=None, help="Page width in pixels [1280].")
@click.option("--font-size", type=click.FloatRange(min=1), default=None, help="Digit size in pixels [32].")
@click.option("--padding-x", type=click.FloatRange(min=0), default=None, help="Left/right page margin [80].")
@click.option("--padding-y", type=click.FloatRange(min=0), default=None, help="Top/bottom page margin [100].")
@click.option("--line-padding", type=click.FloatRange(min=0), default=None, help="Space between rows [40].")
@click.option("--font", default=None, help="Font family [arial].")
@click.option("--fill-color", default=None, help="Ink color [#333].")
@click.option("--background-color", default=None, help="Page color [#fff].")
def render_command(
    sheet_file: str,
    output: str | None,
    output_format: str,
    strict: bool,
    options_file: str | None,
    width: float | None,
    font_size: float | None,
    padding_x: float | None,
    padding_y: float | None,
    line_padding: float | None,
    font: str | None,
    fill_color: str | None,
    background_color: str | None,
) -> None:
    """
    Typeset a jianpu sheet document (JSON) as SVG or HTML.

    SHEET_FILE is the path to an existing sheet .json file.

    \b
    Examples:
      jianpu render song.json
      jianpu render song.json --format html -o song.html
      jianpu render song.json --width 1600 --font-size 40 --strict
    """
    from jianpu.sheet_exporter import SheetExporter

    sheet_path = Path(sheet_file)
    normalized_format = output_format.lower()
    resolved_output = output if output is not None else str(sheet_path.with_suffix(f".{normalized_format}"))

    click.echo(f"jianpu v{__version__}")
    click.echo(f"  Sheet  : {sheet_file}")
    click.echo(f"  Format : {normalized_format}")
    click.echo(f"  Output : {resolved_output}")
    click.echo()

    try:
        options = _build_options(
            options_file, width, font_size, padding_x, padding_y, line_padding, font, fill_color, background_color
        )
        exporter = SheetExporter(output_format=normalized_format, options=options)
        result = exporter.export(sheet_file, resolved_output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not read or write a file — {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not typeset sheet — {exc}", err=True)
        sys.exit(1)

    _echo_logs(result.logs)
    errors = sum(1 for entry in result.logs if entry.severity is Severity.ERROR)
    warnings = len(result.logs) - errors

    click.echo()
    click.echo(f"Done!  {len(result.items)} items, {errors} error(s), {warnings} warning(s) → '{resolved_output}'.")
    if strict and errors:
        sys.exit(1)


# ── check subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("sheet_file", type=click.Path(exists=True, dir_okay=False, readable=True))
def check(sheet_file: str) -> None:
    """
    Lay out a sheet without writing output and list every diagnostic.

    Exits with status 1 if the sheet is invalid or the pass logged errors.
    """
    from jianpu.sheet_exporter import SheetExporter

    exporter = SheetExporter()
    try:
        _, result = exporter.typeset(exporter.load(sheet_file))
    except (OSError, ValueError) as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)

    if not result.logs:
        click.echo("OK: no problems found.")
        return

    _echo_logs(result.logs)
    if any(entry.severity is Severity.ERROR for entry in result.logs):
        sys.exit(1)


# ── new subcommand ─────────────────────────────────────────────────────────────

@main.command()
@click.argument("sheet_file", type=click.Path(dir_okay=False, writable=True))
@click.option("--title", default=None, metavar="TEXT", help="Title of the new sheet.")
def new(sheet_file: str, title: str | None) -> None:
    """Write a new sheet document: one measure of quarter rests in 4/4."""
    data = Sheet.default().to_dict()
    if title is not None:
        data["info"]["title"] = title

    try:
        with open(sheet_file, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write sheet file — {exc}", err=True)
        sys.exit(1)

    click.echo(f"Created '{sheet_file}'.")
