"""
Command Line Interface for PDF to DXF Converter

Usage:
    pdf2dxf input.pdf
    pdf2dxf input.pdf output.dxf --unit cm --scale 2.0
    pdf2dxf input.pdf --pages 0,1,2 --no-images
"""

import logging
import os
import sys
from typing import List, Optional

import click
from tqdm import tqdm

from . import __version__
from .converter import PDFToDXFConverter, default_output_path
from .dxf_writer import DEFAULT_DXF_VERSION, DEFAULT_UNIT, UNIT_MAP, DXFWriter
from .exceptions import EmptyResultError
from .geometry import DEFAULT_CURVE_SEGMENTS


def parse_pages(ctx, param, value) -> Optional[List[int]]:
    """Parse comma-separated page numbers"""
    if value is None:
        return None
    try:
        return [int(p.strip()) for p in value.split(",")]
    except ValueError:
        raise click.BadParameter("Pages must be comma-separated integers (e.g., 0,1,2)")


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_file", type=click.Path(dir_okay=False), required=False)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False),
    help="Output file path (alternative to positional argument)"
)
@click.option(
    "-s", "--scale",
    type=click.FloatRange(min=0, min_open=True),
    default=1.0,
    help="Scale factor for coordinates (default: 1.0)"
)
@click.option(
    "-u", "--unit",
    type=click.Choice(sorted(UNIT_MAP), case_sensitive=False),
    default=DEFAULT_UNIT,
    help=f"Drawing unit (default: {DEFAULT_UNIT})"
)
@click.option(
    "--dxf-version",
    type=click.Choice(DXFWriter.VERSIONS),
    default=DEFAULT_DXF_VERSION,
    help=f"Target DXF version (default: {DEFAULT_DXF_VERSION})"
)
@click.option(
    "-p", "--pages",
    callback=parse_pages,
    help="Specific pages to convert (0-indexed, comma-separated, e.g., 0,1,2)"
)
@click.option(
    "--curve-segments",
    type=click.IntRange(min=1),
    default=DEFAULT_CURVE_SEGMENTS,
    help=f"Line segments per bezier curve (default: {DEFAULT_CURVE_SEGMENTS})"
)
@click.option(
    "--no-images",
    is_flag=True,
    help="Do not save embedded images next to the drawing"
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Suppress progress output"
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Log details about skipped streams and objects"
)
@click.version_option(version=__version__)
def main(
    input_file: str,
    output_file: Optional[str],
    output: Optional[str],
    scale: float,
    unit: str,
    dxf_version: str,
    pages: Optional[List[int]],
    curve_segments: int,
    no_images: bool,
    quiet: bool,
    verbose: bool,
):
    """
    Convert the vector graphics of a PDF file to a DXF drawing.

    \b
    Examples:
        pdf2dxf drawing.pdf                    # Convert to drawing.dxf
        pdf2dxf drawing.pdf output.dxf         # Convert to specified output
        pdf2dxf drawing.pdf -u in -s 0.5       # Inches, half size
        pdf2dxf drawing.pdf -p 0,2,4           # Convert specific pages
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    out_path = output or output_file or default_output_path(input_file)

    converter = PDFToDXFConverter()

    progress_bar = None
    if not quiet:
        click.echo(f"Converting: {input_file}")
        click.echo(f"Output: {out_path}")
        progress_bar = tqdm(total=100, unit="%", leave=False,
                            bar_format="{l_bar}{bar:30}| {n_fmt}%")

        def progress_callback(message: str, progress: float):
            progress_bar.set_description(message)
            progress_bar.update(int(progress * 100) - progress_bar.n)

        converter.set_progress_callback(progress_callback)

    try:
        result = converter.convert(
            input_path=input_file,
            output_path=out_path,
            scale=scale,
            unit=unit,
            dxf_version=dxf_version,
            pages=pages,
            extract_images=not no_images,
            curve_segments=curve_segments,
        )
    finally:
        if progress_bar is not None:
            progress_bar.close()

    # Report result
    if result.success:
        if not quiet:
            click.echo(click.style("Conversion successful!", fg="green"))
            click.echo(f"  Pages processed: {result.pages_processed}")
            click.echo(f"  Lines: {result.entities_count}")
            click.echo(f"  Output: {result.output_path}")
            for image in result.image_files:
                click.echo(f"  Image: {os.path.basename(image)}")
        sys.exit(0)
    elif isinstance(result.error, EmptyResultError):
        click.echo(click.style(result.message, fg="yellow"), err=True)
        sys.exit(2)
    else:
        click.echo(click.style(f"Conversion failed: {result.message}", fg="red"), err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
