"""
PDF to DXF Converter

Main converter class that orchestrates the full conversion pipeline:
PDF -> Image extraction -> Vector extraction -> Scaling/filtering -> DXF
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .content_interpreter import MAX_FORM_DEPTH
from .dxf_writer import (
    DEFAULT_DXF_VERSION,
    DEFAULT_UNIT,
    DXFWriter,
    GeometryDocumentBuilder,
)
from .exceptions import EmptyResultError, InputFileNotFoundError, PDF2DXFError
from .geometry import DEFAULT_CURVE_SEGMENTS
from .image_extractor import RasterObjectExtractor
from .layout import DEFAULT_PAGE_WIDTH, PAGE_MARGIN
from .pdf_document import PDFDocument
from .pdf_extractor import PDFVectorExtractor

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Result of a conversion operation"""
    success: bool
    output_files: List[str]
    message: str
    pages_processed: int = 0
    entities_count: int = 0
    image_files: List[str] = field(default_factory=list)
    error: Optional[PDF2DXFError] = None

    @property
    def output_path(self) -> Optional[str]:
        return self.output_files[0] if self.output_files else None


def default_output_path(input_path: str) -> str:
    """Same location and name as the input, with a .dxf extension"""
    return os.path.splitext(input_path)[0] + ".dxf"


class PDFToDXFConverter:
    """
    Main converter class for PDF to DXF conversion.

    Usage:
        converter = PDFToDXFConverter()
        result = converter.convert("input.pdf")

        # Or with options
        result = converter.convert(
            "input.pdf",
            "output.dxf",
            scale=2.0,
            unit="cm",
            pages=[0, 2],
        )
    """

    def __init__(self):
        self._progress_callback: Optional[Callable[[str, float], None]] = None

    def set_progress_callback(self, callback: Callable[[str, float], None]):
        """
        Set a callback for progress updates.

        Args:
            callback: Function(message: str, progress: float) where progress is 0-1
        """
        self._progress_callback = callback

    def _report_progress(self, message: str, progress: float):
        """Report progress if callback is set"""
        if self._progress_callback:
            self._progress_callback(message, progress)

    def convert(self, input_path: str, output_path: Optional[str] = None,
                **options) -> ConversionResult:
        """
        Convert PDF to DXF, reporting failures in the result.

        Takes the same arguments as ``run``. Invalid arguments (a non-positive
        scale, an unknown unit or DXF version) still raise ``ValueError``.

        Returns:
            ConversionResult with status and output files
        """
        try:
            return self.run(input_path, output_path, **options)
        except PDF2DXFError as e:
            logger.debug("Conversion of %s failed: %s", input_path, e)
            return ConversionResult(
                success=False,
                output_files=[],
                message=e.message,
                error=e,
            )

    def run(
        self,
        input_path: str,
        output_path: Optional[str] = None,
        scale: float = 1.0,
        unit: str = DEFAULT_UNIT,
        dxf_version: str = DEFAULT_DXF_VERSION,
        pages: Optional[Sequence[int]] = None,
        extract_images: bool = True,
        curve_segments: int = DEFAULT_CURVE_SEGMENTS,
        page_margin: float = PAGE_MARGIN,
        default_page_width: float = DEFAULT_PAGE_WIDTH,
        max_form_depth: int = MAX_FORM_DEPTH,
    ) -> ConversionResult:
        """
        Convert PDF to DXF.

        Args:
            input_path: Path to input PDF file
            output_path: Path for the DXF file (default: input with .dxf extension)
            scale: Scale factor applied on top of the unit conversion
            unit: Drawing unit (mm, cm, m, in, ft)
            dxf_version: Target DXF version
            pages: Specific pages to convert (0-indexed). None = all pages
            extract_images: Also save embedded images next to the DXF
            curve_segments: Line segments per flattened bezier curve
            page_margin: Horizontal gap between pages, in PDF points
            default_page_width: Width used for pages without a media box
            max_form_depth: Deepest form XObject nesting that is followed

        Returns:
            ConversionResult for a successful conversion

        Raises:
            InputFileNotFoundError: if the input does not exist
            DocumentLoadError: if the input cannot be parsed as a PDF
            EmptyResultError: if no non-degenerate line segment was found
            SerializationError: if the DXF cannot be written
        """
        input_path = os.path.abspath(input_path)
        output_path = os.path.abspath(output_path or default_output_path(input_path))

        # Validate arguments before touching the file system
        builder = GeometryDocumentBuilder(scale, unit)
        writer = DXFWriter(dxf_version, unit)

        if not os.path.isfile(input_path):
            raise InputFileNotFoundError(f"Input file not found: {input_path}")

        self._report_progress("Opening PDF...", 0.0)

        # Image files land beside the drawing
        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        with PDFDocument(input_path) as document:
            image_files = []
            if extract_images:
                self._report_progress("Extracting images...", 0.05)
                image_files = RasterObjectExtractor(document, output_path).extract()
                logger.info("Extracted %d image(s)", len(image_files))

            extractor = PDFVectorExtractor(
                document,
                curve_segments=curve_segments,
                page_margin=page_margin,
                default_page_width=default_page_width,
                max_form_depth=max_form_depth,
            )

            def page_progress(done: int, total: int):
                self._report_progress(f"Extracting page {done}/{total}...",
                                      0.1 + 0.7 * done / total)

            self._report_progress("Extracting vectors...", 0.1)
            data = extractor.extract_all_pages(pages, page_progress)

        builder.add_lines(data.lines)
        lines = builder.build()
        if not lines:
            raise EmptyResultError()

        self._report_progress("Writing DXF...", 0.9)
        writer.create_document(lines)
        writer.save(output_path)

        self._report_progress("Complete!", 1.0)

        message = f"Successfully converted {data.page_count} page(s)"
        if data.failed_streams:
            message += f" ({data.failed_streams} stream(s) could not be decoded)"

        return ConversionResult(
            success=True,
            output_files=[output_path],
            message=message,
            pages_processed=data.page_count,
            entities_count=len(lines),
            image_files=image_files,
        )


def convert_pdf(input_path: str, scale_factor: float = 1.0, unit: str = DEFAULT_UNIT,
                output_path: Optional[str] = None) -> str:
    """
    Convert a PDF to DXF and return the path of the drawing.

    Args:
        input_path: Path to input PDF
        scale_factor: Scale factor (> 0)
        unit: Drawing unit label
        output_path: Output path (optional, defaults to same name with .dxf)

    Returns:
        Path to the generated DXF file

    Raises:
        PDF2DXFError: subclasses describe why the conversion failed
    """
    result = PDFToDXFConverter().run(input_path, output_path, scale=scale_factor, unit=unit)
    return result.output_path
