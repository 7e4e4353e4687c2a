"""
PDF to DXF Converter

Converts the vector content of PDF drawings (catalog sheets, plans, technical
diagrams) to DXF line geometry at a chosen scale and unit.

Key Features:
- Content-stream interpretation with full CTM tracking (q/Q/cm)
- Nested form XObjects with their own matrices and resources
- Bezier curves flattened to line segments
- Multi-page documents laid out side by side in one drawing
- Embedded JPEG/PNG images saved next to the drawing
"""

__version__ = "1.0.0"

# Main converter
from .converter import (
    PDFToDXFConverter,
    ConversionResult,
    convert_pdf,
)

# Geometry
from .geometry import (
    Point,
    LineSegment,
    AffineTransform,
    flatten_cubic,
)

# PDF reading and interpretation
from .pdf_document import PDFDocument, ResourceScope, XObject, XObjectKind
from .content_interpreter import ContentStreamInterpreter, GraphicsState, PathCursor
from .layout import PageLayoutCompositor
from .pdf_extractor import PDFVectorExtractor, ExtractedData
from .image_extractor import RasterObjectExtractor, RasterObject

# DXF writing
from .dxf_writer import (
    DXFWriter,
    GeometryDocumentBuilder,
    create_dxf_from_lines,
)

# Errors
from .exceptions import (
    PDF2DXFError,
    DocumentLoadError,
    InputFileNotFoundError,
    StreamDecodeError,
    ResourceResolutionError,
    EmptyResultError,
    SerializationError,
)

__all__ = [
    # Version
    "__version__",
    # Main converter
    "PDFToDXFConverter",
    "ConversionResult",
    "convert_pdf",
    # Geometry
    "Point",
    "LineSegment",
    "AffineTransform",
    "flatten_cubic",
    # PDF reading and interpretation
    "PDFDocument",
    "ResourceScope",
    "XObject",
    "XObjectKind",
    "ContentStreamInterpreter",
    "GraphicsState",
    "PathCursor",
    "PageLayoutCompositor",
    "PDFVectorExtractor",
    "ExtractedData",
    "RasterObjectExtractor",
    "RasterObject",
    # DXF writing
    "DXFWriter",
    "GeometryDocumentBuilder",
    "create_dxf_from_lines",
    # Errors
    "PDF2DXFError",
    "DocumentLoadError",
    "InputFileNotFoundError",
    "StreamDecodeError",
    "ResourceResolutionError",
    "EmptyResultError",
    "SerializationError",
]
