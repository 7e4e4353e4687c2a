"""
Image Extractor Module

Saves the raster images embedded in a PDF as standalone files next to the
drawing. JPEG streams are copied byte for byte; 8-bit RGB and grayscale
samples are written as PNG. Other encodings are skipped.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from PIL import Image

from .pdf_document import PDFDocument, XObjectKind

logger = logging.getLogger(__name__)

# Filters whose stream data is already a complete JPEG file
JPEG_FILTERS = {"DCTDecode", "DCT"}


@dataclass
class RasterObject:
    """Metadata of an image XObject"""
    xref: int
    width: int
    height: int
    bits_per_component: int = 8
    color_space: str = "DeviceRGB"
    filters: List[str] = field(default_factory=list)

    @property
    def is_jpeg(self) -> bool:
        return any(f in JPEG_FILTERS for f in self.filters)


class RasterObjectExtractor:
    """
    Write every image XObject of a document to ``{stem}_img_{n}.{jpg|png}``.

    Files land in the directory of ``output_path`` and are numbered from 1 in
    object table order. A broken image is skipped without affecting the rest.
    """

    def __init__(self, document: PDFDocument, output_path: str):
        """
        Initialize extractor.

        Args:
            document: Open PDF document
            output_path: Path of the primary output; its stem and directory
                         name the image files
        """
        self.document = document
        self.output_dir = os.path.dirname(os.path.abspath(output_path))
        self.stem = os.path.splitext(os.path.basename(output_path))[0] or "document"
        self.image_counter = 1

    def extract(self) -> List[str]:
        """
        Extract all supported images.

        Returns:
            Paths of the files written
        """
        written = []
        for xref in self.document.iter_stream_xrefs():
            try:
                raster = self._read_raster(xref)
                if raster is None:
                    continue
                path = self._save(raster)
            except Exception as e:
                # Skip problematic images but continue extraction
                logger.debug("Skipping image object %d: %s", xref, e)
                continue

            if path:
                written.append(path)
                self.image_counter += 1
        return written

    def _read_raster(self, xref: int) -> Optional[RasterObject]:
        """Return image metadata, or None if the stream is not an image"""
        if self.document.get_name(xref, "Subtype") != XObjectKind.IMAGE.value:
            return None

        width = self.document.get_number(xref, "Width")
        height = self.document.get_number(xref, "Height")
        bpc = self.document.get_number(xref, "BitsPerComponent")
        return RasterObject(
            xref=xref,
            width=int(width) if width else 0,
            height=int(height) if height else 0,
            bits_per_component=int(bpc) if bpc is not None else 8,
            color_space=self.document.get_name(xref, "ColorSpace") or "DeviceRGB",
            filters=self.document.get_names(xref, "Filter"),
        )

    def _next_path(self, ext: str) -> str:
        return os.path.join(self.output_dir, f"{self.stem}_img_{self.image_counter}.{ext}")

    def _save(self, raster: RasterObject) -> Optional[str]:
        if raster.is_jpeg:
            path = self._next_path("jpg")
            with open(path, "wb") as f:
                f.write(self.document.read_raw_stream(raster.xref))
            return path

        image = self._to_image(raster)
        if image is None:
            logger.debug("Unsupported image object %d (%s, %d bpc)",
                         raster.xref, raster.color_space, raster.bits_per_component)
            return None

        path = self._next_path("png")
        image.save(path, format="PNG")
        return path

    def _to_image(self, raster: RasterObject) -> Optional[Image.Image]:
        """Build a PIL image from 8-bit RGB or grayscale samples"""
        if raster.bits_per_component != 8 or raster.width <= 0 or raster.height <= 0:
            return None

        samples = self.document.read_stream(raster.xref)
        pixels = raster.width * raster.height

        is_rgb = raster.color_space == "DeviceRGB" or len(samples) == pixels * 3
        is_gray = raster.color_space == "DeviceGray" or len(samples) == pixels

        if is_rgb and len(samples) >= pixels * 3:
            array = np.frombuffer(samples, dtype=np.uint8, count=pixels * 3)
            return Image.fromarray(array.reshape(raster.height, raster.width, 3))
        if is_gray and len(samples) >= pixels:
            array = np.frombuffer(samples, dtype=np.uint8, count=pixels)
            return Image.fromarray(array.reshape(raster.height, raster.width))
        return None
