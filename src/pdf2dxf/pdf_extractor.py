"""
PDF Vector Extractor Module

Drives the content-stream interpreter over every page of a document and
collects the resulting line segments. Pages are laid out side by side so a
multi-page PDF becomes a single drawing.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .content_interpreter import MAX_FORM_DEPTH, ContentStreamInterpreter
from .exceptions import StreamDecodeError
from .geometry import DEFAULT_CURVE_SEGMENTS, LineSegment
from .layout import DEFAULT_PAGE_WIDTH, PAGE_MARGIN, PageLayoutCompositor
from .pdf_document import PDFDocument, PageInfo

logger = logging.getLogger(__name__)


@dataclass
class ExtractedData:
    """Container for the line segments extracted from a document"""
    lines: List[LineSegment] = field(default_factory=list)
    page_count: int = 0
    failed_streams: int = 0     # page or form streams that could not be decoded

    def get_entity_count(self) -> int:
        """Return total number of entities"""
        return len(self.lines)


class PDFVectorExtractor:
    """
    Extract centerline geometry from a PDF document.

    Usage:
        with PDFDocument("input.pdf") as document:
            data = PDFVectorExtractor(document).extract_all_pages()
    """

    def __init__(self, document: PDFDocument,
                 curve_segments: int = DEFAULT_CURVE_SEGMENTS,
                 page_margin: float = PAGE_MARGIN,
                 default_page_width: float = DEFAULT_PAGE_WIDTH,
                 max_form_depth: int = MAX_FORM_DEPTH):
        """
        Initialize extractor.

        Args:
            document: Open PDF document
            curve_segments: Line segments per flattened bezier curve
            page_margin: Horizontal gap between pages
            default_page_width: Width used for pages without a media box
            max_form_depth: Deepest form XObject nesting that is followed
        """
        self.document = document
        self.curve_segments = curve_segments
        self.page_margin = page_margin
        self.default_page_width = default_page_width
        self.max_form_depth = max_form_depth

    def extract_all_pages(
        self,
        pages: Optional[Sequence[int]] = None,
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> ExtractedData:
        """
        Extract line segments from all (or the selected) pages.

        Args:
            pages: Optional 0-indexed page numbers to extract
            progress: Optional callback(done, total) called after each page

        Returns:
            ExtractedData with the lines of every page in layout coordinates
        """
        page_infos = list(self.document.iter_pages(pages))
        data = ExtractedData()
        layout = PageLayoutCompositor(self.page_margin, self.default_page_width)

        with ContentStreamInterpreter(
            self.document,
            output=data.lines,
            curve_segments=self.curve_segments,
            max_depth=self.max_form_depth,
        ) as interpreter:
            for i, page in enumerate(page_infos):
                base_ctm = layout.place(page.width)
                if not self._extract_page(interpreter, page, base_ctm):
                    data.failed_streams += 1
                data.page_count += 1
                if progress:
                    progress(i + 1, len(page_infos))
            data.failed_streams += interpreter.failed_streams

        return data

    def _extract_page(self, interpreter: ContentStreamInterpreter,
                      page: PageInfo, base_ctm) -> bool:
        """Interpret one page; False if its content could not be decoded"""
        try:
            content = self.document.page_content(page)
            count = interpreter.run(content, base_ctm, page.scope)
        except StreamDecodeError as e:
            logger.warning("Page %d contributes no geometry: %s", page.number + 1, e)
            return False

        logger.debug("Page %d: %d line segments", page.number + 1, count)
        return True
