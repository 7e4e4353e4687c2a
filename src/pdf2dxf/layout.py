"""
Page Layout Module

Places the pages of a document side by side along the X axis so that all of
them can share one drawing without overlapping.
"""

import logging
import math
from typing import Optional

from .geometry import AffineTransform

logger = logging.getLogger(__name__)

# Horizontal gap between consecutive pages, in PDF points
PAGE_MARGIN = 200.0

# Width assumed for pages without a usable /MediaBox, in PDF points
DEFAULT_PAGE_WIDTH = 1000.0


class PageLayoutCompositor:
    """
    Compute the base transform of each page in document order.

    Page n is shifted right by the sum of the widths of pages 0..n-1 plus one
    margin per preceding page.
    """

    def __init__(self, margin: float = PAGE_MARGIN,
                 default_width: float = DEFAULT_PAGE_WIDTH):
        self.margin = margin
        self.default_width = default_width
        self.offset_x = 0.0

    def place(self, width: Optional[float]) -> AffineTransform:
        """
        Reserve room for the next page and return its base transform.

        Args:
            width: Declared page width; None, zero or non-finite values fall
                back to the default width

        Returns:
            Translation placing the page at the current offset
        """
        if width is None or not math.isfinite(width) or width <= 0:
            logger.debug("Using default page width %s instead of %r",
                         self.default_width, width)
            width = self.default_width

        page_offset_x = self.offset_x
        self.offset_x += width + self.margin
        return AffineTransform.translation(page_offset_x, 0.0)
