"""
Pagination
==========

Splits the rendered document into page-sized bands.

The capture layout stacks the header band, the footer band and then the
document body. Only the body is paginated; the bands are captured once and
stamped on every page.
"""

from typing import List
import math

from quick_html_pdf.models.schemas import PageGeometry, PageRegion

DEFAULT_MAX_PAGES = 1000


def count_pages(content_height_px: float, page_height_px: int, max_pages: int = DEFAULT_MAX_PAGES) -> int:
    """Number of page bands needed for the content, clamped to ``[1, max_pages]``."""
    if page_height_px <= 0:
        raise ValueError("Page height must be positive")
    pages = math.ceil(max(0.0, content_height_px) / page_height_px)
    return min(max(pages, 1), max_pages)


def body_offset_px(geometry: PageGeometry) -> int:
    """Pixel offset where the document body starts in the capture layout."""
    return geometry.header_height_px + geometry.footer_height_px


def plan_pages(
    document_height_px: float, geometry: PageGeometry, max_pages: int = DEFAULT_MAX_PAGES
) -> List[PageRegion]:
    """
    Compute the page sequence for a mounted document.

    Args:
        document_height_px: Total scroll height of the mounted document
        geometry: Page geometry
        max_pages: Upper bound on the number of pages

    Returns:
        Regions in page order; always at least one
    """
    band = geometry.band_height_px
    top = body_offset_px(geometry)
    total = count_pages(document_height_px - top, band, max_pages)

    return [
        PageRegion(page_number=index + 1, offset_y=top + index * band, height_px=band)
        for index in range(total)
    ]
