"""
Unit Tests for Pagination
=========================

Tests for page counting and page region planning.
"""

import pytest

from quick_html_pdf.core.rendering.pagination import body_offset_px, count_pages, plan_pages
from quick_html_pdf.models.schemas import PdfOptions


class TestCountPages:
    """Test page count computation."""

    @pytest.mark.parametrize(
        "height,page_height,expected",
        [
            (0, 100, 1),
            (-50, 100, 1),
            (1, 100, 1),
            (100, 100, 1),
            (101, 100, 2),
            (250, 100, 3),
            (1000, 100, 10),
        ],
    )
    def test_count(self, height, page_height, expected):
        assert count_pages(height, page_height) == expected

    def test_upper_bound(self):
        assert count_pages(10_000_000, 100) == 1000
        assert count_pages(10_000, 100, max_pages=5) == 5

    def test_invalid_page_height(self):
        with pytest.raises(ValueError):
            count_pages(100, 0)


class TestPlanPages:
    """Test page region planning."""

    def test_regions_without_bands(self):
        geometry = PdfOptions().geometry
        band = geometry.band_height_px

        regions = plan_pages(band * 2 + 1, geometry)

        assert [r.page_number for r in regions] == [1, 2, 3]
        assert [r.offset_y for r in regions] == [0, band, band * 2]
        assert all(r.height_px == band for r in regions)

    def test_zero_height_gives_one_page(self):
        regions = plan_pages(0, PdfOptions().geometry)
        assert len(regions) == 1
        assert regions[0].offset_y == 0

    def test_regions_skip_bands(self):
        geometry = PdfOptions(header_html="H", footer_html="F").geometry
        top = body_offset_px(geometry)
        band = geometry.band_height_px

        assert top == geometry.header_height_px + geometry.footer_height_px

        regions = plan_pages(top + band + 10, geometry)

        assert len(regions) == 2
        assert regions[0].offset_y == top
        assert regions[1].offset_y == top + band

    def test_bands_only_document(self):
        geometry = PdfOptions(header_html="H").geometry
        assert len(plan_pages(geometry.header_height_px, geometry)) == 1

    def test_max_pages(self):
        geometry = PdfOptions().geometry
        assert len(plan_pages(geometry.band_height_px * 50, geometry, max_pages=7)) == 7
