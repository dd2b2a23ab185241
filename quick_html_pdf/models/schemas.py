"""
Pydantic Models and Schemas
===========================

Core data models for PDF options, page geometry, page sequences and API
requests/responses. Option models validate degenerate page configurations
up front so every downstream computation works with positive dimensions.
"""

from typing import Optional, Dict, Any, Literal
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Pixels per millimetre at the 96 DPI CSS reference resolution
PX_PER_MM = 96 / 25.4


# Enums
class PageFormat(str, Enum):
    """Supported paper sizes."""
    A4 = "A4"
    LETTER = "letter"
    LEGAL = "legal"

    @property
    def width_mm(self) -> float:
        return _PAGE_SIZES_MM[self][0]

    @property
    def height_mm(self) -> float:
        return _PAGE_SIZES_MM[self][1]

    @property
    def sink_name(self) -> str:
        """Lower-case format name used by assembly sinks."""
        return self.value.lower()


_PAGE_SIZES_MM = {
    PageFormat.A4: (210.0, 297.0),
    PageFormat.LETTER: (215.9, 279.4),
    PageFormat.LEGAL: (215.9, 355.6),
}


class Orientation(str, Enum):
    """Page orientation."""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class OutputMode(str, Enum):
    """How a generation call delivers its result."""
    BYTES = "bytes"
    NATIVE_PRINT = "native_print"


# Option Models
class PdfMargins(BaseModel):
    """Page margins in millimetres."""
    model_config = ConfigDict(frozen=True)

    top: float = Field(20.0, ge=0, description="Top margin in mm")
    right: float = Field(15.0, ge=0, description="Right margin in mm")
    bottom: float = Field(20.0, ge=0, description="Bottom margin in mm")
    left: float = Field(15.0, ge=0, description="Left margin in mm")

    @classmethod
    def all(cls, mm: float) -> "PdfMargins":
        """Uniform margins on all sides."""
        return cls(top=mm, right=mm, bottom=mm, left=mm)

    @classmethod
    def symmetric(cls, vertical: float = 20.0, horizontal: float = 15.0) -> "PdfMargins":
        return cls(top=vertical, right=horizontal, bottom=vertical, left=horizontal)

    @classmethod
    def zero(cls) -> "PdfMargins":
        return cls.all(0)

    def to_css(self) -> str:
        """Convert to a CSS margin shorthand."""
        return f"{_mm(self.top)} {_mm(self.right)} {_mm(self.bottom)} {_mm(self.left)}"


class ChromeOptions(BaseModel):
    """Optional header/footer bands repeated on every page."""
    model_config = ConfigDict(frozen=True)

    header_html: Optional[str] = None
    footer_html: Optional[str] = None
    header_height_mm: float = Field(25.0, ge=0)
    footer_height_mm: float = Field(20.0, ge=0)

    @property
    def has_header(self) -> bool:
        return bool(self.header_html)

    @property
    def has_footer(self) -> bool:
        return bool(self.footer_html)


class PageGeometry(BaseModel):
    """
    Physical page layout and its pixel projection.

    Header/footer heights are zero when the matching band is absent. The
    body band is the part of the content area left for document content.
    """
    model_config = ConfigDict(frozen=True)

    page_format: PageFormat = PageFormat.A4
    orientation: Orientation = Orientation.PORTRAIT
    width_mm: float = Field(..., gt=0)
    height_mm: float = Field(..., gt=0)
    margins: PdfMargins = Field(default_factory=PdfMargins)
    header_height_mm: float = Field(0.0, ge=0)
    footer_height_mm: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def validate_content_area(self) -> "PageGeometry":
        """Reject margins and bands that leave no room for content."""
        if self.content_width_mm <= 0:
            raise ValueError(
                f"Horizontal margins ({self.margins.left}mm + {self.margins.right}mm) "
                f"leave no content width on a {self.width_mm}mm wide page"
            )
        if self.content_height_mm <= 0:
            raise ValueError(
                f"Vertical margins ({self.margins.top}mm + {self.margins.bottom}mm) "
                f"leave no content height on a {self.height_mm}mm tall page"
            )
        if self.body_height_mm <= 0:
            raise ValueError(
                f"Header ({self.header_height_mm}mm) and footer ({self.footer_height_mm}mm) "
                f"bands fill the whole {self.content_height_mm}mm content height"
            )
        return self

    @property
    def content_width_mm(self) -> float:
        return self.width_mm - self.margins.left - self.margins.right

    @property
    def content_height_mm(self) -> float:
        return self.height_mm - self.margins.top - self.margins.bottom

    @property
    def body_height_mm(self) -> float:
        return self.content_height_mm - self.header_height_mm - self.footer_height_mm

    @property
    def body_top_mm(self) -> float:
        """Distance from the page top to the body band."""
        return self.margins.top + self.header_height_mm

    @property
    def footer_top_mm(self) -> float:
        return self.body_top_mm + self.body_height_mm

    @property
    def content_width_px(self) -> int:
        return mm_to_px(self.content_width_mm)

    @property
    def band_height_px(self) -> int:
        return max(1, mm_to_px(self.body_height_mm))

    @property
    def header_height_px(self) -> int:
        return mm_to_px(self.header_height_mm)

    @property
    def footer_height_px(self) -> int:
        return mm_to_px(self.footer_height_mm)


class PdfOptions(BaseModel):
    """Configuration for a single PDF generation call."""
    model_config = ConfigDict(frozen=True)

    page_format: PageFormat = Field(PageFormat.A4, description="Paper size")
    orientation: Orientation = Field(Orientation.PORTRAIT, description="Page orientation")
    margins: PdfMargins = Field(default_factory=PdfMargins, description="Page margins")

    header_html: Optional[str] = Field(None, description="HTML repeated at the top of each page")
    footer_html: Optional[str] = Field(None, description="HTML repeated at the bottom of each page")
    header_height_mm: float = Field(25.0, ge=0, description="Estimated header band height")
    footer_height_mm: float = Field(20.0, ge=0, description="Estimated footer band height")

    filename: str = Field("document.pdf", min_length=1, description="Download filename")
    output: OutputMode = Field(OutputMode.NATIVE_PRINT, description="Output mode")
    debug: bool = Field(False, description="Log timing diagnostics")

    scale: float = Field(1.5, gt=0, le=4.0, description="Device scale factor for page capture")
    image_quality: float = Field(0.92, gt=0, le=1.0, description="JPEG quality for captured pages")
    resource_timeout_ms: int = Field(10000, ge=0, description="Font/image loading timeout")

    @model_validator(mode="after")
    def validate_geometry(self) -> "PdfOptions":
        """Build the geometry once so degenerate layouts fail at construction."""
        _ = self.geometry
        return self

    @property
    def effective_width_mm(self) -> float:
        if self.orientation == Orientation.PORTRAIT:
            return self.page_format.width_mm
        return self.page_format.height_mm

    @property
    def effective_height_mm(self) -> float:
        if self.orientation == Orientation.PORTRAIT:
            return self.page_format.height_mm
        return self.page_format.width_mm

    @property
    def content_width_mm(self) -> float:
        return self.effective_width_mm - self.margins.left - self.margins.right

    @property
    def content_height_mm(self) -> float:
        return self.effective_height_mm - self.margins.top - self.margins.bottom

    @property
    def chrome(self) -> ChromeOptions:
        return ChromeOptions(
            header_html=self.header_html,
            footer_html=self.footer_html,
            header_height_mm=self.header_height_mm,
            footer_height_mm=self.footer_height_mm,
        )

    @property
    def geometry(self) -> PageGeometry:
        chrome = self.chrome
        return PageGeometry(
            page_format=self.page_format,
            orientation=self.orientation,
            width_mm=self.effective_width_mm,
            height_mm=self.effective_height_mm,
            margins=self.margins,
            header_height_mm=self.header_height_mm if chrome.has_header else 0.0,
            footer_height_mm=self.footer_height_mm if chrome.has_footer else 0.0,
        )

    def copy_with(self, **changes: Any) -> "PdfOptions":
        """Return a validated copy with the given fields replaced."""
        return PdfOptions(**{**self.model_dump(), **changes})


# Pagination Models
class PageRegion(BaseModel):
    """One vertical band of the rendered document destined for one page."""
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1, description="1-based page number")
    offset_y: int = Field(..., ge=0, description="Band top in CSS pixels")
    height_px: int = Field(..., gt=0, description="Band height in CSS pixels")

    @property
    def index(self) -> int:
        return self.page_number - 1


# API Request/Response Models
class RenderPdfRequest(BaseModel):
    """Request model for template to PDF rendering."""
    template: str = Field(..., description="HTML template")
    data: Dict[str, Any] = Field(default_factory=dict, description="Template data")
    options: PdfOptions = Field(default_factory=PdfOptions, description="PDF options")


class RenderAcknowledgement(BaseModel):
    """Response for calls that delivered the PDF through the download sink."""
    success: bool = Field(..., description="Whether generation succeeded")
    output: OutputMode = Field(..., description="Output mode used")
    filename: str = Field(..., description="Filename handed to the download sink")
    processing_time: float = Field(..., description="Total processing time in seconds")


class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy", "degraded"] = Field(..., description="Overall status")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Check timestamp"
    )
    version: str = Field(..., description="Application version")
    browser_pool: bool = Field(..., description="Browser pool status")


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Error timestamp"
    )
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")


def mm_to_px(mm: float) -> int:
    """Convert millimetres to whole CSS pixels."""
    return int(round(mm * PX_PER_MM))


def _mm(value: float) -> str:
    return f"{value:g}mm"
