"""
Exceptions
==========

Error taxonomy shared by the template engine and the PDF generation pipeline.
"""

from enum import Enum
from typing import Optional


class TemplateError(Exception):
    """Exception raised when template parsing or rendering fails."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        path: Optional[str] = None,
        kind: Optional[str] = None,
    ):
        self.message = message
        self.details = details
        self.path = path
        self.kind = kind
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class PdfGenerationPhase(str, Enum):
    """Phases of PDF generation where errors can occur."""
    TEMPLATE_RENDERING = "template_rendering"
    HTML_COMPOSITION = "html_composition"
    SURFACE_MOUNT = "surface_mount"
    FONT_LOADING = "font_loading"
    IMAGE_LOADING = "image_loading"
    CANVAS_RENDERING = "canvas_rendering"
    PDF_ASSEMBLY = "pdf_assembly"
    DOWNLOAD = "download"
    UNKNOWN = "unknown"


class PdfGenerationError(Exception):
    """Exception raised when PDF generation fails."""

    def __init__(
        self,
        message: str,
        phase: PdfGenerationPhase = PdfGenerationPhase.UNKNOWN,
        cause: Optional[BaseException] = None,
        page_index: Optional[int] = None,
    ):
        self.message = message
        self.phase = phase
        self.cause = cause
        self.page_index = page_index
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (phase: {self.phase.value})"


class UnsupportedOperationError(Exception):
    """Raised when the environment cannot provide a browser surface."""

    pass
