"""
PDF Assembly
============

Assembly sinks accumulate page images into a single PDF document.
Coordinates follow the top-left origin convention of the capture side; the
ReportLab sink converts them to PDF's bottom-left origin.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
import io

from reportlab.lib.pagesizes import A4, LEGAL, LETTER, landscape, portrait
from reportlab.lib.units import cm, inch, mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from quick_html_pdf.config.logging import get_logger

logger = get_logger(__name__)


class AssemblySink(ABC):
    """Stateful builder of one multi-page document."""

    @abstractmethod
    def new_document(self, orientation: str, unit: str, format: str) -> None:
        """Start a new document with its first page open."""
        pass

    @abstractmethod
    def add_page(self) -> None:
        """Start a new page."""
        pass

    @abstractmethod
    def add_image(
        self, data: bytes, format: str, x: float, y: float, width: float, height: float
    ) -> None:
        """Draw an encoded image on the current page."""
        pass

    @abstractmethod
    def get_bytes(self) -> bytes:
        """Finish the document and return its bytes."""
        pass


class ReportLabAssemblySink(AssemblySink):
    """Assembly sink writing a PDF with the ReportLab canvas."""

    _UNITS: Dict[str, float] = {"pt": 1.0, "mm": mm, "cm": cm, "in": inch}
    _FORMATS: Dict[str, Tuple[float, float]] = {"a4": A4, "letter": LETTER, "legal": LEGAL}
    _IMAGE_FORMATS = {"JPEG", "PNG"}

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="reportlab_sink")  # structlog.BoundLoggerBase
        self._buffer: Optional[io.BytesIO] = None
        self._canvas: Optional[canvas.Canvas] = None
        self._unit = mm
        self._page_height = 0.0
        self.page_count = 0
        self._page_drawn = False

    def new_document(self, orientation: str = "portrait", unit: str = "mm", format: str = "a4") -> None:
        if format.lower() not in self._FORMATS:
            raise ValueError(f"Unsupported page format: {format}")
        if unit not in self._UNITS:
            raise ValueError(f"Unsupported unit: {unit}")

        size = self._FORMATS[format.lower()]
        size = landscape(size) if orientation == "landscape" else portrait(size)

        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=size, pageCompression=1)
        self._unit = self._UNITS[unit]
        self._page_height = size[1]
        self.page_count = 1
        self._page_drawn = False

        self.logger.debug("PDF document started", format=format, orientation=orientation)

    def add_page(self) -> None:
        self._require_canvas().showPage()
        self.page_count += 1
        self._page_drawn = False

    def add_image(
        self, data: bytes, format: str, x: float, y: float, width: float, height: float
    ) -> None:
        pdf = self._require_canvas()
        if format.upper() not in self._IMAGE_FORMATS:
            raise ValueError(f"Unsupported image format: {format}")

        draw_width = width * self._unit
        draw_height = height * self._unit
        left = x * self._unit
        bottom = self._page_height - y * self._unit - draw_height

        pdf.drawImage(
            ImageReader(io.BytesIO(data)),
            left,
            bottom,
            width=draw_width,
            height=draw_height,
            preserveAspectRatio=False,
        )
        self._page_drawn = True

    def get_bytes(self) -> bytes:
        pdf = self._require_canvas()
        # save() drops a trailing page with nothing drawn on it
        if not self._page_drawn:
            pdf.showPage()
        pdf.save()
        data = self._buffer.getvalue() if self._buffer else b""

        self._canvas = None
        self._buffer = None

        self.logger.debug("PDF document finished", pages=self.page_count, size=len(data))
        return data

    def _require_canvas(self) -> canvas.Canvas:
        if self._canvas is None:
            raise RuntimeError("No document in progress; call new_document() first")
        return self._canvas
