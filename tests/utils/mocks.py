"""
Test Mocks
==========

Fake surfaces and sinks standing in for Playwright and ReportLab.
"""

import io
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

from PIL import Image  # type: ignore

from quick_html_pdf.core.rendering.assembly import AssemblySink
from quick_html_pdf.core.rendering.surface import PageImage, PrintHandle, RenderSurface
from quick_html_pdf.models.schemas import PageGeometry


def make_jpeg(width: int = 8, height: int = 8, color: Tuple[int, int, int] = (200, 30, 30)) -> bytes:
    """Synthetic JPEG image."""
    output = io.BytesIO()
    with Image.new("RGB", (width, height), color) as image:
        image.save(output, format="JPEG", quality=80)
    return output.getvalue()


class FakePrintHandle(PrintHandle):
    """Print handle returning canned PDF bytes."""

    def __init__(self, pdf_bytes: bytes = b"%PDF-1.4 fake", error: Optional[Exception] = None):
        self.pdf_bytes = pdf_bytes
        self.error = error
        self.calls: List[PageGeometry] = []

    async def print(self, geometry: PageGeometry) -> bytes:
        self.calls.append(geometry)
        if self.error:
            raise self.error
        return self.pdf_bytes


class FakeSurface(RenderSurface):
    """
    In-memory render surface.

    Records every call in ``events`` and tracks how many captured images are
    still open so tests can check that at most one page image is alive.
    """

    def __init__(
        self,
        content_height: int = 1000,
        fail_on_capture: Optional[int] = None,
        print_handle: Optional[PrintHandle] = None,
        can_print: bool = True,
    ):
        self._content_height = content_height
        self.fail_on_capture = fail_on_capture
        self._print_handle = print_handle or FakePrintHandle()
        self.can_print = can_print
        self.events: List[Tuple[str, Any]] = []
        self.captures: List[Dict[str, Any]] = []
        self.issued: List[PageImage] = []
        self.max_open_images = 0
        self.resource_waits: List[int] = []

    async def content_height(self) -> int:
        return self._content_height

    async def content_width(self) -> int:
        return 700

    async def scroll_to(self, x: int, y: int) -> None:
        self.events.append(("scroll", y))

    async def capture(self, offset_y: int, width: int, height: int, scale: float) -> PageImage:
        index = len(self.captures)
        self.captures.append({"offset_y": offset_y, "width": width, "height": height, "scale": scale})
        self.events.append(("capture", offset_y))
        if self.fail_on_capture is not None and index == self.fail_on_capture:
            raise RuntimeError("rasterizer crashed")

        image = PageImage(data=make_jpeg(), format="JPEG", width=8, height=8)
        self.issued.append(image)
        open_images = sum(1 for issued in self.issued if not issued.closed)
        self.max_open_images = max(self.max_open_images, open_images)
        return image

    async def wait_for_resources(self, timeout_ms: int) -> None:
        self.resource_waits.append(timeout_ms)

    def print_handle(self) -> Optional[PrintHandle]:
        return self._print_handle if self.can_print else None


class FakeSurfaceProvider:
    """Surface provider that mounts a prepared fake surface."""

    def __init__(self, surface: FakeSurface, mount_error: Optional[Exception] = None):
        self.surface = surface
        self.mount_error = mount_error
        self.mounted_html: List[str] = []
        self.mount_kwargs: List[Dict[str, Any]] = []
        self.torn_down = 0

    @asynccontextmanager
    async def mount(
        self, html: str, geometry: PageGeometry, **kwargs: Any
    ) -> AsyncGenerator[FakeSurface, None]:
        if self.mount_error:
            raise self.mount_error
        self.mounted_html.append(html)
        self.mount_kwargs.append({"geometry": geometry, **kwargs})
        try:
            yield self.surface
        finally:
            self.torn_down += 1


class FakeSink(AssemblySink):
    """Assembly sink recording its calls."""

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.calls: List[Tuple[str, Any]] = []
        self.pages = 0
        self.images: List[Dict[str, Any]] = []

    def _check(self, name: str) -> None:
        if self.fail_on == name:
            raise RuntimeError(f"{name} failed")

    def new_document(self, orientation: str, unit: str, format: str) -> None:
        self._check("new_document")
        self.calls.append(("new_document", (orientation, unit, format)))
        self.pages = 1

    def add_page(self) -> None:
        self._check("add_page")
        self.calls.append(("add_page", None))
        self.pages += 1

    def add_image(
        self, data: bytes, format: str, x: float, y: float, width: float, height: float
    ) -> None:
        self._check("add_image")
        self.calls.append(("add_image", (x, y, width, height)))
        self.images.append(
            {"page": self.pages, "format": format, "x": x, "y": y, "width": width, "height": height}
        )

    def get_bytes(self) -> bytes:
        self._check("get_bytes")
        self.calls.append(("get_bytes", None))
        return b"%%PDF-fake pages=%d" % self.pages


class FakeDownloadSink:
    """Download sink keeping files in memory."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.files: Dict[str, bytes] = {}

    def save(self, data: bytes, filename: str) -> str:
        if self.error:
            raise self.error
        self.files[filename] = data
        return filename
