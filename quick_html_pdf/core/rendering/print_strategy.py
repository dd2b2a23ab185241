"""
Print Strategy
==============

Produces the PDF through the browser's own print pipeline and hands the
result to a download sink. Pagination is entirely up to the print engine.
"""

from typing import Any, Optional, Protocol
import asyncio

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.config.settings import Settings, get_settings
from quick_html_pdf.core.exceptions import PdfGenerationError, PdfGenerationPhase
from quick_html_pdf.core.rendering.download import FileDownloadSink
from quick_html_pdf.core.rendering.surface import SurfaceProvider
from quick_html_pdf.models.schemas import PdfOptions

logger = get_logger(__name__)


class DownloadSink(Protocol):
    def save(self, data: bytes, filename: str) -> Any: ...


class PrintStrategy:
    """Native print-to-PDF delivered through a download sink."""

    def __init__(
        self,
        options: PdfOptions,
        surface_provider: SurfaceProvider,
        download_sink: Optional[DownloadSink] = None,
        settings: Optional[Settings] = None,
    ):
        self.options = options
        self.surface_provider = surface_provider
        self.download_sink = download_sink or FileDownloadSink()
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="print_strategy")  # structlog.BoundLoggerBase

    async def execute(self, html: str) -> None:
        """
        Print ``html`` and deliver it as ``options.filename``.

        Raises:
            PdfGenerationError: phase download for any failure on this path
        """
        try:
            async with self.surface_provider.mount(html, self.options.geometry) as surface:
                await surface.wait_for_resources(self.options.resource_timeout_ms)

                handle = surface.print_handle()
                if handle is None:
                    raise PdfGenerationError(
                        "Native print is not available on this surface",
                        phase=PdfGenerationPhase.DOWNLOAD,
                    )

                pdf_bytes = await handle.print(self.options.geometry)
                self.download_sink.save(pdf_bytes, self.options.filename)

                self.logger.info(
                    "Native print delivered",
                    filename=self.options.filename,
                    size=len(pdf_bytes),
                )

                # Let the print pipeline release the document before teardown
                await asyncio.sleep(self.settings.print_grace_delay_ms / 1000)

        except PdfGenerationError as e:
            if e.phase == PdfGenerationPhase.DOWNLOAD:
                raise
            raise PdfGenerationError(
                f"Native print failed: {e.message}", phase=PdfGenerationPhase.DOWNLOAD, cause=e
            ) from e
        except Exception as e:
            self.logger.error("Native print failed", error=str(e))
            raise PdfGenerationError(
                f"Native print failed: {e}", phase=PdfGenerationPhase.DOWNLOAD, cause=e
            ) from e
