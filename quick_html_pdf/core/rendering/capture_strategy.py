"""
Capture Strategy
================

Builds a PDF by photographing the mounted document one page band at a time
and appending each image to an assembly sink. Only one page image is alive
at any moment, so memory stays flat regardless of document length.
"""

from typing import Any, Callable, List, Optional, Tuple
import asyncio
import time

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.config.settings import Settings, get_settings
from quick_html_pdf.core.exceptions import PdfGenerationError, PdfGenerationPhase
from quick_html_pdf.core.rendering.assembly import AssemblySink, ReportLabAssemblySink
from quick_html_pdf.core.rendering.pagination import plan_pages
from quick_html_pdf.core.rendering.surface import PageImage, RenderSurface, SurfaceProvider
from quick_html_pdf.models.schemas import PageGeometry, PdfOptions

logger = get_logger(__name__)

PROGRESS_LOG_INTERVAL = 10


class CaptureStrategy:
    """Page-by-page screenshot capture into an assembly sink."""

    def __init__(
        self,
        options: PdfOptions,
        surface_provider: SurfaceProvider,
        sink_factory: Callable[[], AssemblySink] = ReportLabAssemblySink,
        settings: Optional[Settings] = None,
    ):
        self.options = options
        self.surface_provider = surface_provider
        self.sink_factory = sink_factory
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="capture_strategy")  # structlog.BoundLoggerBase

    async def execute(self, html: str) -> bytes:
        """
        Render ``html`` to PDF bytes.

        Raises:
            PdfGenerationError: canvas_rendering for a failed page capture,
                pdf_assembly for a sink failure, surface_mount when the
                document cannot be mounted
        """
        geometry = self.options.geometry

        async with self.surface_provider.mount(
            html,
            geometry,
            scale=self.options.scale,
            image_quality=self.options.image_quality,
        ) as surface:
            await surface.wait_for_resources(self.options.resource_timeout_ms)

            scroll_height = await surface.content_height()
            regions = plan_pages(scroll_height, geometry, self.settings.max_pages)

            self.logger.info(
                "Capturing pages",
                total_pages=len(regions),
                scroll_height=scroll_height,
                band_height_px=geometry.band_height_px,
            )

            sink = self.sink_factory()
            self._sink_call(
                sink.new_document,
                self.options.orientation.value,
                "mm",
                self.options.page_format.sink_name,
            )

            bands = await self._capture_bands(surface, geometry)
            started = time.time()

            for region in regions:
                if region.index > 0:
                    self._sink_call(sink.add_page)

                image = await self._capture_page(surface, geometry, region.index, region.offset_y)
                try:
                    self._sink_call(
                        sink.add_image,
                        image.data,
                        image.format,
                        geometry.margins.left,
                        geometry.body_top_mm,
                        geometry.content_width_mm,
                        geometry.body_height_mm,
                    )
                    for band_data, band_format, band_top, band_height in bands:
                        self._sink_call(
                            sink.add_image,
                            band_data,
                            band_format,
                            geometry.margins.left,
                            band_top,
                            geometry.content_width_mm,
                            band_height,
                        )
                finally:
                    image.close()

                if region.page_number % PROGRESS_LOG_INTERVAL == 0:
                    self.logger.debug(
                        "Capture progress",
                        page=region.page_number,
                        total_pages=len(regions),
                        elapsed=round(time.time() - started, 3),
                    )

            pdf_bytes: bytes = self._sink_call(sink.get_bytes)

        self.logger.info("Capture completed", pages=len(regions), size=len(pdf_bytes))
        return pdf_bytes

    async def _capture_page(
        self, surface: RenderSurface, geometry: PageGeometry, index: int, offset_y: int
    ) -> PageImage:
        """Scroll to one band, let layout settle and capture it."""
        started = time.time()
        try:
            await surface.scroll_to(0, offset_y)
            await asyncio.sleep(self.settings.settle_delay_ms / 1000)
            image = await surface.capture(
                offset_y, geometry.content_width_px, geometry.band_height_px, self.options.scale
            )
        except Exception as e:
            self.logger.error("Page capture failed", page_index=index, error=str(e))
            raise PdfGenerationError(
                f"Failed to render page {index + 1}",
                phase=PdfGenerationPhase.CANVAS_RENDERING,
                cause=e,
                page_index=index,
            ) from e

        if self.options.debug:
            self.logger.debug(
                "Page captured",
                page_index=index,
                duration=round(time.time() - started, 3),
                size_kb=round(len(image.data) / 1024, 1),
            )
        return image

    async def _capture_bands(
        self, surface: RenderSurface, geometry: PageGeometry
    ) -> List[Tuple[bytes, str, float, float]]:
        """
        Capture the header and footer bands from the top of the layout.

        Returns (data, format, top_mm, height_mm) for each present band.
        """
        bands: List[Tuple[bytes, str, float, float]] = []
        targets = [
            (0, geometry.header_height_px, geometry.margins.top, geometry.header_height_mm),
            (
                geometry.header_height_px,
                geometry.footer_height_px,
                geometry.footer_top_mm,
                geometry.footer_height_mm,
            ),
        ]

        for offset_y, height_px, top_mm, height_mm in targets:
            if height_px <= 0:
                continue
            try:
                await surface.scroll_to(0, offset_y)
                image = await surface.capture(
                    offset_y, geometry.content_width_px, height_px, self.options.scale
                )
            except Exception as e:
                raise PdfGenerationError(
                    f"Failed to render page band: {e}",
                    phase=PdfGenerationPhase.CANVAS_RENDERING,
                    cause=e,
                    page_index=0,
                ) from e
            bands.append((image.data, image.format, top_mm, height_mm))
            image.close()

        return bands

    def _sink_call(self, method: Callable[..., Any], *args: Any) -> Any:
        try:
            return method(*args)
        except Exception as e:
            self.logger.error("PDF assembly failed", operation=method.__name__, error=str(e))
            raise PdfGenerationError(
                f"PDF assembly failed: {e}", phase=PdfGenerationPhase.PDF_ASSEMBLY, cause=e
            ) from e
