"""
Render Surfaces
===============

Playwright-backed renderable surfaces for composed documents.
Manages the browser pool, mounts documents in isolated browser contexts and
exposes the scroll, capture and print capabilities the strategies consume.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Any, List, AsyncGenerator
import asyncio
import io
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright, Browser, BrowserContext, Page
from playwright.async_api import Error as PlaywrightError
from PIL import Image  # type: ignore

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.config.settings import get_settings
from quick_html_pdf.core.exceptions import (
    PdfGenerationError,
    PdfGenerationPhase,
    UnsupportedOperationError,
)
from quick_html_pdf.models.schemas import Orientation, PageGeometry

logger = get_logger(__name__)

_WAIT_FOR_FONTS = """
() => (document.fonts && document.fonts.ready)
    ? document.fonts.ready.then(() => true)
    : true
"""

_WAIT_FOR_IMAGES = """
() => Promise.all(
    Array.from(document.images)
        .filter((img) => !img.complete)
        .map((img) => new Promise((resolve) => {
            img.addEventListener('load', () => resolve(true), { once: true });
            img.addEventListener('error', () => resolve(false), { once: true });
        }))
).then((results) => results.length)
"""


@dataclass
class PageImage:
    """Encoded image of one captured region."""

    data: bytes
    format: str
    width: int
    height: int

    def close(self) -> None:
        """Release the image buffer."""
        self.data = b""

    @property
    def closed(self) -> bool:
        return not self.data


class PrintHandle(ABC):
    """One-shot platform print capability."""

    @abstractmethod
    async def print(self, geometry: PageGeometry) -> bytes:
        """Print the mounted document and return the produced PDF."""
        pass


class RenderSurface(ABC):
    """A mounted, renderable document."""

    @abstractmethod
    async def content_height(self) -> int:
        """Total scrollable content height in CSS pixels."""
        pass

    @abstractmethod
    async def content_width(self) -> int:
        """Total scrollable content width in CSS pixels."""
        pass

    @abstractmethod
    async def scroll_to(self, x: int, y: int) -> None:
        """Position the surface at the given scroll offset."""
        pass

    @abstractmethod
    async def capture(self, offset_y: int, width: int, height: int, scale: float) -> PageImage:
        """Rasterize the band starting at ``offset_y``."""
        pass

    @abstractmethod
    async def wait_for_resources(self, timeout_ms: int) -> None:
        """Wait for fonts and images, giving up silently after ``timeout_ms``."""
        pass

    @abstractmethod
    def print_handle(self) -> Optional[PrintHandle]:
        """Return the print capability, or None if the surface cannot print."""
        pass


class ChromiumPrintHandle(PrintHandle):
    """Chromium print-to-PDF on a Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    async def print(self, geometry: PageGeometry) -> bytes:
        await self.page.emulate_media(media="print")
        return await self.page.pdf(
            format=geometry.page_format.value,
            landscape=geometry.orientation == Orientation.LANDSCAPE,
            print_background=True,
            prefer_css_page_size=True,
        )


class PlaywrightSurface(RenderSurface):
    """Render surface backed by a Playwright page."""

    def __init__(self, page: Page, image_quality: float = 0.92, can_print: bool = True):
        self.page = page
        self.image_quality = image_quality
        self.can_print = can_print
        self.logger: Any = logger.bind(component="surface")  # structlog.BoundLoggerBase

    async def content_height(self) -> int:
        return int(await self.page.evaluate("() => document.body ? document.body.scrollHeight : 0"))

    async def content_width(self) -> int:
        return int(await self.page.evaluate("() => document.body ? document.body.scrollWidth : 0"))

    async def scroll_to(self, x: int, y: int) -> None:
        await self.page.evaluate("([x, y]) => window.scrollTo(x, y)", [x, y])

    async def capture(self, offset_y: int, width: int, height: int, scale: float) -> PageImage:
        """
        Capture one band of the document as a JPEG.

        The band is clipped in document coordinates. Bands running past the
        end of the document are padded with white so every page image has
        the full band size.
        """
        target_size = (max(1, round(width * scale)), max(1, round(height * scale)))
        available = await self.content_height() - offset_y
        canvas = Image.new("RGB", target_size, (255, 255, 255))

        try:
            if available > 0:
                png_bytes = await self.page.screenshot(
                    type="png",
                    full_page=True,
                    clip={"x": 0, "y": offset_y, "width": width, "height": min(height, available)},
                )
                with Image.open(io.BytesIO(png_bytes)) as shot:  # type: ignore[attr-defined]
                    canvas.paste(shot.convert("RGB"), (0, 0))

            output = io.BytesIO()
            canvas.save(output, format="JPEG", quality=round(self.image_quality * 100))
        finally:
            canvas.close()

        return PageImage(
            data=output.getvalue(), format="JPEG", width=target_size[0], height=target_size[1]
        )

    async def wait_for_resources(self, timeout_ms: int) -> None:
        try:
            await asyncio.wait_for(self._wait_for_content_load(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            self.logger.warning("Resource loading timed out, continuing", timeout_ms=timeout_ms)

    async def _wait_for_content_load(self) -> None:
        try:
            await self.page.evaluate(_WAIT_FOR_FONTS)
            self.logger.debug("Fonts loaded")
        except PlaywrightError as e:
            self.logger.warning(
                "Font loading check failed",
                phase=PdfGenerationPhase.FONT_LOADING.value,
                error=str(e),
            )

        try:
            pending = await self.page.evaluate(_WAIT_FOR_IMAGES)
            self.logger.debug("Images processed", pending_images=pending)
        except PlaywrightError as e:
            self.logger.warning(
                "Image loading check failed",
                phase=PdfGenerationPhase.IMAGE_LOADING.value,
                error=str(e),
            )

    def print_handle(self) -> Optional[PrintHandle]:
        if not self.can_print:
            return None
        return ChromiumPrintHandle(self.page)


class BrowserPool:
    """Browser instance pool for efficient resource management."""

    def __init__(self, pool_size: int = 2):
        self.pool_size = pool_size
        self.browsers: List[Browser] = []
        self._semaphore = asyncio.Semaphore(pool_size)
        self._playwright = None
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="browser_pool")  # structlog.BoundLoggerBase

    @property
    def is_initialized(self) -> bool:
        return self._playwright is not None

    @property
    def can_print(self) -> bool:
        """Chromium only prints to PDF when running headless."""
        return self.settings.playwright_headless

    async def initialize(self) -> None:
        """
        Initialize browser pool.

        Raises:
            UnsupportedOperationError: If Playwright or its Chromium build is unavailable
        """
        try:
            self._playwright = await async_playwright().start()

            for _ in range(self.pool_size):
                browser = await self._playwright.chromium.launch(
                    headless=self.settings.playwright_headless,
                    args=[
                        "--no-sandbox",
                        "--disable-setuid-sandbox",
                        "--disable-dev-shm-usage",
                    ],
                )
                self.browsers.append(browser)

            self.logger.info("Browser pool initialized", pool_size=self.pool_size)
        except Exception as e:
            self.logger.error("Failed to initialize browser pool", error=str(e))
            await self.close()
            raise UnsupportedOperationError(f"Browser pool initialization failed: {e}") from e

    async def close(self) -> None:
        """Close all browsers in the pool."""
        for browser in self.browsers:
            await browser.close()
        self.browsers = []

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        self.logger.info("Browser pool closed")

    @asynccontextmanager
    async def get_browser(self) -> AsyncGenerator[Browser, None]:
        """Get a browser instance from the pool."""
        async with self._semaphore:
            if not self.browsers:
                raise PdfGenerationError(
                    "Browser pool not initialized", phase=PdfGenerationPhase.SURFACE_MOUNT
                )

            browser = self.browsers.pop()
            try:
                yield browser
            finally:
                self.browsers.append(browser)


class SurfaceProvider:
    """Mounts composed documents on Playwright pages drawn from a browser pool."""

    def __init__(self, browser_pool: BrowserPool):
        self.browser_pool = browser_pool
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="surface_provider")  # structlog.BoundLoggerBase

    @asynccontextmanager
    async def mount(
        self,
        html: str,
        geometry: PageGeometry,
        scale: float = 1.0,
        image_quality: float = 0.92,
    ) -> AsyncGenerator[RenderSurface, None]:
        """
        Mount a document and tear it down on exit.

        The viewport is one body band of the page: the content width by the
        band height.

        Raises:
            PdfGenerationError: If the document cannot be mounted (phase surface_mount)
        """
        async with self.browser_pool.get_browser() as browser:
            context = await self._create_browser_context(browser, geometry, scale)
            try:
                try:
                    page = await context.new_page()
                    page.set_default_timeout(self.settings.playwright_timeout)
                    await page.set_content(html, wait_until="domcontentloaded")
                except Exception as e:
                    raise PdfGenerationError(
                        f"Failed to mount document: {e}",
                        phase=PdfGenerationPhase.SURFACE_MOUNT,
                        cause=e,
                    ) from e

                self.logger.debug("Document mounted", html_length=len(html))
                yield PlaywrightSurface(
                    page, image_quality=image_quality, can_print=self.browser_pool.can_print
                )
            finally:
                await context.close()
                self.logger.debug("Surface disposed")

    async def _create_browser_context(
        self, browser: Browser, geometry: PageGeometry, scale: float
    ) -> BrowserContext:
        """Create browser context sized to one page band."""
        try:
            return await browser.new_context(
                viewport={"width": geometry.content_width_px, "height": geometry.band_height_px},
                device_scale_factor=scale,
            )
        except Exception as e:
            raise PdfGenerationError(
                f"Failed to create browser context: {e}",
                phase=PdfGenerationPhase.SURFACE_MOUNT,
                cause=e,
            ) from e
