"""
PDF Generator
=============

Entry point that turns a template and its data into a PDF.

Renders the template, composes the print document and dispatches to the
native print strategy or the page capture strategy depending on the
requested output mode. Holds the process-wide browser pool.
"""

from typing import Any, Mapping, Optional
import asyncio
import time

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.config.settings import get_settings
from quick_html_pdf.core.exceptions import (
    PdfGenerationError,
    PdfGenerationPhase,
    TemplateError,
    UnsupportedOperationError,
)
from quick_html_pdf.core.rendering.capture_strategy import CaptureStrategy
from quick_html_pdf.core.rendering.composer import compose_document
from quick_html_pdf.core.rendering.download import FileDownloadSink
from quick_html_pdf.core.rendering.print_strategy import DownloadSink, PrintStrategy
from quick_html_pdf.core.rendering.surface import BrowserPool, SurfaceProvider
from quick_html_pdf.core.templating import render
from quick_html_pdf.models.schemas import OutputMode, PdfOptions

logger = get_logger(__name__)


# Global browser pool instance
_global_browser_pool: Optional[BrowserPool] = None
_browser_pool_lock = asyncio.Lock()


def _pool_ready() -> bool:
    return _global_browser_pool is not None and _global_browser_pool.is_initialized


async def initialize_browser_pool() -> BrowserPool:
    """
    Initialize the global browser pool if needed.

    Concurrent callers share a single pool; only the first one launches it.

    Raises:
        UnsupportedOperationError: If no browser can be launched
    """
    global _global_browser_pool
    if not _pool_ready():
        async with _browser_pool_lock:
            if not _pool_ready():
                settings = get_settings()
                pool = BrowserPool(settings.browser_pool_size)
                await pool.initialize()
                _global_browser_pool = pool
    return _global_browser_pool  # type: ignore[return-value]


async def close_browser_pool() -> None:
    """Close global browser pool."""
    global _global_browser_pool
    if _global_browser_pool:
        await _global_browser_pool.close()
        _global_browser_pool = None


def get_browser_pool() -> Optional[BrowserPool]:
    return _global_browser_pool


async def generate_pdf(
    template: str,
    data: Mapping[str, Any],
    options: Optional[PdfOptions] = None,
    *,
    browser_pool: Optional[BrowserPool] = None,
    download_sink: Optional[DownloadSink] = None,
) -> Optional[bytes]:
    """
    Generate a PDF from an HTML template.

    Args:
        template: HTML template source
        data: Template data; never modified
        options: PDF options, defaults to ``PdfOptions()``
        browser_pool: Pool to render with, defaults to the global pool
        download_sink: Sink used by native print output

    Returns:
        PDF bytes for ``OutputMode.BYTES``; ``None`` for native print, whose
        result goes to the download sink

    Raises:
        UnsupportedOperationError: If no browser surface is available
        TemplateError: If the template cannot be rendered
        PdfGenerationError: If any later phase fails
    """
    options = options or PdfOptions()

    if browser_pool is None:
        browser_pool = await initialize_browser_pool()
    elif not browser_pool.is_initialized:
        await browser_pool.initialize()

    try:
        started = time.time()
        body_html = render(template, data)
        template_time = time.time() - started

        started = time.time()
        html = compose_document(body_html, options)
        compose_time = time.time() - started

        provider = SurfaceProvider(browser_pool)
        started = time.time()
        if options.output == OutputMode.BYTES:
            result: Optional[bytes] = await CaptureStrategy(options, provider).execute(html)
        else:
            await PrintStrategy(options, provider, download_sink).execute(html)
            result = None
        pdf_time = time.time() - started

        timings = {
            "template_ms": round(template_time * 1000, 1),
            "compose_ms": round(compose_time * 1000, 1),
            "pdf_ms": round(pdf_time * 1000, 1),
            "html_kb": round(len(html) / 1024, 1),
            "pdf_kb": round(len(result) / 1024, 1) if result is not None else None,
        }
        if options.debug:
            logger.info("PDF generation timings", output=options.output.value, **timings)
        else:
            logger.debug("PDF generation timings", output=options.output.value, **timings)

        return result

    except (TemplateError, PdfGenerationError, UnsupportedOperationError):
        raise
    except Exception as e:
        logger.error("Unexpected PDF generation error", error=str(e))
        raise PdfGenerationError(
            f"PDF generation failed: {e}", phase=PdfGenerationPhase.UNKNOWN, cause=e
        ) from e


def download_pdf_bytes(
    data: bytes, filename: str, download_sink: Optional[DownloadSink] = None
) -> Any:
    """
    Hand previously generated PDF bytes to a download sink.

    Raises:
        PdfGenerationError: phase download if the sink fails
    """
    sink = download_sink or FileDownloadSink()
    try:
        return sink.save(data, filename)
    except Exception as e:
        raise PdfGenerationError(
            f"Download failed: {e}", phase=PdfGenerationPhase.DOWNLOAD, cause=e
        ) from e
