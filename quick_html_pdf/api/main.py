"""
FastAPI Application
===================

Main FastAPI application serving template to PDF rendering.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from quick_html_pdf.api.routes.health import router as health_router
from quick_html_pdf.api.routes.render import router as render_router
from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.config.settings import get_settings
from quick_html_pdf.core.exceptions import (
    PdfGenerationError,
    TemplateError,
    UnsupportedOperationError,
)
from quick_html_pdf.core.pdf_generator import close_browser_pool, initialize_browser_pool
from quick_html_pdf.models.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting FastAPI application")

    try:
        await initialize_browser_pool()
        logger.info("Browser pool initialized")
    except UnsupportedOperationError as e:
        # Health reports degraded; render requests retry initialization
        logger.error("Browser pool initialization failed", error=str(e))

    try:
        yield
    finally:
        logger.info("Shutting down FastAPI application")
        try:
            await close_browser_pool()
        except Exception as e:
            logger.error("Error closing browser pool", error=str(e))


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    description="Render HTML templates with data into paginated PDF documents",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.enable_docs else None,
    redoc_url="/redoc" if settings.enable_docs else None,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_hosts,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(health_router)
app.include_router(render_router)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> JSONResponse:  # type: ignore
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)  # type: ignore
    response.headers["X-Request-ID"] = request_id  # type: ignore

    return response  # type: ignore


def _error_response(
    request: Request, status_code: int, error: str, error_code: str, details: dict
) -> JSONResponse:
    error_response = ErrorResponse(
        error=error,
        error_code=error_code,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


# Exception handlers
@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom HTTP exception handler with structured error response."""
    logger.error("HTTP exception", status_code=exc.status_code, detail=exc.detail)
    return _error_response(request, exc.status_code, str(exc.detail), str(exc.status_code), {})


@app.exception_handler(TemplateError)
async def template_exception_handler(request: Request, exc: TemplateError) -> JSONResponse:
    """Template syntax and data errors are the caller's to fix."""
    logger.warning("Template error", error=exc.message, kind=exc.kind, path=exc.path)
    return _error_response(
        request,
        422,
        exc.message,
        "TEMPLATE_ERROR",
        {"details": exc.details, "path": exc.path, "kind": exc.kind},
    )


@app.exception_handler(PdfGenerationError)
async def pdf_generation_exception_handler(
    request: Request, exc: PdfGenerationError
) -> JSONResponse:
    """Handle PDF generation errors, reporting the failed phase."""
    logger.error(
        "PDF generation error",
        error=exc.message,
        phase=exc.phase.value,
        page_index=exc.page_index,
    )
    details = {"phase": exc.phase.value, "page_index": exc.page_index}
    if settings.debug and exc.cause is not None:
        details["cause"] = str(exc.cause)
    return _error_response(request, 500, exc.message, "PDF_GENERATION_ERROR", details)


@app.exception_handler(UnsupportedOperationError)
async def unsupported_exception_handler(
    request: Request, exc: UnsupportedOperationError
) -> JSONResponse:
    logger.error("Rendering unavailable", error=str(exc))
    return _error_response(
        request,
        503,
        "PDF rendering is not available in this environment",
        "UNSUPPORTED_OPERATION",
        {"message": str(exc)} if settings.debug else {},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """General exception handler for unexpected errors."""
    logger.error("Unhandled exception", exception=str(exc), exc_info=True)
    return _error_response(
        request,
        500,
        "Internal server error",
        "INTERNAL_ERROR",
        {"exception": str(exc)} if settings.debug else {},
    )


def main() -> None:
    """Run the API server."""
    uvicorn.run(
        "quick_html_pdf.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug and settings.environment == "development",
    )


if __name__ == "__main__":
    main()
