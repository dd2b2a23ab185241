"""
Render Routes
=============

FastAPI routes for template to PDF rendering.

Endpoints:
- POST /api/v1/render: Render a template; returns the PDF for ``bytes`` output
  and an acknowledgement for ``native_print`` output
"""

from typing import Union
from urllib.parse import quote
import time

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.core import pdf_generator
from quick_html_pdf.models.schemas import OutputMode, RenderAcknowledgement, RenderPdfRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Rendering"])


def content_disposition(filename: str) -> str:
    """
    Build an attachment header safe for any filename.

    The plain ``filename`` parameter carries an ASCII fallback; the exact
    name travels percent-encoded in ``filename*`` (RFC 5987).
    """
    fallback = "".join(
        char if 32 <= ord(char) < 127 and char not in '"\\' else "_" for char in filename
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.post(
    "/render",
    response_model=None,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Rendered PDF"},
        202: {"model": RenderAcknowledgement, "description": "PDF delivered to the download sink"},
    },
)
async def render_pdf(request: RenderPdfRequest) -> Union[Response, JSONResponse]:
    """
    Render a template to PDF.

    Template errors, generation errors and an unavailable browser are mapped
    to status codes by the application exception handlers.
    """
    started = time.time()
    options = request.options

    logger.info(
        "Render requested",
        template_length=len(request.template),
        output=options.output.value,
        page_format=options.page_format.value,
    )

    result = await pdf_generator.generate_pdf(request.template, request.data, options)
    processing_time = time.time() - started

    if options.output == OutputMode.BYTES and result is not None:
        logger.info("Render completed", size=len(result), processing_time=processing_time)
        return Response(
            content=result,
            media_type="application/pdf",
            headers={"Content-Disposition": content_disposition(options.filename)},
        )

    acknowledgement = RenderAcknowledgement(
        success=True,
        output=options.output,
        filename=options.filename,
        processing_time=processing_time,
    )
    logger.info("Render delivered to download sink", filename=options.filename)
    return JSONResponse(status_code=202, content=acknowledgement.model_dump(mode="json"))
