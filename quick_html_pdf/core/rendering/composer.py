"""
HTML Composer
=============

Wraps a rendered body fragment in a complete, print-ready HTML document:
page size and margins, pagination-friendly table rules, break utilities and
optional header/footer bands. The screen layout of the same document is what
the capture strategy photographs, so band heights here must match the
estimates carried by the page geometry.
"""

from typing import Any, List, Optional, Sequence
from pathlib import Path
import jinja2
from markupsafe import Markup

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.core.exceptions import PdfGenerationError, PdfGenerationPhase
from quick_html_pdf.models.schemas import ChromeOptions, PageGeometry, PdfOptions

logger = get_logger(__name__)

DOCUMENT_TEMPLATE = "document.html"


class HtmlComposer:
    """Jinja2-based composer for the print document shell."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="composer")  # structlog.BoundLoggerBase
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        def mm(value: float) -> str:
            """Format a millimetre length for CSS."""
            return f"{value:g}mm"

        self.env.filters["mm"] = mm

    def compose(
        self,
        body_html: str,
        geometry: PageGeometry,
        chrome: Optional[ChromeOptions] = None,
        title: str = "PDF Document",
    ) -> str:
        """
        Compose a full HTML document with print CSS.

        Args:
            body_html: Rendered body fragment, inserted verbatim
            geometry: Page geometry (size, orientation, margins)
            chrome: Optional header/footer bands
            title: Document title

        Returns:
            Complete HTML document

        Raises:
            PdfGenerationError: If the document shell cannot be rendered
        """
        chrome = chrome or ChromeOptions()
        context = {
            "title": title,
            "page_size": f"{geometry.page_format.value} {geometry.orientation.value}",
            "margins_css": geometry.margins.to_css(),
            "content_width_mm": geometry.content_width_mm,
            "has_header": chrome.has_header,
            "has_footer": chrome.has_footer,
            "header_height_mm": chrome.header_height_mm,
            "footer_height_mm": chrome.footer_height_mm,
            "header_html": Markup(chrome.header_html or ""),
            "footer_html": Markup(chrome.footer_html or ""),
            "body_html": Markup(body_html),
        }

        try:
            html = self.env.get_template(DOCUMENT_TEMPLATE).render(**context)
        except jinja2.TemplateError as e:
            error_msg = f"Document composition failed: {e}"
            self.logger.error("HTML composition failed", error=error_msg)
            raise PdfGenerationError(
                error_msg, phase=PdfGenerationPhase.HTML_COMPOSITION, cause=e
            ) from e

        self.logger.debug("Document composed", html_length=len(html))
        return html

    @staticmethod
    def create_table(
        headers: Sequence[Any],
        rows: Sequence[Sequence[Any]],
        table_class: Optional[str] = None,
        striped: bool = False,
    ) -> str:
        """
        Build a simple table for common use cases.

        Headers and cells are HTML fragments and are inserted as given;
        ``None`` cells render empty. Odd rows get ``class="striped"`` when
        ``striped`` is set.
        """
        lines: List[str] = [f'<table class="{table_class}">' if table_class else "<table>"]

        lines.extend(["<thead>", "<tr>"])
        lines.extend(f"<th>{header}</th>" for header in headers)
        lines.extend(["</tr>", "</thead>", "<tbody>"])

        for index, row in enumerate(rows):
            row_class = ' class="striped"' if striped and index % 2 == 1 else ""
            lines.append(f"<tr{row_class}>")
            lines.extend(f"<td>{'' if cell is None else cell}</td>" for cell in row)
            lines.append("</tr>")

        lines.extend(["</tbody>", "</table>"])
        return "\n".join(lines) + "\n"


_composer: Optional[HtmlComposer] = None


def get_composer() -> HtmlComposer:
    """Get the shared composer instance."""
    global _composer
    if _composer is None:
        _composer = HtmlComposer()
    return _composer


def compose(
    body_html: str, geometry: PageGeometry, chrome: Optional[ChromeOptions] = None
) -> str:
    """Compose a full document from a rendered body."""
    return get_composer().compose(body_html, geometry, chrome)


def compose_document(body_html: str, options: PdfOptions) -> str:
    """Compose a full document using the geometry and bands carried by ``options``."""
    return get_composer().compose(body_html, options.geometry, options.chrome)
