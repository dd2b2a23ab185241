"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Points storage at a temporary directory before the application is imported
and provides fake surfaces, sinks and sample templates.
"""

import os
import shutil
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="quick_html_pdf_test_"))
os.environ.setdefault("QUICK_HTML_PDF_ENVIRONMENT", "testing")
os.environ.setdefault("QUICK_HTML_PDF_LOG_LEVEL", "DEBUG")
os.environ.setdefault("QUICK_HTML_PDF_STORAGE_PATH", str(_TEST_ROOT / "storage"))
os.environ.setdefault("QUICK_HTML_PDF_OUTPUT_PATH", str(_TEST_ROOT / "downloads"))

from typing import Any, Dict, Generator  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402

from quick_html_pdf.models.schemas import OutputMode, PdfOptions  # noqa: E402
from tests.utils.mocks import FakeDownloadSink, FakeSink, FakeSurface, FakeSurfaceProvider  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_root() -> Generator[Path, None, None]:
    """Remove the temporary storage root after the session."""
    yield _TEST_ROOT
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Per-test temporary directory."""
    return tmp_path


@pytest.fixture
def fast_settings() -> Mock:
    """Settings stub with no artificial delays."""
    settings = Mock()
    settings.settle_delay_ms = 0
    settings.print_grace_delay_ms = 0
    settings.max_pages = 1000
    settings.playwright_headless = True
    settings.playwright_timeout = 30000
    settings.browser_pool_size = 2
    return settings


@pytest.fixture
def bytes_options() -> PdfOptions:
    """Options for the capture path with default A4 layout."""
    return PdfOptions(output=OutputMode.BYTES, scale=1.0)


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface(content_height=2000)


@pytest.fixture
def fake_provider(fake_surface: FakeSurface) -> FakeSurfaceProvider:
    return FakeSurfaceProvider(fake_surface)


@pytest.fixture
def fake_sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def fake_download_sink() -> FakeDownloadSink:
    return FakeDownloadSink()


@pytest.fixture
def sample_invoice_template() -> str:
    """Invoice-like template exercising nesting, loops and raw HTML."""
    return (
        "<h1>{{company.name}}</h1>"
        "<p>Customer: {{customer}}</p>"
        "<table>{{#each items}}"
        '<tr class="row-{{@index1}}"><td>{{name}}</td><td>{{price}}</td></tr>'
        "{{/each}}</table>"
        "<footer>{{{signature}}}</footer>"
    )


@pytest.fixture
def sample_invoice_data() -> Dict[str, Any]:
    return {
        "company": {"name": "Acme & Sons"},
        "customer": "<Jane>",
        "items": [
            {"name": "Widget", "price": 9.5},
            {"name": "Gadget", "price": 12},
        ],
        "signature": "<em>Thanks!</em>",
    }
