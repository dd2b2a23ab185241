"""
Integration Tests for API Contracts
===================================

Tests for the FastAPI endpoints: request validation, response formats and
error status mapping. PDF generation itself is patched out.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from quick_html_pdf.api.main import app
from quick_html_pdf.core.exceptions import (
    PdfGenerationError,
    PdfGenerationPhase,
    TemplateError,
    UnsupportedOperationError,
)
from quick_html_pdf.models.schemas import OutputMode, PdfOptions

pytestmark = pytest.mark.integration


@pytest.fixture
def client():
    """Test client with the browser pool lifecycle patched out."""
    with patch("quick_html_pdf.api.main.initialize_browser_pool", AsyncMock()), patch(
        "quick_html_pdf.api.main.close_browser_pool", AsyncMock()
    ):
        with TestClient(app) as test_client:
            yield test_client


@pytest.fixture
def mock_generate():
    with patch("quick_html_pdf.core.pdf_generator.generate_pdf", new_callable=AsyncMock) as mocked:
        yield mocked


@pytest.fixture
def render_request():
    return {
        "template": "<h1>{{title}}</h1>{{#each rows}}<p>{{this}}</p>{{/each}}",
        "data": {"title": "Report", "rows": ["a", "b"]},
        "options": {"output": "bytes", "page_format": "letter"},
    }


class TestHealthEndpoint:
    """Test health endpoint."""

    def test_health_without_pool(self, client):
        with patch("quick_html_pdf.api.routes.health.get_browser_pool", return_value=None):
            response = client.get("/api/v1/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "degraded"
        assert body["browser_pool"] is False
        assert body["version"] == "1.0.0"
        assert "X-Request-ID" in response.headers

    def test_health_with_pool(self, client):
        pool = Mock()
        pool.is_initialized = True
        pool.browsers = [Mock(), Mock()]
        pool.pool_size = 2

        with patch("quick_html_pdf.api.routes.health.get_browser_pool", return_value=pool):
            response = client.get("/api/v1/health")

        assert response.json()["status"] == "healthy"
        assert response.json()["browser_pool"] is True


class TestRenderEndpoint:
    """Test render endpoint contracts."""

    def test_bytes_output_returns_pdf(self, client, mock_generate, render_request):
        mock_generate.return_value = b"%PDF-1.4 rendered"

        response = client.post("/api/v1/render", json=render_request)

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == b"%PDF-1.4 rendered"
        assert 'filename="document.pdf"' in response.headers["content-disposition"]

        template, data, options = mock_generate.await_args.args
        assert template == render_request["template"]
        assert data == render_request["data"]
        assert isinstance(options, PdfOptions)
        assert options.output == OutputMode.BYTES

    def test_filename_with_quotes_and_unicode(self, client, mock_generate, render_request):
        mock_generate.return_value = b"%PDF-1.4 rendered"
        render_request["options"]["filename"] = 'Rapport "été".pdf'

        response = client.post("/api/v1/render", json=render_request)

        assert response.status_code == status.HTTP_200_OK
        disposition = response.headers["content-disposition"]
        assert 'filename="Rapport __t__.pdf"' in disposition
        assert "filename*=UTF-8''Rapport%20%22%C3%A9t%C3%A9%22.pdf" in disposition

    def test_native_print_returns_acknowledgement(self, client, mock_generate):
        mock_generate.return_value = None

        response = client.post(
            "/api/v1/render",
            json={"template": "<p>x</p>", "options": {"filename": "out.pdf"}},
        )

        assert response.status_code == status.HTTP_202_ACCEPTED
        body = response.json()
        assert body["success"] is True
        assert body["output"] == "native_print"
        assert body["filename"] == "out.pdf"
        assert body["processing_time"] >= 0

    def test_missing_template_rejected(self, client, mock_generate):
        response = client.post("/api/v1/render", json={"data": {}})

        assert response.status_code == 422
        mock_generate.assert_not_awaited()

    def test_degenerate_margins_rejected(self, client, mock_generate):
        response = client.post(
            "/api/v1/render",
            json={"template": "x", "options": {"margins": {"left": 150, "right": 150}}},
        )

        assert response.status_code == 422
        mock_generate.assert_not_awaited()

    def test_template_error_maps_to_422(self, client, mock_generate):
        mock_generate.side_effect = TemplateError(
            "Each block key not found: rows",
            "Available keys: title",
            path="rows",
            kind="each_target_not_found",
        )

        response = client.post("/api/v1/render", json={"template": "{{#each rows}}{{/each}}"})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "TEMPLATE_ERROR"
        assert body["details"]["path"] == "rows"
        assert body["details"]["kind"] == "each_target_not_found"

    def test_generation_error_maps_to_500_with_phase(self, client, mock_generate):
        mock_generate.side_effect = PdfGenerationError(
            "Failed to render page 3", phase=PdfGenerationPhase.CANVAS_RENDERING, page_index=2
        )

        response = client.post(
            "/api/v1/render", json={"template": "x", "options": {"output": "bytes"}}
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error"] == "Failed to render page 3"
        assert body["error_code"] == "PDF_GENERATION_ERROR"
        assert body["details"]["phase"] == "canvas_rendering"
        assert body["details"]["page_index"] == 2
        assert body["request_id"]

    def test_unsupported_maps_to_503(self, client, mock_generate):
        mock_generate.side_effect = UnsupportedOperationError("Executable doesn't exist")

        response = client.post("/api/v1/render", json={"template": "x"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["error_code"] == "UNSUPPORTED_OPERATION"


class TestApplicationLifespan:
    """Test startup and shutdown behaviour."""

    def test_startup_survives_missing_browser(self):
        with patch(
            "quick_html_pdf.api.main.initialize_browser_pool",
            AsyncMock(side_effect=UnsupportedOperationError("no chromium")),
        ), patch("quick_html_pdf.api.main.close_browser_pool", AsyncMock()) as mock_close:
            with TestClient(app) as test_client:
                response = test_client.get("/api/v1/health")

        assert response.status_code == status.HTTP_200_OK
        mock_close.assert_awaited_once()
