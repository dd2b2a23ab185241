"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter

from quick_html_pdf.config.settings import get_settings
from quick_html_pdf.core.pdf_generator import get_browser_pool
from quick_html_pdf.models.schemas import HealthStatus

router = APIRouter(prefix="/api/v1", tags=["Health"])


def check_browser_pool_health() -> Dict[str, Any]:
    """Check browser pool health status."""
    pool = get_browser_pool()
    if pool is None or not pool.is_initialized:
        return {"healthy": False, "status": "not_initialized", "available_browsers": 0}

    available = len(pool.browsers)
    return {
        "healthy": True,
        "status": "healthy" if available > 0 else "busy",
        "available_browsers": available,
        "pool_size": pool.pool_size,
    }


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Report application and browser pool status."""
    browser_pool = check_browser_pool_health()
    return HealthStatus(
        status="healthy" if browser_pool["healthy"] else "degraded",
        version=get_settings().app_version,
        browser_pool=browser_pool["healthy"],
    )
