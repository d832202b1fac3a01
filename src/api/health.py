"""
Health check endpoints
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config.settings import settings
from src.services.shared_services import get_event_catalog

router = APIRouter()
logger = structlog.get_logger()


@router.get("")
async def health_check() -> JSONResponse:
    """
    Health check endpoint for monitoring
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
        "service": "pipeline-activity-dashboard",
        "port": settings.PORT,
        "debug": settings.DEBUG,
    }
    return JSONResponse(content=health_data, status_code=200)


@router.get("/ready")
async def readiness_check() -> JSONResponse:
    """
    Readiness check endpoint for deployment
    """
    try:
        checks = {
            "data_dir": settings.DATA_DIR.is_dir(),
            "event_catalog": len(get_event_catalog()) > 0,
        }
        # Missing feeds read as empty, so they are reported but not required
        feeds = {
            "events_feed": settings.events_path.is_file(),
            "metrics_feed": settings.metrics_path.is_file(),
        }

        all_ready = all(checks.values())

        return JSONResponse(
            content={
                "ready": all_ready,
                "checks": checks,
                "feeds": feeds,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            status_code=200 if all_ready else 503,
        )

    except Exception as e:
        logger.error("Readiness check failed", error=str(e))
        return JSONResponse(
            content={
                "ready": False,
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            status_code=503,
        )
