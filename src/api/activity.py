"""
Activity and metrics query endpoints
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from src.models.activity import ActivityResponse, ErrorResponse, MetricsResponse
from src.services.activity_provider import ActivityProvider, resolve_result
from src.services.shared_services import get_provider
from src.utils.query_validator import QueryValidationError, parse_days, validate_project

router = APIRouter()
logger = structlog.get_logger()

NO_STORE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate, max-age=0"}


def _json(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=NO_STORE_HEADERS)


@router.get(
    "/activity",
    responses={200: {"model": ActivityResponse}, 400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_activity(
    days: Optional[str] = Query(None, description="Lookback window in days"),
    project: Optional[str] = Query(None, description="Project slug, all projects when omitted"),
    provider: ActivityProvider = Depends(get_provider),
) -> JSONResponse:
    """
    GitHub events performed by the pipeline in the lookback window
    """
    try:
        project_slug = validate_project(project)
    except QueryValidationError as e:
        return _json({"error": e.message}, status_code=400)

    window = parse_days(days)
    try:
        events = await resolve_result(provider.query_events(window, project_slug))
        return _json({"events": jsonable_encoder(events)})

    except Exception as e:
        logger.error("Failed to query activity", days=window, project=project_slug, error=str(e))
        return _json({"error": "Internal server error"}, status_code=500)


@router.get(
    "/metrics",
    responses={200: {"model": MetricsResponse}, 400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_metrics(
    days: Optional[str] = Query(None, description="Lookback window in days"),
    project: Optional[str] = Query(None, description="Project slug, all projects when omitted"),
    provider: ActivityProvider = Depends(get_provider),
) -> JSONResponse:
    """
    Pipeline job metrics in the lookback window, oldest first
    """
    try:
        project_slug = validate_project(project)
    except QueryValidationError as e:
        return _json({"error": e.message}, status_code=400)

    window = parse_days(days)
    try:
        metrics = await resolve_result(provider.query_metrics(window, project_slug))
        return _json({"metrics": jsonable_encoder(metrics)})

    except Exception as e:
        logger.error("Failed to query metrics", days=window, project=project_slug, error=str(e))
        return _json({"error": "Internal server error"}, status_code=500)
