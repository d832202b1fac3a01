"""
Server-rendered activity dashboard page
"""

import asyncio
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from config.settings import settings
from src.api.activity import NO_STORE_HEADERS
from src.services.activity_provider import ActivityProvider, resolve_result
from src.services.activity_view import build_page
from src.services.event_renderer import EventRenderer
from src.services.metrics_table import MetricsTable
from src.services.page_templates import create_environment
from src.services.shared_services import get_event_renderer, get_metrics_table, get_provider
from src.utils.query_validator import QueryValidationError, validate_project

router = APIRouter()
logger = structlog.get_logger()

templates = create_environment()


def _html(body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(content=body, status_code=status_code, headers=NO_STORE_HEADERS)


@router.get("/activity", response_class=HTMLResponse)
async def activity_page(
    project: Optional[str] = Query(None, description="Project slug, all projects when omitted"),
    provider: ActivityProvider = Depends(get_provider),
    renderer: EventRenderer = Depends(get_event_renderer),
    table: MetricsTable = Depends(get_metrics_table),
) -> HTMLResponse:
    """
    Activity page that reloads itself every refresh interval
    """
    try:
        project_slug = validate_project(project)
    except QueryValidationError as e:
        return _html(f"<p>{e.message}</p>", status_code=400)

    days = settings.DEFAULT_DAYS
    try:
        events, metrics = await asyncio.gather(
            resolve_result(provider.query_events(days, project_slug)),
            resolve_result(provider.query_metrics(days, project_slug)),
        )
    except Exception as e:
        logger.error("Failed to load activity page", project=project_slug, error=str(e))
        return _html("<p>Internal server error</p>", status_code=500)

    page = build_page(
        renderer,
        table,
        events,
        False,
        metrics,
        False,
        project=project_slug,
        days=days,
    )
    body = templates.get_template("activity_page.html").render(
        page=page, refresh_interval=int(settings.REFRESH_INTERVAL)
    )
    return _html(body)
