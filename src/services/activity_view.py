"""
Live activity view combining the event feed and the pipeline jobs table
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
import structlog

from config.settings import settings
from src.models.activity import parse_events, parse_metrics
from src.services.event_renderer import EventRenderer, FeedView
from src.services.metrics_table import MetricsTable, MetricsTableView
from src.services.page_templates import create_environment
from src.services.polling_client import Fetcher, PollingClient

logger = structlog.get_logger()


@dataclass(frozen=True)
class ActivityPage:
    title: str
    subtitle: str
    feed: FeedView
    table: MetricsTableView


def page_title(project: Optional[str], app_name: Optional[str] = None) -> str:
    return f"Activity - {project}" if project else f"Activity - {app_name or settings.APP_NAME}"


def build_page(
    renderer: EventRenderer,
    table: MetricsTable,
    events,
    events_loading: bool,
    metrics,
    metrics_loading: bool,
    project: Optional[str] = None,
    days: int = 7,
    now: Optional[datetime] = None,
) -> ActivityPage:
    """Assemble one render pass of the activity page"""
    reference = now or datetime.now(timezone.utc)
    return ActivityPage(
        title=page_title(project),
        subtitle=f"What {settings.APP_NAME} has done in the last {days} days",
        feed=renderer.build_feed(events or (), events_loading, days=days, now=reference),
        table=table.build(metrics or (), metrics_loading, now=reference),
    )


class ActivityView:
    """
    One operator view: an event poll and a metrics poll for a single project.

    The two polls run independently on the same interval and share nothing
    but the renderer. Closing the view cancels both.
    """

    def __init__(
        self,
        base_url: str,
        renderer: EventRenderer,
        project: Optional[str] = None,
        days: Optional[int] = None,
        interval: Optional[float] = None,
        table: Optional[MetricsTable] = None,
        fetch: Optional[Fetcher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.renderer = renderer
        self.table = table or MetricsTable(limit=settings.MAX_METRICS_DISPLAY)
        self.project = project
        self.days = settings.DEFAULT_DAYS if days is None else days
        self._env = create_environment()

        self.activity_poll = PollingClient(
            f"{self.base_url}/api/activity",
            params=self._query_params(),
            interval=interval,
            parse=parse_events,
            fetch=fetch,
            http_client=http_client,
            name="activity",
        )
        self.metrics_poll = PollingClient(
            f"{self.base_url}/api/metrics",
            params=self._query_params(),
            interval=interval,
            parse=parse_metrics,
            fetch=fetch,
            http_client=http_client,
            name="metrics",
        )

    def _query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"days": self.days}
        if self.project:
            params["project"] = self.project
        return params

    def start(self) -> None:
        self.activity_poll.start()
        self.metrics_poll.start()
        logger.info("Activity view started", project=self.project, days=self.days)

    def switch_project(self, project: Optional[str]) -> None:
        """Re-key both polls to another project, or all projects for None"""
        if project == self.project:
            return
        self.project = project
        params = self._query_params()
        self.activity_poll.set_params(params)
        self.metrics_poll.set_params(params)

    def add_listener(self, listener) -> None:
        """Run ``listener(view)`` whenever either poll applies a new snapshot"""
        self.activity_poll.add_listener(lambda _: listener(self))
        self.metrics_poll.add_listener(lambda _: listener(self))

    def page(self, now: Optional[datetime] = None) -> ActivityPage:
        return build_page(
            self.renderer,
            self.table,
            self.activity_poll.data,
            self.activity_poll.is_loading,
            self.metrics_poll.data,
            self.metrics_poll.is_loading,
            project=self.project,
            days=self.days,
            now=now,
        )

    def render(self, now: Optional[datetime] = None) -> str:
        """Full HTML page for the current snapshots"""
        template = self._env.get_template("activity_page.html")
        return template.render(page=self.page(now), refresh_interval=None)

    def render_text(self, now: Optional[datetime] = None) -> str:
        """Plain-text rendering for terminals"""
        template = self._env.get_template("activity_page.txt")
        return template.render(page=self.page(now))

    async def close(self) -> None:
        await self.activity_poll.close()
        await self.metrics_poll.close()
        logger.info("Activity view closed", project=self.project)

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
