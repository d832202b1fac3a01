"""
Event and metric providers backing the activity endpoints
"""

import asyncio
import inspect
import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Awaitable, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError

from config.settings import settings
from src.models.activity import GitHubEvent, MetricEntry

logger = structlog.get_logger()


class ProviderError(Exception):
    """Raised when a feed cannot be read"""

    def __init__(self, message: str, source: Optional[str] = None):
        self.message = message
        self.source = source
        super().__init__(message)


class ActivityProvider(ABC):
    """
    Source of GitHub events and pipeline metrics.

    Implementations may answer synchronously or return an awaitable; callers
    must handle both. Results are read-only snapshots.
    """

    @abstractmethod
    def query_events(
        self, days: int, project: Optional[str] = None
    ) -> Union[List[GitHubEvent], Awaitable[List[GitHubEvent]]]:
        """Events from the last ``days`` days, optionally for one project"""

    @abstractmethod
    def query_metrics(
        self, days: int, project: Optional[str] = None
    ) -> Union[List[MetricEntry], Awaitable[List[MetricEntry]]]:
        """Metric records from the last ``days`` days, oldest first"""


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


EARLIEST = datetime.min.replace(tzinfo=timezone.utc)
LATEST = datetime.max.replace(tzinfo=timezone.utc)


def window_start(days: int, now: Optional[datetime] = None) -> datetime:
    """Start of a lookback window, clamped to the representable date range"""
    reference = now or datetime.now(timezone.utc)
    try:
        return reference - timedelta(days=days)
    except OverflowError:
        return EARLIEST if days > 0 else LATEST


class JsonlActivityProvider(ActivityProvider):
    """Reads newline-delimited JSON feeds written by the pipeline"""

    def __init__(
        self,
        events_path: Optional[Path] = None,
        metrics_path: Optional[Path] = None,
    ):
        self.events_path = Path(events_path or settings.events_path)
        self.metrics_path = Path(metrics_path or settings.metrics_path)

    async def query_events(self, days: int, project: Optional[str] = None) -> List[GitHubEvent]:
        records = await asyncio.to_thread(self._read_feed, self.events_path)
        cutoff = window_start(days)

        events = []
        for record in records:
            try:
                event = GitHubEvent.model_validate(record)
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed event", path=str(self.events_path), error=str(e)
                )
                continue
            if project and event.project != project:
                continue
            if _as_utc(event.timestamp) < cutoff:
                continue
            events.append(event)

        # Newest first, matching the feed's display order
        events.sort(key=lambda e: _as_utc(e.timestamp), reverse=True)
        return events

    async def query_metrics(self, days: int, project: Optional[str] = None) -> List[MetricEntry]:
        records = await asyncio.to_thread(self._read_feed, self.metrics_path)
        cutoff = window_start(days)

        metrics = []
        for record in records:
            try:
                entry = MetricEntry.model_validate(record)
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed metric", path=str(self.metrics_path), error=str(e)
                )
                continue
            if project and entry.project != project:
                continue
            # Records without a timestamp cannot be windowed and are kept
            if entry.timestamp and _as_utc(entry.timestamp) < cutoff:
                continue
            metrics.append(entry)

        return metrics

    def _read_feed(self, path: Path) -> List[Dict[str, Any]]:
        """Load every JSON object line of a feed file, in file order"""
        if not path.exists():
            logger.info("Feed file not found, treating as empty", path=str(path))
            return []

        records = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError as e:
                        logger.warning(
                            "Skipping undecodable feed line",
                            path=str(path),
                            line=line_number,
                            error=str(e),
                        )
                        continue
                    if isinstance(record, dict):
                        records.append(record)
        except OSError as e:
            raise ProviderError(f"Failed to read feed: {e}", source=str(path)) from e

        return records


async def resolve_result(result: Any) -> Any:
    """Await a provider answer if it is awaitable, otherwise return it as is"""
    if inspect.isawaitable(result):
        return await result
    return result
