"""
Pipeline jobs table built from metric snapshots
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from src.models.activity import MetricEntry
from src.services.event_renderer import time_ago

MAX_METRICS_DISPLAY = 50
TABLE_PLACEHOLDER_COUNT = 5
MISSING = "-"


@dataclass(frozen=True)
class MetricRow:
    age: str
    job: str
    repo: str
    item: str
    status: str
    duration: str


@dataclass(frozen=True)
class MetricsTableView:
    loading: bool
    rows: Tuple[MetricRow, ...] = ()
    placeholder_count: int = TABLE_PLACEHOLDER_COUNT


def most_recent(metrics: Sequence[MetricEntry], limit: int = MAX_METRICS_DISPLAY) -> Tuple[MetricEntry, ...]:
    """Newest-first view of a chronologically ordered metric set, capped at ``limit``"""
    return tuple(reversed(metrics))[:limit]


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return MISSING
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


class MetricsTable:
    """Orders and caps metric records for display"""

    def __init__(self, limit: int = MAX_METRICS_DISPLAY):
        self.limit = limit

    def build(
        self,
        metrics: Sequence[MetricEntry],
        loading: bool,
        now: Optional[datetime] = None,
    ) -> MetricsTableView:
        if loading:
            return MetricsTableView(loading=True)
        rows = tuple(self._row(entry, now) for entry in most_recent(metrics, self.limit))
        return MetricsTableView(loading=False, rows=rows)

    def _row(self, entry: MetricEntry, now: Optional[datetime]) -> MetricRow:
        return MetricRow(
            age=time_ago(entry.timestamp, now) if entry.timestamp else MISSING,
            job=entry.job or MISSING,
            repo=entry.repo or MISSING,
            item=MISSING if entry.item is None else str(entry.item),
            status=entry.status or MISSING,
            duration=format_duration(entry.duration),
        )
