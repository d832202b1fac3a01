"""
Activity feed data models
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel


PULL_REQUEST_PREFIX = "pr_"


class GitHubEvent(BaseModel):
    """A GitHub action performed by the pipeline agent"""

    id: Union[str, int]
    type: str
    repo: str
    number: int
    title: str
    summary: Optional[str] = None
    url: str
    timestamp: datetime
    project: Optional[str] = None

    class Config:
        frozen = True
        extra = "allow"

    @property
    def is_pull_request(self) -> bool:
        """Pull request events are identified by their type prefix alone"""
        return self.type.startswith(PULL_REQUEST_PREFIX)

    @property
    def item_path(self) -> str:
        return "pull" if self.is_pull_request else "issues"

    @property
    def repo_short(self) -> str:
        return self.repo.split("/")[-1]


class MetricEntry(BaseModel):
    """Execution record of a pipeline job, passed through opaquely"""

    timestamp: Optional[datetime] = None
    job: Optional[str] = None
    repo: Optional[str] = None
    item: Optional[Union[int, str]] = None
    status: Optional[str] = None
    duration: Optional[float] = None
    project: Optional[str] = None

    class Config:
        frozen = True
        extra = "allow"


class ActivityResponse(BaseModel):
    """Envelope returned by the activity endpoint"""

    events: List[GitHubEvent]


class MetricsResponse(BaseModel):
    """Envelope returned by the metrics endpoint"""

    metrics: List[MetricEntry]


class ErrorResponse(BaseModel):
    error: str


def parse_events(payload: Dict[str, Any]) -> tuple:
    """Build an immutable event snapshot from an activity response body"""
    return tuple(GitHubEvent.model_validate(event) for event in payload.get("events") or [])


def parse_metrics(payload: Dict[str, Any]) -> tuple:
    """Build an immutable metrics snapshot from a metrics response body"""
    return tuple(MetricEntry.model_validate(entry) for entry in payload.get("metrics") or [])
