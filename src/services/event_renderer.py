"""
Classifies GitHub events and renders the activity feed
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

import structlog

from src.models.activity import GitHubEvent

logger = structlog.get_logger()

NEUTRAL_COLOR = "neutral"
FEED_PLACEHOLDER_COUNT = 5


@dataclass(frozen=True)
class EventCategory:
    label: str
    color: str


DEFAULT_EVENT_TYPES: Mapping[str, EventCategory] = MappingProxyType({
    "pr_created": EventCategory("PR Created", "blue"),
    "pr_merged": EventCategory("PR Merged", "purple"),
    "pr_reviewed": EventCategory("PR Reviewed", "amber"),
    "pr_approved": EventCategory("PR Approved", "green"),
    "issue_triaged": EventCategory("Triaged", "zinc"),
    "issue_researched": EventCategory("Researched", "indigo"),
    "issue_closed": EventCategory("Issue Closed", "green"),
})


class EventCatalogError(Exception):
    """Raised when an event type catalog cannot be loaded"""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(message)


class EventCatalog:
    """
    Immutable mapping of event type codes to display categories.

    Built once at startup and shared; supporting a new event type means
    adding an entry to the catalog file, not changing code.
    """

    def __init__(self, entries: Optional[Mapping[str, EventCategory]] = None):
        self._entries = MappingProxyType(dict(DEFAULT_EVENT_TYPES if entries is None else entries))

    @property
    def entries(self) -> Mapping[str, EventCategory]:
        return self._entries

    def classify(self, event_type: str) -> EventCategory:
        """Category for a type; unknown types get a neutral badge labelled with the raw code"""
        category = self._entries.get(event_type)
        if category is None:
            return EventCategory(label=event_type, color=NEUTRAL_COLOR)
        return category

    def __contains__(self, event_type: str) -> bool:
        return event_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_file(cls, path: Path, include_defaults: bool = True) -> "EventCatalog":
        """
        Load a catalog from a JSON object of ``{"type": {"label": ..., "color": ...}}``

        Entries in the file override the built-in defaults unless
        ``include_defaults`` is False.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise EventCatalogError(f"Failed to load event catalog: {e}", path=str(path)) from e

        if not isinstance(data, dict):
            raise EventCatalogError("Event catalog must be a JSON object", path=str(path))

        entries = dict(DEFAULT_EVENT_TYPES) if include_defaults else {}
        for event_type, entry in data.items():
            if not isinstance(entry, dict) or "label" not in entry:
                raise EventCatalogError(
                    f"Invalid catalog entry for '{event_type}'", path=str(path)
                )
            entries[event_type] = EventCategory(
                label=str(entry["label"]), color=str(entry.get("color", NEUTRAL_COLOR))
            )

        logger.info("Loaded event catalog", path=str(path), event_types=len(entries))
        return cls(entries)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """
    Relative age of a timestamp, truncated to whole minutes, hours or days

    Args:
        timestamp: The instant to describe; naive values are taken as UTC
        now: Reference instant, defaults to the current time

    Returns:
        str: e.g. "5m ago", "3h ago", "2d ago"
    """
    reference = _as_utc(now) if now else datetime.now(timezone.utc)
    elapsed = (reference - _as_utc(timestamp)).total_seconds()

    # Clock skew can put an event slightly in the future
    minutes = max(int(elapsed // 60), 0)
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


@dataclass(frozen=True)
class RenderedEvent:
    id: str
    label: str
    color: str
    title: str
    url: str
    summary: Optional[str]
    repo: str
    repo_short: str
    repo_url: str
    number: int
    item_url: str
    age: str


@dataclass(frozen=True)
class FeedView:
    """What the event feed shows: loading placeholders, an empty notice, or rows"""

    state: str
    events: Tuple[RenderedEvent, ...] = ()
    empty_message: str = ""
    placeholder_count: int = FEED_PLACEHOLDER_COUNT

    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"


class EventRenderer:
    """Turns raw GitHub events into display rows"""

    def __init__(self, catalog: EventCatalog, github_url: str = "https://github.com"):
        self.catalog = catalog
        self.github_url = github_url.rstrip("/")

    def repo_url(self, event: GitHubEvent) -> str:
        return f"{self.github_url}/{event.repo}"

    def item_url(self, event: GitHubEvent) -> str:
        return f"{self.github_url}/{event.repo}/{event.item_path}/{event.number}"

    def render_event(self, event: GitHubEvent, now: Optional[datetime] = None) -> RenderedEvent:
        category = self.catalog.classify(event.type)
        return RenderedEvent(
            id=str(event.id),
            label=category.label,
            color=category.color,
            title=event.title,
            url=event.url,
            summary=event.summary,
            repo=event.repo,
            repo_short=event.repo_short,
            repo_url=self.repo_url(event),
            number=event.number,
            item_url=self.item_url(event),
            age=time_ago(event.timestamp, now),
        )

    def build_feed(
        self,
        events: Iterable[GitHubEvent],
        loading: bool,
        days: int = 7,
        now: Optional[datetime] = None,
    ) -> FeedView:
        """
        Build the feed view for one render pass.

        Loading only applies before the first completed fetch; after that an
        empty result is shown as a confirmed "no activity" notice.
        """
        if loading:
            return FeedView(state=FeedView.LOADING)

        reference = now or datetime.now(timezone.utc)
        rendered = tuple(self.render_event(event, reference) for event in events)
        if not rendered:
            return FeedView(
                state=FeedView.EMPTY,
                empty_message=f"No GitHub activity found in the last {days} days.",
            )
        return FeedView(state=FeedView.READY, events=rendered)
