"""
Tests for event classification, relative times and feed rendering
"""

import json
import pytest
from datetime import datetime, timedelta

from src.models.activity import GitHubEvent, parse_events
from src.services.event_renderer import (
    DEFAULT_EVENT_TYPES,
    NEUTRAL_COLOR,
    EventCatalog,
    EventCatalogError,
    EventCategory,
    EventRenderer,
    FeedView,
    time_ago,
)
from src.services.page_templates import create_environment

from tests.event_builders import NOW, make_event


class TestTimeAgo:
    """Test cases for relative age strings"""

    @pytest.mark.parametrize(
        "elapsed,expected",
        [
            (timedelta(seconds=0), "0m ago"),
            (timedelta(seconds=59), "0m ago"),
            (timedelta(minutes=1), "1m ago"),
            (timedelta(minutes=59, seconds=59), "59m ago"),
            (timedelta(minutes=60), "1h ago"),
            (timedelta(minutes=119), "1h ago"),
            (timedelta(hours=23, minutes=59), "23h ago"),
            (timedelta(hours=24), "1d ago"),
            (timedelta(hours=47, minutes=59), "1d ago"),
            (timedelta(days=6, hours=23), "6d ago"),
        ],
    )
    def test_tiers_truncate(self, elapsed, expected):
        """Test that each tier truncates instead of rounding"""
        assert time_ago(NOW - elapsed, NOW) == expected

    def test_future_timestamp_is_zero_minutes(self):
        """Test that clock skew never yields a negative age"""
        assert time_ago(NOW + timedelta(minutes=3), NOW) == "0m ago"

    def test_naive_timestamp_treated_as_utc(self):
        """Test that naive timestamps are read as UTC"""
        naive = (NOW - timedelta(hours=2)).replace(tzinfo=None)
        assert time_ago(naive, NOW) == "2h ago"

    def test_monotonic(self):
        """Test that older timestamps never render as younger"""
        def minutes_of(label):
            value = int(label[:-5])
            unit = label[-5]
            return value * {"m": 1, "h": 60, "d": 1440}[unit]

        ages = [minutes_of(time_ago(NOW - timedelta(minutes=m), NOW)) for m in range(0, 4000, 7)]
        assert ages == sorted(ages)


class TestEventCatalog:
    """Test cases for the event type catalog"""

    def test_known_types(self):
        """Test the built-in labels"""
        catalog = EventCatalog()

        assert catalog.classify("pr_merged") == EventCategory("PR Merged", "purple")
        assert catalog.classify("issue_triaged").label == "Triaged"
        assert len(catalog) == 7

    def test_unknown_type_falls_back(self):
        """Test that unknown types use the raw code and a neutral color"""
        category = EventCatalog().classify("custom_step")

        assert category.label == "custom_step"
        assert category.color == NEUTRAL_COLOR

    def test_catalog_is_immutable(self):
        """Test that the catalog cannot be changed after construction"""
        catalog = EventCatalog()

        with pytest.raises(TypeError):
            catalog.entries["pr_created"] = EventCategory("Changed", "red")
        with pytest.raises(TypeError):
            DEFAULT_EVENT_TYPES["new_type"] = EventCategory("New", "red")

    def test_source_mapping_changes_do_not_leak(self):
        """Test that the catalog copies its input"""
        entries = {"deploy": EventCategory("Deployed", "teal")}
        catalog = EventCatalog(entries)
        entries["deploy"] = EventCategory("Changed", "red")

        assert catalog.classify("deploy").label == "Deployed"

    def test_from_file_extends_defaults(self, tmp_path):
        """Test that a catalog file adds and overrides entries"""
        path = tmp_path / "event_types.json"
        path.write_text(json.dumps({
            "deploy_started": {"label": "Deploy Started", "color": "teal"},
            "pr_merged": {"label": "Merged"},
        }))

        catalog = EventCatalog.from_file(path)

        assert catalog.classify("deploy_started") == EventCategory("Deploy Started", "teal")
        assert catalog.classify("pr_merged") == EventCategory("Merged", NEUTRAL_COLOR)
        assert catalog.classify("issue_closed").label == "Issue Closed"

    def test_from_file_without_defaults(self, tmp_path):
        path = tmp_path / "event_types.json"
        path.write_text(json.dumps({"deploy": {"label": "Deploy"}}))

        catalog = EventCatalog.from_file(path, include_defaults=False)

        assert len(catalog) == 1
        assert "pr_merged" not in catalog

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"x": {"color": "red"}}'])
    def test_from_file_rejects_malformed(self, tmp_path, content):
        """Test that malformed catalogs fail loudly"""
        path = tmp_path / "event_types.json"
        path.write_text(content)

        with pytest.raises(EventCatalogError):
            EventCatalog.from_file(path)

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(EventCatalogError):
            EventCatalog.from_file(tmp_path / "missing.json")


class TestEventRenderer:
    """Test cases for rendering events and the feed"""

    @pytest.fixture
    def renderer(self):
        return EventRenderer(EventCatalog(), github_url="https://github.com/")

    def test_pull_request_link(self, renderer):
        """Test that pr_ events link to the pull path"""
        event = GitHubEvent.model_validate(make_event(type="pr_merged", number=42, repo="acme/widgets"))

        rendered = renderer.render_event(event, NOW)

        assert rendered.item_url == "https://github.com/acme/widgets/pull/42"
        assert rendered.repo_url == "https://github.com/acme/widgets"
        assert rendered.repo_short == "widgets"
        assert rendered.label == "PR Merged"
        assert rendered.age == "5m ago"

    def test_issue_link(self, renderer):
        """Test that non-pr_ events link to the issues path"""
        event = GitHubEvent.model_validate(make_event(type="issue_closed", number=42))

        rendered = renderer.render_event(event, NOW)

        assert rendered.item_url == "https://github.com/acme/widgets/issues/42"

    def test_unknown_type_renders(self, renderer):
        """Test that an unrecognized type is rendered rather than dropped"""
        event = GitHubEvent.model_validate(make_event(type="custom_step"))

        feed = renderer.build_feed([event], loading=False, now=NOW)

        assert feed.state == FeedView.READY
        assert feed.events[0].label == "custom_step"
        assert feed.events[0].color == NEUTRAL_COLOR
        assert feed.events[0].item_url.endswith("/issues/42")

    def test_numeric_id_renders_as_key(self, renderer):
        """Test that integer ids from the feed survive parsing and rendering"""
        events = parse_events({"events": [make_event(id="a"), make_event(id=7)]})

        feed = renderer.build_feed(events, loading=False, now=NOW)

        assert [e.id for e in events] == ["a", 7]
        assert [e.id for e in feed.events] == ["a", "7"]

    def test_loading_feed(self, renderer):
        """Test that an in-progress first fetch shows placeholders"""
        feed = renderer.build_feed([], loading=True)

        assert feed.state == FeedView.LOADING
        assert feed.placeholder_count == 5

    def test_empty_feed_after_fetch(self, renderer):
        """Test that a completed empty fetch shows the empty notice"""
        feed = renderer.build_feed([], loading=False, days=7)

        assert feed.state == FeedView.EMPTY
        assert feed.empty_message == "No GitHub activity found in the last 7 days."

    def test_feed_keeps_order_and_keys(self, renderer):
        events = [
            GitHubEvent.model_validate(make_event(id="b", timestamp=(NOW - timedelta(hours=1)).isoformat())),
            GitHubEvent.model_validate(make_event(id="a", timestamp=(NOW - timedelta(days=2)).isoformat())),
        ]

        feed = renderer.build_feed(events, loading=False, now=NOW)

        assert [e.id for e in feed.events] == ["b", "a"]
        assert [e.age for e in feed.events] == ["1h ago", "2d ago"]


class TestFeedTemplate:
    """Test cases for the event feed HTML"""

    @pytest.fixture
    def template(self):
        return create_environment().get_template("event_feed.html")

    @pytest.fixture
    def renderer(self):
        return EventRenderer(EventCatalog())

    def test_empty_state_html(self, template, renderer):
        html = template.render(feed=renderer.build_feed([], loading=False))

        assert "No GitHub activity found in the last 7 days." in html
        assert "<ul" not in html

    def test_loading_html(self, template, renderer):
        html = template.render(feed=renderer.build_feed([], loading=True))

        assert html.count('class="placeholder"') == 5
        assert "No GitHub activity" not in html

    def test_rows_are_escaped(self, template, renderer):
        """Test that event text cannot inject markup"""
        event = GitHubEvent.model_validate(make_event(title="<script>alert(1)</script>", summary=None))

        html = template.render(feed=renderer.build_feed([event], loading=False, now=NOW))

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert 'data-key="evt-1"' in html
        assert "https://github.com/acme/widgets/pull/42" in html
        assert "feed-summary" not in html
