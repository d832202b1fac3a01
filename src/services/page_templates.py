"""
Jinja2 templates for the activity dashboard
"""

from typing import Dict

from jinja2 import BaseLoader, Environment, TemplateNotFound, select_autoescape


class TemplateStringLoader(BaseLoader):
    """Jinja2 loader for in-module template strings"""

    def __init__(self, templates: Dict[str, str]):
        self.templates = templates

    def get_source(self, environment, template):
        if template in self.templates:
            source = self.templates[template]
            return source, None, lambda: True
        raise TemplateNotFound(template)


EVENT_FEED_HTML = """\
{% if feed.state == "loading" %}
<div class="feed feed-loading">
{% for _ in range(feed.placeholder_count) %}  <div class="placeholder"></div>
{% endfor %}</div>
{% elif feed.state == "empty" %}
<p class="feed-empty">{{ feed.empty_message }}</p>
{% else %}
<ul class="feed">
{% for event in feed.events %}  <li class="feed-item" data-key="{{ event.id }}">
    <span class="badge badge-{{ event.color }}">{{ event.label }}</span>
    <div class="feed-body">
      <a class="feed-title" href="{{ event.url }}" target="_blank" rel="noopener noreferrer">{{ event.title }}</a>
{% if event.summary %}      <p class="feed-summary">{{ event.summary }}</p>
{% endif %}      <div class="feed-meta">
        <a href="{{ event.repo_url }}" target="_blank" rel="noopener noreferrer">{{ event.repo_short }}</a>
        <span>&middot;</span>
        <a href="{{ event.item_url }}" target="_blank" rel="noopener noreferrer">#{{ event.number }}</a>
        <span>&middot;</span>
        <span>{{ event.age }}</span>
      </div>
    </div>
  </li>
{% endfor %}</ul>
{% endif %}
"""

METRICS_TABLE_HTML = """\
{% if table.loading %}
<div class="table-loading">
{% for _ in range(table.placeholder_count) %}  <div class="placeholder"></div>
{% endfor %}</div>
{% elif not table.rows %}
<p class="table-empty">No pipeline jobs recorded.</p>
{% else %}
<table class="jobs">
  <thead><tr><th>Time</th><th>Job</th><th>Repo</th><th>Item</th><th>Status</th><th>Duration</th></tr></thead>
  <tbody>
{% for row in table.rows %}    <tr class="status-{{ row.status }}"><td>{{ row.age }}</td><td>{{ row.job }}</td><td>{{ row.repo }}</td><td>{{ row.item }}</td><td>{{ row.status }}</td><td>{{ row.duration }}</td></tr>
{% endfor %}  </tbody>
</table>
{% endif %}
"""

ACTIVITY_PAGE_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
{% if refresh_interval %}  <meta http-equiv="refresh" content="{{ refresh_interval }}">
{% endif %}  <title>{{ page.title }}</title>
</head>
<body>
  <main class="activity">
    <h1>Activity</h1>
    <p class="subtitle">{{ page.subtitle }}</p>
    <section class="card">
      <h2>GitHub Activity</h2>
{% with feed = page.feed %}{% include "event_feed.html" %}{% endwith %}
    </section>
    <section class="card">
      <h2>Pipeline Jobs</h2>
{% with table = page.table %}{% include "metrics_table.html" %}{% endwith %}
    </section>
  </main>
</body>
</html>
"""

ACTIVITY_PAGE_TEXT = """\
{{ page.title }}
{{ page.subtitle }}

GitHub Activity
{% if page.feed.state == "loading" %}  loading...
{% elif page.feed.state == "empty" %}  {{ page.feed.empty_message }}
{% else %}{% for event in page.feed.events %}  [{{ event.label }}] {{ event.title }} ({{ event.repo_short }} #{{ event.number }}, {{ event.age }})
{% endfor %}{% endif %}
Pipeline Jobs
{% if page.table.loading %}  loading...
{% elif not page.table.rows %}  No pipeline jobs recorded.
{% else %}{% for row in page.table.rows %}  {{ row.age }}  {{ row.job }}  {{ row.repo }}  {{ row.item }}  {{ row.status }}  {{ row.duration }}
{% endfor %}{% endif %}"""

TEMPLATES = {
    "event_feed.html": EVENT_FEED_HTML,
    "metrics_table.html": METRICS_TABLE_HTML,
    "activity_page.html": ACTIVITY_PAGE_HTML,
    "activity_page.txt": ACTIVITY_PAGE_TEXT,
}


def create_environment() -> Environment:
    """Build the template environment; HTML templates are autoescaped"""
    return Environment(
        loader=TemplateStringLoader(TEMPLATES),
        autoescape=select_autoescape(enabled_extensions=("html",), default=False),
        keep_trailing_newline=True,
    )
