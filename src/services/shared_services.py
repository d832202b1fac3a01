"""
Shared service instances to prevent multiple initialization issues
"""

from config.settings import settings
from .activity_provider import ActivityProvider, JsonlActivityProvider
from .event_renderer import EventCatalog, EventRenderer
from .metrics_table import MetricsTable

# Global shared instances - initialized once
_provider = None
_event_catalog = None
_event_renderer = None
_metrics_table = None

def get_provider() -> ActivityProvider:
    """Get shared ActivityProvider instance"""
    global _provider
    if _provider is None:
        _provider = JsonlActivityProvider()
    return _provider

def get_event_catalog() -> EventCatalog:
    """Get shared EventCatalog, loaded from EVENT_TYPES_FILE when configured"""
    global _event_catalog
    if _event_catalog is None:
        if settings.EVENT_TYPES_FILE:
            _event_catalog = EventCatalog.from_file(settings.EVENT_TYPES_FILE)
        else:
            _event_catalog = EventCatalog()
    return _event_catalog

def get_event_renderer() -> EventRenderer:
    """Get shared EventRenderer instance"""
    global _event_renderer
    if _event_renderer is None:
        _event_renderer = EventRenderer(get_event_catalog(), github_url=settings.GITHUB_WEB_URL)
    return _event_renderer

def get_metrics_table() -> MetricsTable:
    """Get shared MetricsTable instance"""
    global _metrics_table
    if _metrics_table is None:
        _metrics_table = MetricsTable(limit=settings.MAX_METRICS_DISPLAY)
    return _metrics_table

def reset_services():
    """Reset all shared services (for testing)"""
    global _provider, _event_catalog, _event_renderer, _metrics_table
    _provider = None
    _event_catalog = None
    _event_renderer = None
    _metrics_table = None
