"""
Data models and schemas for the application
"""

from .activity import GitHubEvent, MetricEntry, ActivityResponse, MetricsResponse, ErrorResponse

__all__ = [
    "GitHubEvent",
    "MetricEntry",
    "ActivityResponse",
    "MetricsResponse",
    "ErrorResponse",
]
