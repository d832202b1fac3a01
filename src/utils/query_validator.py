"""
Query parameter validation utilities for the activity endpoints
"""

import re
from typing import Optional

import structlog

from config.settings import settings

logger = structlog.get_logger()

VALID_SLUG = re.compile(r"^[A-Za-z0-9_-]+$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class QueryValidationError(Exception):
    """Raised when a query parameter is rejected"""

    def __init__(self, message: str, field: str):
        self.message = message
        self.field = field
        super().__init__(message)


def parse_days(raw: Optional[str], default: Optional[int] = None) -> int:
    """
    Parse the lookback window from a query string value

    Args:
        raw: Raw ``days`` value, or None when absent
        default: Fallback window, defaults to ``settings.DEFAULT_DAYS``

    Returns:
        int: The leading integer of ``raw``, or the default when there is none
    """
    fallback = settings.DEFAULT_DAYS if default is None else default
    if raw is None:
        return fallback

    match = _LEADING_INT.match(raw)
    if not match:
        logger.debug("Unparseable days value, using default", raw=raw, days=fallback)
        return fallback

    return int(match.group(1))


def validate_project(raw: Optional[str]) -> Optional[str]:
    """
    Validate an optional project slug

    Args:
        raw: Raw ``project`` value; empty means all projects

    Returns:
        Optional[str]: The slug, or None for all projects

    Raises:
        QueryValidationError: If the slug contains disallowed characters
    """
    if not raw:
        return None

    if not VALID_SLUG.fullmatch(raw):
        logger.warning("Rejected project slug", project=raw)
        raise QueryValidationError("Invalid project slug", field="project")

    return raw
