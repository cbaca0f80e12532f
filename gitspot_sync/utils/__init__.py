"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_PUBLISH_DELAY_SECONDS,
    DEFAULT_RELEASE_FETCH_LIMIT,
    MAX_RELEASE_BODY_LENGTH,
)
from .helpers import ensure_utc, utc_now

__all__ = [
    "DEFAULT_PUBLISH_DELAY_SECONDS",
    "DEFAULT_RELEASE_FETCH_LIMIT",
    "MAX_RELEASE_BODY_LENGTH",
    "ensure_utc",
    "utc_now",
]
