"""
Shared utility functions for the profile harvester.

- URL validation, profile canonicalization and search URL construction
- UTC day handling and month arithmetic
"""

from src.utils.url_utils import (
    validate_url,
    normalize_profile_url,
    is_profile_url,
    build_search_url,
)
from src.utils.date_utils import (
    utc_now,
    utc_day,
    parse_timestamp,
    is_older_than_months,
)

__all__ = [
    "validate_url",
    "normalize_profile_url",
    "is_profile_url",
    "build_search_url",
    "utc_now",
    "utc_day",
    "parse_timestamp",
    "is_older_than_months",
]
