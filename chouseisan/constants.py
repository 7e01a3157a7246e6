"""Shared constants for candidate-date generation.

Holds the holiday API location, HTTP timeouts, and the option lists the
chouseisan side panel offers (durations, time-of-day choices, weekday labels).
"""

from __future__ import annotations

import os
from typing import Dict, Tuple

# -----------------------------------------------------------------------------
# Holiday data source
# -----------------------------------------------------------------------------

DEFAULT_HOLIDAYS_API_BASE_URL = "https://holidays-jp.shogo82148.com"

# Environment override for the holiday endpoint (e.g., a local mirror)
HOLIDAYS_URL_ENV = "CHOUSEISAN_HOLIDAYS_URL"


def holidays_api_base_url() -> str:
    """Return the holiday API base URL, honouring the environment override."""
    return (os.environ.get(HOLIDAYS_URL_ENV) or DEFAULT_HOLIDAYS_API_BASE_URL).rstrip("/")


# Default timeout for HTTP requests: (connect_seconds, read_seconds)
DEFAULT_REQUEST_TIMEOUT: Tuple[int, int] = (5, 10)

# Upper bound on concurrent per-year holiday fetches
MAX_HOLIDAY_WORKERS = 4


# -----------------------------------------------------------------------------
# Form defaults
# -----------------------------------------------------------------------------

DEFAULT_DURATION = 60

# Duration choices offered by the side panel: minutes -> label
DURATION_OPTIONS: Dict[int, str] = {
    30: "30分",
    60: "1時間",
    90: "1時間30分",
    120: "2時間",
}

# Step between selectable start/end times
TIME_OPTION_STEP = 30

MINUTES_PER_DAY = 24 * 60


# -----------------------------------------------------------------------------
# Weekday labels (index 0 = Sunday)
# -----------------------------------------------------------------------------

JAPANESE_WEEKDAYS: Tuple[str, ...] = ("日", "月", "火", "水", "木", "金", "土")
ENGLISH_WEEKDAYS: Tuple[str, ...] = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")

WEEKDAY_LABELS: Dict[str, Tuple[str, ...]] = {
    "ja": JAPANESE_WEEKDAYS,
    "en": ENGLISH_WEEKDAYS,
}

# Field names of the candidate form on chouseisan.com
FORM_FIELDS: Tuple[str, ...] = ("name", "comment", "kouho")
