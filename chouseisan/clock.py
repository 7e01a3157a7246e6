"""Clock abstraction used for form defaults.

Generation itself never reads the current time; only the defaults offered
to a fresh form do, and they go through a `Clock` so tests can pin "now".
"""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Dict, Protocol

from .constants import DEFAULT_DURATION


class Clock(Protocol):
    def now(self) -> _dt.datetime:
        ...


class SystemClock:
    """Local wall-clock time."""

    def now(self) -> _dt.datetime:
        return _dt.datetime.now()


@dataclass
class FixedClock:
    """Always returns the same instant."""
    instant: _dt.datetime

    def now(self) -> _dt.datetime:
        return self.instant


def _hour(h: int) -> str:
    return f"{h % 24:02d}:00"


def default_request_fields(clock: Clock) -> Dict[str, Any]:
    """Initial form values: today, this hour to the next, 60-minute slots."""
    now = clock.now()
    today = now.date().isoformat()
    return {
        "eventTitle": "",
        "memo": "",
        "startDate": today,
        "endDate": today,
        "startTime": _hour(now.hour),
        "endTime": _hour(now.hour + 1),
        "duration": str(DEFAULT_DURATION),
        "fullDay": False,
        "overwrite": False,
        "excludeHolidays": False,
    }
