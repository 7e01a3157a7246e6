"""Candidate-date text generation.

Combines the date range, optional weekend/holiday filter and the per-day
time slots into the lines pasted into chouseisan's candidate field:

    1/5(金) 10:00 ~ 11:00
    1/5(金) 11:00 ~ 12:00

Full-day requests produce one bare `M/D(曜)` line per kept day.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .constants import JAPANESE_WEEKDAYS
from .dates import dates_in_range
from .formatting import format_line
from .holidays import HolidayResolver
from .model import ScheduleRequest, Slot
from .slots import partition

LOG = logging.getLogger(__name__)


class ScheduleGenerator:
    """Turns a `ScheduleRequest` into candidate lines.

    The holiday resolver is only consulted for requests with
    `exclude_holidays`; it is created on first use when not injected.
    """

    def __init__(
        self,
        resolver: Optional[HolidayResolver] = None,
        weekdays: Sequence[str] = JAPANESE_WEEKDAYS,
    ) -> None:
        self._resolver = resolver
        self.weekdays = weekdays

    @property
    def resolver(self) -> HolidayResolver:
        if self._resolver is None:
            self._resolver = HolidayResolver()
        return self._resolver

    def _slots(self, request: ScheduleRequest) -> Optional[List[Slot]]:
        """None for full-day requests; raises if a timed request lacks its window."""
        if request.full_day:
            return None
        request.require_time_fields()
        return partition(request.window, request.duration_minutes)

    def lines(self, request: ScheduleRequest) -> List[str]:
        """Candidate lines in day order, then slot order within a day."""
        slots = self._slots(request)
        days = dates_in_range(request.start_date, request.end_date)
        if request.exclude_holidays:
            self.resolver.prefetch(days.years())

        out: List[str] = []
        for day in days:
            if request.exclude_holidays and self.resolver.is_weekend_or_holiday(day):
                continue
            if slots is None:
                out.append(format_line(day, weekdays=self.weekdays))
            else:
                out.extend(format_line(day, slot, self.weekdays) for slot in slots)
        if not out:
            LOG.debug("No candidate lines for %s..%s", request.start_date, request.end_date)
        return out

    def generate(self, request: ScheduleRequest) -> str:
        """Newline-joined candidate text; empty string when nothing qualifies."""
        return "\n".join(self.lines(request))
