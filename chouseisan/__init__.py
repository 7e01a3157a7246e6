"""Candidate-date generation for chouseisan (調整さん) events.

Turns a date range, an optional daily time window and a slot length into
the candidate lines chouseisan expects, optionally skipping weekends and
Japanese national holidays.
"""
from __future__ import annotations

from .dates import DateRange, dates_in_range, parse_date
from .formatting import format_date, format_line, weekday_label
from .generator import ScheduleGenerator
from .holidays import HolidayCache, HolidayResolver, is_weekend
from .model import ScheduleRequest, Slot, TimeWindow, parse_time
from .slots import available_durations, partition, pick_duration, time_options

__version__ = "0.1.0"

__all__ = [
    "DateRange",
    "HolidayCache",
    "HolidayResolver",
    "ScheduleGenerator",
    "ScheduleRequest",
    "Slot",
    "TimeWindow",
    "available_durations",
    "dates_in_range",
    "format_date",
    "format_line",
    "is_weekend",
    "parse_date",
    "parse_time",
    "partition",
    "pick_duration",
    "time_options",
    "weekday_label",
]
