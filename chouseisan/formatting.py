"""Render dates and slots as chouseisan candidate lines."""
from __future__ import annotations

import datetime as _dt
from typing import Optional, Sequence

from .constants import JAPANESE_WEEKDAYS
from .model import Slot

__all__ = ["format_date", "format_iso_date", "format_line", "format_time", "weekday_label"]


def weekday_label(d: _dt.date, weekdays: Sequence[str] = JAPANESE_WEEKDAYS) -> str:
    """Label for the day of week; `weekdays[0]` is Sunday."""
    # date.weekday() counts from Monday
    return weekdays[(d.weekday() + 1) % 7]


def format_date(d: _dt.date, weekdays: Sequence[str] = JAPANESE_WEEKDAYS) -> str:
    """`M/D(曜)` with no zero padding, e.g. 1/5(金)."""
    return f"{d.month}/{d.day}({weekday_label(d, weekdays)})"


def format_time(t: _dt.time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def format_iso_date(d: _dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def format_line(
    d: _dt.date,
    slot: Optional[Slot] = None,
    weekdays: Sequence[str] = JAPANESE_WEEKDAYS,
) -> str:
    """One candidate line: the date alone, or the date and slot range."""
    date_str = format_date(d, weekdays)
    if slot is None:
        return date_str
    return f"{date_str} {format_time(slot.start)} ~ {format_time(slot.end)}"
