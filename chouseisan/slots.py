"""Time-slot partitioning for a daily availability window.

Windows are handled in minutes from midnight. An end at or before the start
means the window runs into the next day, so 23:00-01:00 is two hours long.

Examples:
    partition(TimeWindow(time(23, 0), time(1, 0)), 60)
    -> [Slot(23:00, 00:00), Slot(00:00, 01:00)]
    partition(TimeWindow(time(9, 0), time(10, 15)), 60)
    -> [Slot(09:00, 10:00)]
"""
from __future__ import annotations

import datetime as _dt
from typing import Any, Iterable, List, Optional

from .constants import DEFAULT_DURATION, DURATION_OPTIONS, MINUTES_PER_DAY, TIME_OPTION_STEP
from .model import Slot, TimeWindow, parse_time

__all__ = [
    "available_durations",
    "format_minutes",
    "partition",
    "pick_duration",
    "time_options",
    "window_minutes",
]


def _to_minutes(t: _dt.time) -> int:
    return t.hour * 60 + t.minute


def _from_minutes(minutes: int) -> _dt.time:
    minutes %= MINUTES_PER_DAY
    return _dt.time(minutes // 60, minutes % 60)


def format_minutes(minutes: int) -> str:
    """Format minutes from midnight as `HH:MM` (wrapping past 24h)."""
    return _from_minutes(minutes).strftime("%H:%M")


def _bounds(window: TimeWindow) -> tuple:
    start = _to_minutes(window.start)
    end = _to_minutes(window.end)
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def window_minutes(window: TimeWindow) -> int:
    """Effective length of the window in minutes (midnight-aware)."""
    start, end = _bounds(window)
    return end - start


def partition(window: TimeWindow, duration_minutes: int) -> List[Slot]:
    """Split a window into consecutive fixed-length slots.

    A trailing slot that would overrun the window end is dropped, so the
    result has `window_minutes(window) // duration_minutes` entries.

    Raises:
        ValueError: If `duration_minutes` is not positive.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
    start, end = _bounds(window)
    slots: List[Slot] = []
    current = start
    while current < end:
        slot_end = current + duration_minutes
        if slot_end <= end:
            slots.append(Slot(_from_minutes(current), _from_minutes(slot_end)))
        current += duration_minutes
    return slots


def available_durations(
    start: Any,
    end: Any,
    options: Iterable[int] = DURATION_OPTIONS,
) -> List[int]:
    """Duration options (minutes) that fit in the start/end window.

    All options are offered while either time is still unset.
    """
    opts = sorted(int(o) for o in options)
    if not start or not end:
        return opts
    total = window_minutes(TimeWindow(parse_time(start), parse_time(end)))
    return [o for o in opts if o <= total]


def pick_duration(current: Optional[int], available: List[int]) -> Optional[int]:
    """Keep the current duration if still offered, else fall back.

    Prefers the default (60 minutes), then the longest available option.
    Returns None when nothing was selected or nothing fits.
    """
    if current is None:
        return None
    if current in available:
        return current
    if DEFAULT_DURATION in available:
        return DEFAULT_DURATION
    return available[-1] if available else None


def time_options(step_minutes: int = TIME_OPTION_STEP) -> List[str]:
    """Selectable times of day: 00:00, 00:30, ... 23:30 by default."""
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")
    return [format_minutes(m) for m in range(0, MINUTES_PER_DAY, step_minutes)]
