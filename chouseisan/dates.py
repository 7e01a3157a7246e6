"""Calendar-day iteration over an inclusive date range."""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Iterator, List

__all__ = ["DateRange", "dates_in_range", "parse_date"]


def parse_date(value: Any) -> _dt.date:
    """Parse an ISO `YYYY-MM-DD` string (or date/datetime) to a date.

    Raises:
        ValueError: If the value is not a calendar date.
    """
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    s = str(value or "").strip()
    if "T" in s:
        s = s.split("T", 1)[0]
    try:
        return _dt.date.fromisoformat(s)
    except ValueError:
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from None


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days, re-iterable.

    Steps by ordinal day, so the count is unaffected by DST transitions.
    An inverted range is empty.
    """
    start: _dt.date
    end: _dt.date

    def __iter__(self) -> Iterator[_dt.date]:
        cur = self.start.toordinal()
        last = self.end.toordinal()
        while cur <= last:
            yield _dt.date.fromordinal(cur)
            cur += 1

    def __len__(self) -> int:
        return max(0, (self.end - self.start).days + 1)

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, _dt.date):
            return False
        if isinstance(item, _dt.datetime):
            item = item.date()
        return self.start <= item <= self.end

    def years(self) -> List[int]:
        """Distinct years the range touches, ascending."""
        if len(self) == 0:
            return []
        return list(range(self.start.year, self.end.year + 1))


def dates_in_range(start: Any, end: Any) -> DateRange:
    """Every calendar day from `start` to `end`, both included.

    Examples:
        list(dates_in_range("2024-03-01", "2024-03-03"))
        -> [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)]
    """
    return DateRange(parse_date(start), parse_date(end))
