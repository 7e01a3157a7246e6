"""Request and slot types for candidate-date generation."""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .cli_errors import RequestValidationError
from .dates import parse_date

# Required in every request
BASIC_REQUIRED_FIELDS = ("eventTitle", "startDate", "endDate")
# Required unless the request is full-day
TIME_REQUIRED_FIELDS = ("startTime", "endTime", "duration")

# snake_case aliases accepted alongside the form's camelCase keys
_FIELD_ALIASES: Dict[str, str] = {
    "event_title": "eventTitle",
    "title": "eventTitle",
    "start_date": "startDate",
    "end_date": "endDate",
    "start_time": "startTime",
    "end_time": "endTime",
    "duration_minutes": "duration",
    "full_day": "fullDay",
    "exclude_holidays": "excludeHolidays",
    "overwrite_existing": "overwrite",
}


@dataclass(frozen=True)
class TimeWindow:
    """Wall-clock window; `end <= start` means it runs past midnight."""
    start: _dt.time
    end: _dt.time

    @property
    def crosses_midnight(self) -> bool:
        return self.end <= self.start


@dataclass(frozen=True)
class Slot:
    start: _dt.time
    end: _dt.time


def parse_time(value: Any) -> _dt.time:
    """Parse `HH:MM` (or `HH:MM:SS`) text, or pass a `time` through.

    Raises:
        ValueError: If the value is not a time of day.
    """
    if isinstance(value, _dt.datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, _dt.time):
        return value.replace(second=0, microsecond=0)
    # PyYAML reads unquoted 10:30 as the base-60 integer 630
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 24 * 60:
        return _dt.time(value // 60, value % 60)
    s = str(value or "").strip()
    parts = s.split(":")
    if len(parts) < 2 or not all(p.isdigit() for p in parts[:2]):
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    try:
        return _dt.time(int(parts[0]), int(parts[1]))
    except ValueError:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)") from None


def _parse_duration(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    try:
        minutes = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid duration: {value!r} (expected minutes)") from None
    return minutes


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map snake_case request keys onto the form's camelCase names."""
    out: Dict[str, Any] = {}
    for key, value in data.items():
        out[_FIELD_ALIASES.get(key, key)] = value
    return out


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def missing_fields(data: Mapping[str, Any]) -> List[str]:
    """Return required fields that are absent or empty in a request record.

    Zero counts as present so a YAML `00:00` (read as 0) is not dropped.
    """
    norm = normalize_keys(data)
    missing = [f for f in BASIC_REQUIRED_FIELDS if _is_blank(norm.get(f))]
    if not _as_bool(norm.get("fullDay")):
        missing.extend(f for f in TIME_REQUIRED_FIELDS if _is_blank(norm.get(f)))
    return missing


@dataclass(frozen=True)
class ScheduleRequest:
    event_title: str
    start_date: _dt.date
    end_date: _dt.date
    memo: str = ""
    full_day: bool = False
    start_time: Optional[_dt.time] = None
    end_time: Optional[_dt.time] = None
    duration_minutes: Optional[int] = None
    exclude_holidays: bool = False
    overwrite_existing: bool = False

    @property
    def window(self) -> Optional[TimeWindow]:
        if self.full_day or self.start_time is None or self.end_time is None:
            return None
        return TimeWindow(self.start_time, self.end_time)

    @classmethod
    def from_dict(cls, data: Any) -> "ScheduleRequest":
        """Build a request from the side panel's form record.

        Accepts camelCase form keys or their snake_case aliases. Time fields
        are ignored for full-day requests.

        Raises:
            RequestValidationError: On a non-mapping record, missing required
                fields, or values that cannot be parsed.
        """
        if not isinstance(data, Mapping):
            raise RequestValidationError("Invalid data was sent: expected a mapping")
        missing = missing_fields(data)
        if missing:
            raise RequestValidationError(
                f"Required fields are missing: {', '.join(missing)}", fields=missing
            )
        norm = normalize_keys(data)
        full_day = _as_bool(norm.get("fullDay"))
        current = "startDate"
        try:
            start_date = parse_date(norm["startDate"])
            current = "endDate"
            end_date = parse_date(norm["endDate"])
            start_time = end_time = None
            duration = None
            if not full_day:
                current = "startTime"
                start_time = parse_time(norm["startTime"])
                current = "endTime"
                end_time = parse_time(norm["endTime"])
                current = "duration"
                duration = _parse_duration(norm["duration"])
        except ValueError as exc:
            raise RequestValidationError(str(exc), fields=[current]) from exc
        return cls(
            event_title=str(norm["eventTitle"]),
            memo=str(norm.get("memo") or ""),
            start_date=start_date,
            end_date=end_date,
            full_day=full_day,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration,
            exclude_holidays=_as_bool(norm.get("excludeHolidays")),
            overwrite_existing=_as_bool(norm.get("overwrite")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the form's camelCase record."""
        def _t(t: Optional[_dt.time]) -> str:
            return t.strftime("%H:%M") if t is not None else ""

        return {
            "eventTitle": self.event_title,
            "memo": self.memo,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "startTime": _t(self.start_time),
            "endTime": _t(self.end_time),
            "duration": str(self.duration_minutes) if self.duration_minutes is not None else "",
            "fullDay": self.full_day,
            "overwrite": self.overwrite_existing,
            "excludeHolidays": self.exclude_holidays,
        }

    def require_time_fields(self) -> None:
        """Raise unless a timed request has a start, an end and a positive duration."""
        missing = [
            name for name, value in (
                ("startTime", self.start_time),
                ("endTime", self.end_time),
                ("duration", self.duration_minutes),
            ) if value is None
        ]
        if missing:
            raise RequestValidationError(
                f"Required fields are missing: {', '.join(missing)}", fields=missing
            )
        if self.duration_minutes is not None and self.duration_minutes <= 0:
            raise RequestValidationError("Duration must be a positive number of minutes", fields=["duration"])

    def validate(self, strict_time_range: bool = False) -> "ScheduleRequest":
        """Check cross-field rules; returns self so calls can be chained.

        With `strict_time_range`, a single-day timed request must end after
        it starts instead of being read as running past midnight.
        """
        if self.end_date < self.start_date:
            raise RequestValidationError(
                "End date must not be before the start date", fields=["startDate", "endDate"]
            )
        if self.full_day:
            return self
        self.require_time_fields()
        if strict_time_range and self.start_date == self.end_date:
            if self.start_time is not None and self.end_time is not None and self.start_time >= self.end_time:
                raise RequestValidationError(
                    "End time must be after the start time", fields=["startTime", "endTime"]
                )
        return self
