"""chouseisan CLI

Builds the candidate-date text for a chouseisan (調整さん) event:

  # Two 1-hour slots on one day
  python -m chouseisan generate --start-date 2024-01-05 --end-date 2024-01-05 \
    --start-time 10:00 --end-time 12:00 --duration 60

  # Weekdays only, full-day candidates, from a YAML request file
  python -m chouseisan generate --request event.yaml --full-day --exclude-holidays

  # Fill a saved form state and report like the page would
  python -m chouseisan submit --request event.yaml --form form.yaml --write

Request files use the side panel's field names (eventTitle, startDate,
endDate, startTime, endTime, duration, fullDay, excludeHolidays, overwrite,
memo) or their snake_case forms. Flags override file values.
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .cli_errors import UsageError
from .cli_framework import CLIApp
from .clock import Clock, SystemClock, default_request_fields
from .constants import DURATION_OPTIONS, WEEKDAY_LABELS
from .form import FormState
from .generator import ScheduleGenerator
from .holidays import HolidayResolver
from .model import ScheduleRequest, parse_time
from .pipeline import (
    GenerateProcessor,
    GenerateProducer,
    GenerateRequest,
    SubmitProcessor,
    SubmitProducer,
    SubmitRequest,
    run_pipeline,
)
from .slots import available_durations, pick_duration
from .yamlio import load_mapping

# Replaced in tests to pin "today"
clock: Clock = SystemClock()

# Flag dest -> request field
_FLAG_FIELDS = {
    "title": "eventTitle",
    "memo": "memo",
    "start_date": "startDate",
    "end_date": "endDate",
    "start_time": "startTime",
    "end_time": "endTime",
    "duration": "duration",
    "full_day": "fullDay",
    "exclude_holidays": "excludeHolidays",
    "overwrite": "overwrite",
}


app = CLIApp(
    "chouseisan",
    "Generate chouseisan candidate dates from a date range and time window.",
    version=__version__,
)


def _request_arguments(func):
    """Attach the shared request flags (applied bottom-up before @command)."""
    decorators = [
        app.argument("--request", help="YAML request file (flags override its values)"),
        app.argument("--title", help="Event title"),
        app.argument("--memo", help="Event memo"),
        app.argument("--start-date", help="First day (YYYY-MM-DD)"),
        app.argument("--end-date", help="Last day (YYYY-MM-DD, inclusive)"),
        app.argument("--start-time", help="Daily window start (HH:MM)"),
        app.argument("--end-time", help="Daily window end (HH:MM; at or before start = next day)"),
        app.argument("--duration", type=int, help="Slot length in minutes"),
        app.argument("--full-day", action="store_true", default=None, help="One line per day, no time slots"),
        app.argument("--exclude-holidays", action="store_true", default=None, help="Skip weekends and Japanese holidays"),
        app.argument("--overwrite", action="store_true", default=None, help="Replace existing candidates instead of appending"),
        app.argument("--weekdays", choices=sorted(WEEKDAY_LABELS), default="ja", help="Weekday labels (default ja)"),
        app.argument("--holidays-url", help="Holiday API base URL (default $CHOUSEISAN_HOLIDAYS_URL or holidays-jp)"),
    ]
    for deco in reversed(decorators):
        func = deco(func)
    return func


def _request_data(args: argparse.Namespace) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    path = getattr(args, "request", None)
    if path:
        data.update(load_mapping(path, what="request"))
    for dest, key in _FLAG_FIELDS.items():
        value = getattr(args, dest, None)
        if value is not None:
            data[key] = value
    return data


def _build_generator(args: argparse.Namespace) -> ScheduleGenerator:
    resolver = HolidayResolver(base_url=getattr(args, "holidays_url", None))
    weekdays = WEEKDAY_LABELS[getattr(args, "weekdays", None) or "ja"]
    return ScheduleGenerator(resolver=resolver, weekdays=weekdays)


def _read_text(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    p = Path(path)
    if not p.exists():
        return None
    return p.read_text(encoding="utf-8").rstrip("\n")


@app.command("generate", help="Print candidate lines for a request")
@_request_arguments
@app.argument("--existing", help="Text file with candidates already on the form (appended to unless --overwrite)")
@app.argument("--out", help="Write the candidate text to this file instead of stdout")
@app.argument("--strict", action="store_true", help="Reject single-day windows whose end is not after the start")
def cmd_generate(args: argparse.Namespace) -> int:
    data = _request_data(args)
    # The title is not part of the candidate text
    if not data.get("eventTitle") and not data.get("event_title") and not data.get("title"):
        data["eventTitle"] = "untitled"
    request = ScheduleRequest.from_dict(data)
    out = getattr(args, "out", None)
    payload = GenerateRequest(
        request=request,
        existing=_read_text(getattr(args, "existing", None)),
        out_path=Path(out) if out else None,
        strict_time_range=bool(getattr(args, "strict", False)),
    )
    return run_pipeline(payload, GenerateProcessor(_build_generator(args)), GenerateProducer(args._output))


@app.command("submit", help="Fill a chouseisan form state and print the page response")
@_request_arguments
@app.argument("--form", help="YAML form state with name/comment/kouho keys (omitted key = field missing)")
@app.argument("--write", action="store_true", help="Save the filled form back to --form (or --form-out)")
@app.argument("--form-out", help="Where to save the filled form")
def cmd_submit(args: argparse.Namespace) -> int:
    form_path = getattr(args, "form", None)
    if form_path:
        form = FormState.from_dict(load_mapping(form_path, what="form"))
    else:
        form = FormState(name="", comment="", kouho="")
    form_out = getattr(args, "form_out", None) or (form_path if getattr(args, "write", False) else None)
    if getattr(args, "write", False) and not form_out:
        raise UsageError("--write needs --form or --form-out")
    payload = SubmitRequest(
        data=_request_data(args),
        form=form,
        form_out=Path(form_out) if form_out else None,
    )
    return run_pipeline(payload, SubmitProcessor(_build_generator(args)), SubmitProducer(args._output))


@app.command("holidays", help="List a year's Japanese holidays")
@app.argument("--year", type=int, help="Year (default: current year)")
@app.argument("--holidays-url", help="Holiday API base URL")
def cmd_holidays(args: argparse.Namespace) -> int:
    year = getattr(args, "year", None) or clock.now().year
    resolver = HolidayResolver(base_url=getattr(args, "holidays_url", None))
    dates = sorted(resolver.holidays_for_year(year))
    out = args._output
    if not dates:
        out.print(f"No holidays found for {year}.")
    out.print_lines(dates)
    return 0


@app.command("durations", help="List slot durations that fit a time window")
@app.argument("--start-time", help="Window start (HH:MM)")
@app.argument("--end-time", help="Window end (HH:MM)")
@app.argument("--current", type=int, help="Currently selected duration (minutes)")
def cmd_durations(args: argparse.Namespace) -> int:
    start = getattr(args, "start_time", None)
    end = getattr(args, "end_time", None)
    try:
        if start:
            parse_time(start)
        if end:
            parse_time(end)
    except ValueError as exc:
        raise UsageError(str(exc)) from exc
    available = available_durations(start, end)
    selected = pick_duration(getattr(args, "current", None), available)
    out = args._output
    if out.structured:
        out.print_data({"available": available, "selected": selected})
        return 0
    lines: List[str] = []
    for minutes in available:
        marker = " *" if minutes == selected else ""
        lines.append(f"{minutes}\t{DURATION_OPTIONS.get(minutes, '')}{marker}")
    if not lines:
        out.print("No duration fits the window.")
    out.print_lines(lines)
    return 0


@app.command("defaults", help="Print the default request a fresh form starts with")
def cmd_defaults(args: argparse.Namespace) -> int:
    fields = default_request_fields(clock)
    out = args._output
    if out.structured:
        out.print_data(fields)
    else:
        out.print_lines([f"{k}: {v}" for k, v in fields.items()])
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI."""
    return app.run(argv)


if __name__ == "__main__":
    raise SystemExit(main())
