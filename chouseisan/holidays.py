"""Japanese holiday lookup with a process-lifetime, per-year cache.

Holiday sets are fetched once per year from a JSON endpoint
(`{base_url}/{year}`) and kept for the life of the process: a year's
calendar does not change, so there is no TTL or eviction. Lookup failures
fail open: the year is cached as having no holidays, the problem is logged,
and weekend detection keeps working.
"""

from __future__ import annotations

import datetime as _dt
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

import requests

from .cli_errors import HolidayLookupError
from .constants import DEFAULT_REQUEST_TIMEOUT, MAX_HOLIDAY_WORKERS, holidays_api_base_url
from .formatting import format_iso_date

LOG = logging.getLogger(__name__)

HolidaySet = FrozenSet[str]


class HolidayCache:
    """Thread-safe year -> holiday-set store with fetch-once loading.

    Concurrent `get_or_load` calls for the same year share one load: the
    first caller runs the loader while the others wait on that year's lock
    and then read the stored result. Different years load independently.

    Usage:
        cache = HolidayCache({2024: ["2024-01-01"]})  # pre-seeded for tests
        dates = cache.get_or_load(2025, loader)
    """

    def __init__(self, seed: Optional[Mapping[int, Iterable[str]]] = None) -> None:
        self._data: Dict[int, HolidaySet] = {}
        self._lock = threading.Lock()
        self._year_locks: Dict[int, threading.Lock] = {}
        self.load_count = 0
        for year, dates in (seed or {}).items():
            self.put(year, dates)

    def _year_lock(self, year: int) -> threading.Lock:
        with self._lock:
            lock = self._year_locks.get(year)
            if lock is None:
                lock = self._year_locks[year] = threading.Lock()
            return lock

    def get(self, year: int) -> Optional[HolidaySet]:
        with self._lock:
            return self._data.get(year)

    def put(self, year: int, dates: Iterable[str]) -> HolidaySet:
        frozen = frozenset(dates)
        with self._lock:
            self._data[year] = frozen
        return frozen

    def get_or_load(self, year: int, loader: Callable[[int], Iterable[str]]) -> HolidaySet:
        """Return the cached set for `year`, running `loader` at most once.

        Exceptions from the loader propagate and leave the year uncached.
        """
        cached = self.get(year)
        if cached is not None:
            return cached
        with self._year_lock(year):
            cached = self.get(year)
            if cached is not None:
                return cached
            with self._lock:
                self.load_count += 1
            return self.put(year, loader(year))

    def years(self) -> List[int]:
        with self._lock:
            return sorted(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, year: object) -> bool:
        with self._lock:
            return year in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


_DEFAULT_CACHE = HolidayCache()


def default_cache() -> HolidayCache:
    """The process-wide cache shared by resolvers built without one."""
    return _DEFAULT_CACHE


def parse_holiday_payload(data: Any) -> HolidaySet:
    """Extract ISO date strings from a holiday API response.

    Accepted shapes:
        {"holidays": [{"date": "2024-01-01", "name": "元日"}, ...]}
        [{"date": "2024-01-01"}, ...] or ["2024-01-01", ...]
        {"2024-01-01": "元日", ...}
    Anything else yields an empty set.
    """
    items: Iterable[Any]
    if isinstance(data, Mapping) and isinstance(data.get("holidays"), list):
        items = data["holidays"]
    elif isinstance(data, list):
        items = data
    elif isinstance(data, Mapping):
        items = data.keys()
    else:
        LOG.warning("Unexpected holiday response type: %s", type(data).__name__)
        return frozenset()

    out = set()
    for item in items:
        value = item.get("date") if isinstance(item, Mapping) else item
        if isinstance(value, str) and value.strip():
            out.add(value.strip())
    return frozenset(out)


def is_weekend(d: _dt.date) -> bool:
    """True for Saturday and Sunday."""
    return d.weekday() >= 5


class HolidayResolver:
    """Classifies dates as weekend/holiday using cached per-year lookups.

    Args:
        cache: Holiday store; defaults to the process-wide cache.
        session: `requests.Session` (or compatible fake) shared by every fetch,
            including concurrent `prefetch` workers, so it must be safe to
            call from several threads. Without one, each thread gets its own
            `requests.Session`.
        base_url: Endpoint root; defaults to `CHOUSEISAN_HOLIDAYS_URL` or the
            public holidays-jp API.
        timeout: `(connect, read)` seconds passed to each request.
    """

    def __init__(
        self,
        cache: Optional[HolidayCache] = None,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: Tuple[int, int] = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.cache = cache if cache is not None else default_cache()
        self._shared_session = session
        self._local = threading.local()
        self.base_url = (base_url or holidays_api_base_url()).rstrip("/")
        self.timeout = timeout

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def _fetch_year(self, year: int) -> HolidaySet:
        url = f"{self.base_url}/{year}"
        LOG.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HolidayLookupError(year, str(exc)) from exc
        if not 200 <= resp.status_code < 300:
            raise HolidayLookupError(year, f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise HolidayLookupError(year, "invalid JSON") from exc
        return parse_holiday_payload(data)

    def _load_year(self, year: int) -> HolidaySet:
        try:
            holidays = self._fetch_year(year)
        except HolidayLookupError as exc:
            # Cached as empty so a failing year is not re-requested
            LOG.warning("%s; treating %d as having no holidays", exc, year)
            return frozenset()
        LOG.debug("Loaded %d holidays for %d", len(holidays), year)
        return holidays

    def holidays_for_year(self, year: int) -> HolidaySet:
        """ISO dates of the year's holidays; empty if the lookup failed."""
        return self.cache.get_or_load(year, self._load_year)

    def is_holiday(self, d: _dt.date) -> bool:
        return format_iso_date(d) in self.holidays_for_year(d.year)

    def is_weekend_or_holiday(self, d: _dt.date) -> bool:
        return is_weekend(d) or self.is_holiday(d)

    def prefetch(self, years: Iterable[int]) -> None:
        """Warm the cache for several years, fetching them concurrently."""
        pending = sorted({y for y in years if y not in self.cache})
        if not pending:
            return
        if len(pending) == 1:
            self.holidays_for_year(pending[0])
            return
        workers = min(MAX_HOLIDAY_WORKERS, len(pending))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="holidays") as pool:
            list(pool.map(self.holidays_for_year, pending))
