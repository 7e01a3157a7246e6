"""Tests for chouseisan/holidays.py lookup, caching and fail-open behavior."""

from __future__ import annotations

import datetime as _dt
import os
import threading
import unittest
from unittest.mock import patch

import requests

from chouseisan.constants import DEFAULT_HOLIDAYS_API_BASE_URL, HOLIDAYS_URL_ENV
from chouseisan.holidays import HolidayCache, HolidayResolver, is_weekend, parse_holiday_payload

from tests.fixtures import FakeResponse, FakeSession, connection_error, holidays_body


def _resolver(session, cache=None, base_url="https://holidays.test"):
    return HolidayResolver(cache=cache if cache is not None else HolidayCache(), session=session, base_url=base_url)


class TestParseHolidayPayload(unittest.TestCase):
    def test_holidays_key_shape(self):
        data = {"holidays": [{"date": "2024-01-01", "name": "元日"}, {"date": "2024-01-08"}]}
        self.assertEqual(parse_holiday_payload(data), {"2024-01-01", "2024-01-08"})

    def test_bare_array_of_objects_and_strings(self):
        self.assertEqual(parse_holiday_payload([{"date": "2024-01-01"}]), {"2024-01-01"})
        self.assertEqual(parse_holiday_payload(["2024-01-01", "2024-02-11"]), {"2024-01-01", "2024-02-11"})

    def test_object_keyed_by_date(self):
        data = {"2024-01-01": "元日", "2024-02-11": "建国記念の日"}
        self.assertEqual(parse_holiday_payload(data), {"2024-01-01", "2024-02-11"})

    def test_junk_entries_ignored(self):
        self.assertEqual(parse_holiday_payload([{"name": "x"}, "", 42, {"date": None}]), frozenset())

    def test_unexpected_type(self):
        with self.assertLogs("chouseisan.holidays", level="WARNING"):
            self.assertEqual(parse_holiday_payload("nope"), frozenset())


class TestHolidayResolver(unittest.TestCase):
    def test_fetches_year_url_with_timeout(self):
        session = FakeSession({2024: FakeResponse(holidays_body("2024-01-08"))})
        resolver = _resolver(session)
        self.assertTrue(resolver.is_holiday(_dt.date(2024, 1, 8)))
        self.assertFalse(resolver.is_holiday(_dt.date(2024, 1, 9)))
        self.assertEqual(session.urls(), ["https://holidays.test/2024"])
        self.assertEqual(session.calls[0]["timeout"], resolver.timeout)

    def test_cached_after_first_fetch(self):
        session = FakeSession({2024: FakeResponse(holidays_body("2024-01-08"))})
        resolver = _resolver(session)
        for _ in range(3):
            resolver.is_weekend_or_holiday(_dt.date(2024, 1, 8))
        self.assertEqual(len(session.calls), 1)

    def test_weekend_or_holiday(self):
        session = FakeSession({2024: FakeResponse(holidays_body("2024-01-08"))})
        resolver = _resolver(session)
        self.assertTrue(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 6)))   # Sat
        self.assertTrue(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 7)))   # Sun
        self.assertTrue(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 8)))   # holiday
        self.assertFalse(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 9)))

    def test_weekend_does_not_fetch(self):
        session = FakeSession()
        resolver = _resolver(session)
        self.assertTrue(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 6)))
        self.assertEqual(session.calls, [])

    def test_network_failure_fails_open(self):
        session = FakeSession({2024: connection_error()})
        resolver = _resolver(session)
        with self.assertLogs("chouseisan.holidays", level="WARNING") as logs:
            self.assertFalse(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 8)))
        self.assertIn("Holiday lookup failed for 2024", logs.output[0])
        self.assertTrue(resolver.is_weekend_or_holiday(_dt.date(2024, 1, 6)))

    def test_non_2xx_fails_open_and_is_cached(self):
        session = FakeSession({2024: FakeResponse({"error": "boom"}, status=503)})
        resolver = _resolver(session)
        with self.assertLogs("chouseisan.holidays", level="WARNING"):
            self.assertFalse(resolver.is_holiday(_dt.date(2024, 1, 8)))
        self.assertFalse(resolver.is_holiday(_dt.date(2024, 1, 9)))
        self.assertEqual(len(session.calls), 1)
        self.assertEqual(resolver.cache.get(2024), frozenset())

    def test_bad_json_fails_open(self):
        session = FakeSession({2024: FakeResponse(bad_json=True)})
        resolver = _resolver(session)
        with self.assertLogs("chouseisan.holidays", level="WARNING"):
            self.assertEqual(resolver.holidays_for_year(2024), frozenset())

    def test_seeded_cache_skips_network(self):
        cache = HolidayCache({2024: ["2024-01-08"]})
        session = FakeSession()
        resolver = _resolver(session, cache=cache)
        self.assertTrue(resolver.is_holiday(_dt.date(2024, 1, 8)))
        self.assertEqual(session.calls, [])

    def test_prefetch_fetches_each_year_once(self):
        session = FakeSession({
            2024: FakeResponse(holidays_body("2024-12-23")),
            2025: FakeResponse(holidays_body("2025-01-01")),
        })
        resolver = _resolver(session)
        resolver.prefetch([2024, 2025, 2024])
        resolver.prefetch([2025])
        self.assertEqual(sorted(session.urls()), ["https://holidays.test/2024", "https://holidays.test/2025"])
        self.assertTrue(resolver.is_holiday(_dt.date(2025, 1, 1)))
        self.assertEqual(len(session.calls), 2)

    def test_concurrent_lookups_share_one_fetch(self):
        session = FakeSession({2024: FakeResponse(holidays_body("2024-01-08"))}, delay=0.05)
        cache = HolidayCache()
        resolver = _resolver(session, cache=cache)
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(resolver.is_holiday(_dt.date(2024, 1, 8))))
            for _ in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(results, [True] * 8)
        self.assertEqual(len(session.calls), 1)
        self.assertEqual(cache.load_count, 1)

    def test_base_url_from_environment(self):
        with patch.dict(os.environ, {HOLIDAYS_URL_ENV: "http://mirror.local/api/"}):
            resolver = HolidayResolver(cache=HolidayCache(), session=FakeSession())
        self.assertEqual(resolver.base_url, "http://mirror.local/api")

    def test_default_base_url(self):
        with patch.dict(os.environ, {}, clear=True):
            resolver = HolidayResolver(cache=HolidayCache(), session=FakeSession())
        self.assertEqual(resolver.base_url, DEFAULT_HOLIDAYS_API_BASE_URL)

    def test_each_thread_gets_its_own_session(self):
        resolver = HolidayResolver(cache=HolidayCache(), base_url="https://holidays.test")
        main_session = resolver.session
        self.assertIs(resolver.session, main_session)
        seen = []
        worker = threading.Thread(target=lambda: seen.append(resolver.session))
        worker.start()
        worker.join()
        self.assertIsInstance(seen[0], requests.Session)
        self.assertIsNot(seen[0], main_session)

    def test_injected_session_is_shared(self):
        session = FakeSession()
        resolver = _resolver(session)
        seen = []
        worker = threading.Thread(target=lambda: seen.append(resolver.session))
        worker.start()
        worker.join()
        self.assertIs(seen[0], session)


class TestHolidayCache(unittest.TestCase):
    def test_loader_error_propagates_and_leaves_year_uncached(self):
        cache = HolidayCache()

        def loader(year):
            raise RuntimeError("down")

        with self.assertRaises(RuntimeError):
            cache.get_or_load(2024, loader)
        self.assertNotIn(2024, cache)
        self.assertEqual(cache.get_or_load(2024, lambda y: ["2024-01-01"]), {"2024-01-01"})

    def test_years_and_clear(self):
        cache = HolidayCache({2025: [], 2024: ["2024-01-01"]})
        self.assertEqual(cache.years(), [2024, 2025])
        self.assertEqual(len(cache), 2)
        cache.clear()
        self.assertEqual(len(cache), 0)


class TestIsWeekend(unittest.TestCase):
    def test_saturday_sunday(self):
        self.assertTrue(is_weekend(_dt.date(2024, 1, 6)))
        self.assertTrue(is_weekend(_dt.date(2024, 1, 7)))
        self.assertFalse(is_weekend(_dt.date(2024, 1, 5)))


if __name__ == "__main__":
    unittest.main()
