"""
Request Helper Tests
====================

Test Coverage:
1. parse_datetime_param - bare dates, end of day, full datetimes, junk
2. parse_int fallback

Run tests:
    python manage.py test apps.core.tests.test_utils
"""

from datetime import datetime, time, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase
from django.utils import timezone

from apps.core.utils import parse_datetime_param, parse_int


class ParseDatetimeParamTest(SimpleTestCase):

    def test_bare_date_start_of_day(self):
        parsed = parse_datetime_param('2025-01-31')

        self.assertEqual(parsed, timezone.make_aware(datetime(2025, 1, 31)))

    def test_bare_date_end_of_day(self):
        """
        Test: The same bare date parsed as a range start and a range end

        Expected: the end is the last instant of that local day, after the start
        """
        start = parse_datetime_param('2025-01-31')
        end = parse_datetime_param('2025-01-31', end_of_day=True)

        self.assertGreater(end, start)
        self.assertEqual(timezone.localtime(end).time(), time.max)
        self.assertEqual(end - start, timedelta(days=1) - timedelta(microseconds=1))

    def test_full_datetime_ignores_end_of_day(self):
        parsed = parse_datetime_param('2025-01-31T10:30:00+00:00', end_of_day=True)

        self.assertEqual(parsed, datetime(2025, 1, 31, 10, 30, tzinfo=dt_timezone.utc))

    def test_naive_datetime_is_local(self):
        parsed = parse_datetime_param('2025-01-31T10:30:00')

        self.assertEqual(parsed, timezone.make_aware(datetime(2025, 1, 31, 10, 30)))

    def test_invalid_values(self):
        self.assertIsNone(parse_datetime_param(''))
        self.assertIsNone(parse_datetime_param(None))
        self.assertIsNone(parse_datetime_param('yesterday'))
        self.assertIsNone(parse_datetime_param('2025-13-01'))


class ParseIntTest(SimpleTestCase):

    def test_fallback(self):
        self.assertEqual(parse_int('12', 1), 12)
        self.assertEqual(parse_int('abc', 1), 1)
        self.assertEqual(parse_int(None, 5), 5)
