# Copyright 2022 Brian T. Park
#
# MIT License

import datetime
import unittest

from tzoffsettools.data_types.tz_types import Cutoff
from tzoffsettools.data_types.tz_types import FixedDay
from tzoffsettools.data_types.tz_types import LastWeekday
from tzoffsettools.data_types.tz_types import MalformedRecordError
from tzoffsettools.data_types.tz_types import TimeOfDay
from tzoffsettools.data_types.tz_types import WeekdayOnOrAfter
from tzoffsettools.data_types.tz_types import add_comment
from tzoffsettools.data_types.tz_types import cutoff_to_dict
from tzoffsettools.data_types.tz_types import merge_comments


class TestTimeOfDay(unittest.TestCase):
    def test_to_seconds(self) -> None:
        self.assertEqual(0, TimeOfDay().to_seconds())
        self.assertEqual(9015, TimeOfDay(2, 30, 15).to_seconds())
        self.assertEqual(86400, TimeOfDay(24).to_seconds())

    def test_scale_ignored(self) -> None:
        self.assertFalse(TimeOfDay(2).scale_ignored)
        self.assertFalse(TimeOfDay(2, suffix='w').scale_ignored)
        self.assertTrue(TimeOfDay(2, suffix='s').scale_ignored)
        self.assertTrue(TimeOfDay(2, suffix='u').scale_ignored)


class TestCutoff(unittest.TestCase):
    def test_defaults(self) -> None:
        cutoff = Cutoff(1970)
        self.assertEqual(1, cutoff.month)
        self.assertEqual(FixedDay(1), cutoff.day)
        self.assertEqual(TimeOfDay(), cutoff.time)
        self.assertEqual(datetime.datetime(1970, 1, 1), cutoff.to_datetime())

    def test_fixed_day(self) -> None:
        cutoff = Cutoff(1883, 11, FixedDay(18), TimeOfDay(12, 9, 24))
        self.assertEqual(
            datetime.datetime(1883, 11, 18, 12, 9, 24), cutoff.to_datetime())
        self.assertEqual(cutoff.to_datetime(), cutoff.to_datetime(True))

    def test_weekday_selectors_are_approximated(self) -> None:
        self.assertEqual(
            datetime.datetime(2022, 3, 1, 2),
            Cutoff(2022, 3, LastWeekday(0), TimeOfDay(2)).to_datetime())
        self.assertEqual(
            datetime.datetime(2022, 3, 8, 2),
            Cutoff(2022, 3, WeekdayOnOrAfter(0, 8), TimeOfDay(2))
            .to_datetime())

    def test_exact_weekdays(self) -> None:
        # 2022-03-31 is a Thursday.
        self.assertEqual(
            datetime.date(2022, 3, 27),
            Cutoff(2022, 3, LastWeekday(0)).day_of_month(True))
        self.assertEqual(
            datetime.date(2022, 3, 31),
            Cutoff(2022, 3, LastWeekday(4)).day_of_month(True))
        self.assertEqual(
            datetime.date(2022, 3, 13),
            Cutoff(2022, 3, WeekdayOnOrAfter(0, 8)).day_of_month(True))
        self.assertEqual(
            datetime.date(2022, 3, 8),
            Cutoff(2022, 3, WeekdayOnOrAfter(2, 8)).day_of_month(True))
        self.assertEqual(
            datetime.date(2022, 2, 28),
            Cutoff(2022, 2, LastWeekday(1)).day_of_month(True))

    def test_exact_weekday_crosses_month(self) -> None:
        # 2022-03-29 is a Tuesday, the next Sunday is in April.
        self.assertEqual(
            datetime.datetime(2022, 4, 3),
            Cutoff(2022, 3, WeekdayOnOrAfter(0, 29)).to_datetime(True))

    def test_hour_24_rolls_over(self) -> None:
        self.assertEqual(
            datetime.datetime(1971, 1, 1),
            Cutoff(1970, 12, FixedDay(31), TimeOfDay(24)).to_datetime())
        self.assertEqual(
            datetime.datetime(1971, 1, 1, 1, 30),
            Cutoff(1970, 12, FixedDay(31), TimeOfDay(25, 30)).to_datetime())

    def test_ordering_by_datetime(self) -> None:
        earlier = Cutoff(1970, 1, FixedDay(1), TimeOfDay(24))
        later = Cutoff(1970, 1, FixedDay(2), TimeOfDay(0, 0, 1))
        self.assertLess(earlier.to_datetime(), later.to_datetime())

    def test_cutoff_to_dict(self) -> None:
        self.assertIsNone(cutoff_to_dict(None))
        self.assertEqual(
            {
                'year': 1996,
                'month': 10,
                'day': {'kind': 'last_weekday', 'weekday': 0},
                'time': {'hour': 0, 'minute': 0, 'second': 0, 'suffix': ''},
            },
            cutoff_to_dict(Cutoff(1996, 10, LastWeekday(0))))
        self.assertEqual(
            {'kind': 'weekday_on_or_after', 'weekday': 0, 'day': 8},
            cutoff_to_dict(Cutoff(2007, 3, WeekdayOnOrAfter(0, 8)))['day'])
        self.assertEqual(
            {'kind': 'fixed', 'day': 18},
            cutoff_to_dict(Cutoff(1883, 11, FixedDay(18)))['day'])


class TestErrors(unittest.TestCase):
    def test_malformed_record_error_location(self) -> None:
        e = MalformedRecordError('Invalid Link line', 'backward', 12)
        self.assertEqual('backward:12: Invalid Link line', str(e))
        self.assertEqual('backward', e.source)
        self.assertEqual(12, e.line_number)

        e = MalformedRecordError('Invalid Link line')
        self.assertEqual('Invalid Link line', str(e))
        self.assertIsNone(e.source)


class TestComments(unittest.TestCase):
    def test_add_and_merge(self) -> None:
        comments: dict = {}
        add_comment(comments, 'A', 'one')
        add_comment(comments, 'A', 'one')
        add_comment(comments, 'A', 'two')
        self.assertEqual({'A': {'one', 'two'}}, comments)

        target: dict = {}
        merge_comments(target, comments)
        merge_comments(target, {'B': {'three'}})
        self.assertEqual({'A': {'one', 'two'}, 'B': {'three'}}, target)


if __name__ == '__main__':
    unittest.main()
