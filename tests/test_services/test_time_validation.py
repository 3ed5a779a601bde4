import unittest
from datetime import date, time, timedelta
from decimal import Decimal

from shifttemplate.validation import (
    actual_duration_hours,
    crosses_midnight,
    is_night_shift,
    validate_window,
)

WEEKDAYS = (True, True, True, True, True, False, False)


def _validate(start, end, declared, **kw):
    args = dict(
        break_minutes=60,
        day_flags=WEEKDAYS,
        guards_per_shift=2,
        effective_from=date(2026, 1, 1),
    )
    args.update(kw)
    return validate_window(start, end, declared, **args)


class DurationAndNightTests(unittest.TestCase):
    def test_same_day_duration_is_end_minus_start(self):
        self.assertEqual(actual_duration_hours(time(8), time(17)), Decimal(9))
        self.assertEqual(actual_duration_hours(time(8, 15), time(8, 45)), Decimal("0.5"))

    def test_crossing_duration_wraps_midnight(self):
        self.assertTrue(crosses_midnight(time(22), time(6)))
        self.assertEqual(actual_duration_hours(time(22), time(6)), Decimal(8))
        self.assertEqual(actual_duration_hours(time(18, 30), time(2)), Decimal("7.5"))

    def test_equal_start_and_end_is_a_full_day(self):
        self.assertTrue(crosses_midnight(time(7), time(7)))
        self.assertEqual(actual_duration_hours(time(7), time(7)), Decimal(24))

    def test_night_classification(self):
        self.assertTrue(is_night_shift(time(22), time(6), True))
        self.assertFalse(is_night_shift(time(8), time(17), False))
        self.assertTrue(is_night_shift(time(0), time(5), False))
        # late evening that ends before 22:00 is a day shift
        self.assertFalse(is_night_shift(time(14), time(21, 59), False))
        # crosses midnight but ends after 06:00 and starts before 22:00
        self.assertFalse(is_night_shift(time(18), time(7), True))


class ValidateWindowTests(unittest.TestCase):
    def test_valid_day_shift(self):
        r = _validate(time(8), time(17), 9)
        self.assertTrue(r.is_valid, r.errors)
        self.assertFalse(r.crosses_midnight)
        self.assertFalse(r.is_night_shift)
        self.assertTrue(r.duration_matches)
        self.assertEqual(r.actual_duration_hours, Decimal(9))

    def test_tolerance_accepts_small_difference(self):
        # 08:00-16:03 is 8.05h
        r = _validate(time(8), time(16, 3), Decimal("8.0"))
        self.assertTrue(r.is_valid, r.errors)

    def test_tolerance_rejects_large_difference(self):
        # 08:00-16:12 is 8.2h
        r = _validate(time(8), time(16, 12), Decimal("8.0"))
        self.assertFalse(r.is_valid)
        self.assertFalse(r.duration_matches)
        self.assertTrue(any("Duration mismatch" in e for e in r.errors))

    def test_out_of_range_time_short_circuits(self):
        r = _validate(timedelta(hours=25), time(6), 5, day_flags=(False,) * 7, guards_per_shift=0)
        self.assertFalse(r.is_valid)
        self.assertEqual(len(r.errors), 1)
        self.assertIn("Invalid start time", r.errors[0])

    def test_negative_end_offset_is_rejected(self):
        r = _validate(time(8), timedelta(minutes=-5), 9)
        self.assertFalse(r.is_valid)
        self.assertIn("Invalid end time", r.errors[0])

    def test_crosses_midnight_flag_mismatch_is_only_a_warning(self):
        r = _validate(time(22), time(6), 8, declared_crosses_midnight=False)
        self.assertTrue(r.is_valid, r.errors)
        self.assertTrue(r.crosses_midnight)
        self.assertTrue(any("Crosses-midnight flag mismatch" in w for w in r.warnings))

    def test_too_short_shift(self):
        r = _validate(time(8), time(8, 30), Decimal("0.5"), break_minutes=0)
        self.assertFalse(r.is_valid)
        self.assertTrue(any("too short" in e for e in r.errors))

    def test_long_shift_warns(self):
        r = _validate(time(6), time(20), 14)
        self.assertTrue(r.is_valid, r.errors)
        self.assertTrue(any("exceeds recommended 12h" in w for w in r.warnings))

    def test_break_longer_than_shift_is_error(self):
        r = _validate(time(8), time(10), 2, break_minutes=180)
        self.assertFalse(r.is_valid)
        self.assertTrue(any("exceeds shift duration" in e for e in r.errors))

    def test_negative_break_is_error(self):
        r = _validate(time(8), time(10), 2, break_minutes=-1)
        self.assertFalse(r.is_valid)
        self.assertTrue(any("Cannot be negative" in e for e in r.errors))

    def test_missing_break_on_long_shift_warns(self):
        r = _validate(time(8), time(16), 8, break_minutes=0)
        self.assertTrue(r.is_valid, r.errors)
        self.assertTrue(any("no break time" in w for w in r.warnings))

    def test_no_days_selected(self):
        r = _validate(time(8), time(17), 9, day_flags=(False,) * 7)
        self.assertFalse(r.is_valid)
        self.assertTrue(any("No days of week selected" in e for e in r.errors))

    def test_guard_count_rules(self):
        r = _validate(time(8), time(17), 9, guards_per_shift=0)
        self.assertFalse(r.is_valid)
        r = _validate(time(8), time(17), 9, guards_per_shift=51)
        self.assertTrue(r.is_valid, r.errors)
        self.assertTrue(any("unusually high" in w for w in r.warnings))

    def test_effective_range_reversed(self):
        r = _validate(time(8), time(17), 9, effective_to=date(2025, 12, 31))
        self.assertFalse(r.is_valid)
        self.assertTrue(any("before effective from" in e for e in r.errors))

    def test_errors_accumulate(self):
        r = _validate(time(8), time(17), 5, day_flags=(False,) * 7, guards_per_shift=0)
        self.assertFalse(r.is_valid)
        self.assertEqual(len(r.errors), 3)


if __name__ == "__main__":
    unittest.main()
