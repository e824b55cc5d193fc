import unittest

from tutorschedule.model import Group, Interval, Session, Student
from tutorschedule.timeutil import (
    format_time_12h,
    gap_between,
    is_valid_date,
    minutes_to_time,
    normalize_date,
    overlaps,
    resolve_effective_interval,
    time_period,
    time_to_minutes,
)


class TestTimeToMinutes(unittest.TestCase):
    def test_regular_time(self) -> None:
        self.assertEqual(time_to_minutes("16:30"), 990)
        self.assertEqual(time_to_minutes("00:00"), 0)

    def test_missing_minutes_default_to_zero(self) -> None:
        self.assertEqual(time_to_minutes("9"), 540)
        self.assertEqual(time_to_minutes("9:"), 540)

    def test_empty_or_garbage_uses_default(self) -> None:
        self.assertEqual(time_to_minutes(""), 960)
        self.assertEqual(time_to_minutes(None), 960)
        self.assertEqual(time_to_minutes("abc"), 960)
        self.assertEqual(time_to_minutes("", default="08:00"), 480)

    def test_minutes_to_time_wraps(self) -> None:
        self.assertEqual(minutes_to_time(990), "16:30")
        self.assertEqual(minutes_to_time(1440 + 5), "00:05")
        self.assertEqual(minutes_to_time(-30), "23:30")


class TestFormatting(unittest.TestCase):
    def test_12h(self) -> None:
        self.assertEqual(format_time_12h("16:30"), "4:30 PM")
        self.assertEqual(format_time_12h("00:15"), "12:15 AM")
        self.assertEqual(format_time_12h("12:00"), "12:00 PM")

    def test_period(self) -> None:
        self.assertEqual(time_period(time_to_minutes("09:00")), "morning")
        self.assertEqual(time_period(time_to_minutes("12:00")), "afternoon")
        self.assertEqual(time_period(time_to_minutes("17:00")), "evening")

    def test_valid_date(self) -> None:
        self.assertTrue(is_valid_date("2025-03-10"))
        self.assertFalse(is_valid_date("10.03.2025"))
        self.assertFalse(is_valid_date(""))
        self.assertFalse(is_valid_date(None))

    def test_valid_date_requires_zero_padding(self) -> None:
        self.assertFalse(is_valid_date("2025-3-10"))
        self.assertFalse(is_valid_date("2025-03-1"))
        self.assertFalse(is_valid_date("2025-02-30"))

    def test_normalize_date(self) -> None:
        self.assertEqual(normalize_date("2025-3-10"), "2025-03-10")
        self.assertEqual(normalize_date(" 2025-03-10 "), "2025-03-10")
        self.assertIsNone(normalize_date("2025-13-01"))
        self.assertIsNone(normalize_date(""))
        self.assertIsNone(normalize_date(None))


class TestIntervals(unittest.TestCase):
    def test_overlap_is_symmetric(self) -> None:
        pairs = [
            (Interval(600, 660), Interval(630, 690)),
            (Interval(600, 660), Interval(660, 720)),
            (Interval(600, 720), Interval(630, 640)),
            (Interval(600, 660), Interval(800, 860)),
        ]
        for a, b in pairs:
            self.assertEqual(overlaps(a, b), overlaps(b, a))

    def test_touching_does_not_overlap(self) -> None:
        self.assertFalse(overlaps(Interval(600, 660), Interval(660, 720)))

    def test_gap_between(self) -> None:
        # 10:00 for 60 min, next at 11:15 -> 15 min
        self.assertEqual(gap_between(Interval(600, 660), Interval(675, 735)), 15)
        self.assertEqual(gap_between(Interval(675, 735), Interval(600, 660)), 15)
        self.assertEqual(gap_between(Interval(600, 660), Interval(630, 690)), -30)


class TestEffectiveInterval(unittest.TestCase):
    def test_session_values_win(self) -> None:
        student = Student(id="s", name="S", session_time="10:00", session_duration=90)
        session = Session(id="x", date="2025-03-10", time="12:00", duration=45)
        self.assertEqual(resolve_effective_interval(session, student), Interval(720, 765))

    def test_owner_defaults(self) -> None:
        student = Student(id="s", name="S", session_time="10:00", session_duration=90)
        session = Session(id="x", date="2025-03-10")
        self.assertEqual(resolve_effective_interval(session, student), Interval(600, 690))

    def test_global_default_duration(self) -> None:
        group = Group(id="g", name="G", session_time="")
        session = Session(id="x", date="2025-03-10", duration=0)
        self.assertEqual(resolve_effective_interval(session, group, 45), Interval(960, 1005))


if __name__ == "__main__":
    unittest.main()
