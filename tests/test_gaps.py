"""
Unit tests for the same-day gap view.

Sessions are ordered by effective start time; gap_after is the number of
minutes between a session's end and the next session's start (None for the
last session of the day).
"""

import unittest

from tutorschedule.conflicts import get_sessions_with_gaps
from tutorschedule.model import Group, Session, Student

DATE = "2025-03-10"


def _student(sid: str, time: str, duration: int, status: str = "scheduled", date: str = DATE) -> Student:
    session = Session(id=f"{sid}1", date=date, time=time, duration=duration, status=status)
    return Student(id=sid, name=sid.upper(), sessions=[session])


class TestSessionsWithGaps(unittest.TestCase):
    def test_gap_after_first_session(self) -> None:
        # inserted out of order on purpose
        roster = [_student("b", "11:15", 60), _student("a", "10:00", 60)]
        rows = get_sessions_with_gaps(roster, DATE)
        self.assertEqual([r.owner.id for r in rows], ["a", "b"])
        self.assertEqual(rows[0].gap_after, 15)
        self.assertEqual(rows[0].gap_severity, "warning")
        self.assertIsNone(rows[1].gap_after)
        self.assertEqual(rows[1].gap_severity, "good")

    def test_close_neighbors_are_flagged(self) -> None:
        rows = get_sessions_with_gaps([_student("a", "10:00", 60), _student("b", "11:15", 60)], DATE)
        self.assertTrue(all(r.has_conflict for r in rows))
        self.assertEqual({r.conflict_type for r in rows}, {"close"})

    def test_clear_day(self) -> None:
        rows = get_sessions_with_gaps([_student("a", "09:00", 60), _student("b", "13:00", 60)], DATE)
        self.assertEqual(rows[0].gap_after, 180)
        self.assertEqual(rows[0].gap_severity, "good")
        self.assertFalse(any(r.has_conflict for r in rows))
        self.assertIsNone(rows[0].conflict_type)

    def test_overlap_with_non_adjacent_session(self) -> None:
        roster = [_student("x", "09:00", 180), _student("y", "10:00", 30), _student("z", "11:00", 30)]
        rows = get_sessions_with_gaps(roster, DATE)
        self.assertEqual([r.owner.id for r in rows], ["x", "y", "z"])
        self.assertEqual(rows[0].gap_after, -120)
        self.assertEqual(rows[0].gap_severity, "critical")
        # z only overlaps x, which is not its direct neighbour
        self.assertTrue(rows[2].has_conflict)
        self.assertEqual(rows[2].conflict_type, "partial")

    def test_same_start_keeps_roster_order(self) -> None:
        rows = get_sessions_with_gaps([_student("a", "10:00", 60), _student("b", "10:00", 60)], DATE)
        self.assertEqual([r.owner.id for r in rows], ["a", "b"])
        self.assertEqual([r.conflict_type for r in rows], ["exact", "exact"])

    def test_inactive_and_other_days_are_left_out(self) -> None:
        roster = [
            _student("a", "10:00", 60),
            _student("b", "10:00", 60, status="cancelled"),
            _student("c", "10:00", 60, status="vacation"),
            _student("d", "10:00", 60, date="2025-03-11"),
        ]
        rows = get_sessions_with_gaps(roster, DATE)
        self.assertEqual([r.owner.id for r in rows], ["a"])
        self.assertFalse(rows[0].has_conflict)

    def test_group_sessions_included(self) -> None:
        group = Group(id="g", name="Physics", sessions=[Session(id="g1", date=DATE, time="12:00", duration=60)])
        rows = get_sessions_with_gaps([_student("a", "10:00", 60)], DATE, groups=[group])
        self.assertEqual([r.session.id for r in rows], ["a1", "g1"])
        self.assertEqual(rows[0].gap_after, 60)

    def test_unpadded_date_finds_the_day(self) -> None:
        roster = [_student("a", "10:00", 60), _student("b", "11:15", 60)]
        rows = get_sessions_with_gaps(roster, "2025-3-10")
        self.assertEqual([r.session.id for r in rows], ["a1", "b1"])
        self.assertEqual(rows[0].gap_after, 15)

    def test_bad_date_gives_empty_list(self) -> None:
        roster = [_student("a", "10:00", 60)]
        self.assertEqual(get_sessions_with_gaps(roster, ""), [])
        self.assertEqual(get_sessions_with_gaps(roster, "tomorrow"), [])


if __name__ == "__main__":
    unittest.main()
