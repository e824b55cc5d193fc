"""
Tests for CLI entry points.

These tests focus on:
- Basic CLI argument validation (dates must be zero-padded YYYY-MM-DD)
- What the commands print (captured through a recording rich Console)
- The restore flow refusing on conflict unless --force, and saving the roster
  to a temporary file (to avoid touching real user data during tests)
"""

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from tutorschedule import cli
from tutorschedule.cli import main
from tutorschedule.model import Roster, ScheduleDay, Session, Student
from tutorschedule.storage import load_roster, save_roster

DATE = "2025-03-10"


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.roster_path = Path(self._tmp.name) / "roster.json"
        self.settings_path = Path(self._tmp.name) / "settings.json"
        roster = Roster(
            students=[
                Student(
                    id="a",
                    name="Ali",
                    schedule_days=[ScheduleDay(day_of_week=1, time="16:00", duration=60)],
                    sessions=[
                        Session(id="a1", date=DATE, time="16:00", duration=60),
                        Session(id="a2", date=DATE, time="17:15", duration=30),
                    ],
                ),
                Student(
                    id="b",
                    name="Bea",
                    sessions=[Session(id="b1", date=DATE, time="16:30", duration=60, status="cancelled")],
                ),
            ]
        )
        save_roster(roster, self.roster_path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> int:
        with self.assertRaises(SystemExit) as ctx:
            main(["--roster", str(self.roster_path), "--settings", str(self.settings_path), *argv])
        return ctx.exception.code

    def _output(self, *argv: str) -> tuple[int, str]:
        with mock.patch.object(cli, "console", Console(record=True, width=200)) as console:
            code = self._run(*argv)
        return code, console.export_text()

    def test_check_requires_valid_date(self) -> None:
        self.assertNotEqual(self._run("check", "", "16:00"), 0)

    def test_check_rejects_unpadded_date(self) -> None:
        self.assertNotEqual(self._run("check", "2025-3-10", "16:00"), 0)

    def test_check_names_the_clashing_student(self) -> None:
        code, out = self._output("check", DATE, "16:30", "--duration", "60")
        self.assertEqual(code, 0)
        self.assertIn("error", out)
        self.assertIn("Ali", out)
        self.assertIn("partial", out)
        # cancelled sessions never clash
        self.assertNotIn("Bea", out)

    def test_gaps_prints_gap_in_minutes(self) -> None:
        code, out = self._output("gaps", DATE)
        self.assertEqual(code, 0)
        self.assertIn("16:00-17:00", out)
        self.assertIn("15 min", out)

    def test_week_prints_day_advice(self) -> None:
        code, out = self._output("week", "--type", "online")
        self.assertEqual(code, 0)
        self.assertIn("Monday", out)
        self.assertIn("Recurring sessions: 1", out)
        self.assertIn("Best days: Sunday", out)

    def test_check_with_conflict_still_exits_zero(self) -> None:
        self.assertEqual(self._run("check", DATE, "16:30", "--duration", "60"), 0)

    def test_gaps_scan_and_slots(self) -> None:
        self.assertEqual(self._run("gaps", DATE), 0)
        self.assertEqual(self._run("scan"), 0)
        self.assertEqual(self._run("slots", DATE, "--suggest"), 0)
        self.assertNotEqual(self._run("slots", "10/03/2025"), 0)

    def test_restore_check_unknown_session(self) -> None:
        self.assertNotEqual(self._run("restore-check", "b", "missing"), 0)
        self.assertEqual(self._run("restore-check", "b", "b1"), 0)

    def test_restore_refuses_on_conflict(self) -> None:
        self.assertNotEqual(self._run("restore", "b", "b1"), 0)
        self.assertEqual(load_roster(self.roster_path).students[1].sessions[0].status, "cancelled")

    def test_restore_force_saves(self) -> None:
        self.assertEqual(self._run("restore", "b", "b1", "--force"), 0)
        session = load_roster(self.roster_path).students[1].sessions[0]
        self.assertEqual(session.status, "scheduled")
        self.assertEqual(session.history[-1].note, "restored")


if __name__ == "__main__":
    unittest.main()
