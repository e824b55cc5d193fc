"""
Unit tests for the roster snapshot storage.

Storage contract:
- Missing/invalid file -> empty roster
- Malformed entries are skipped, the rest still loads
- JSON schema: {"students": [...], "groups": [...]} with camelCase keys
"""

import json
import tempfile
import unittest
from pathlib import Path

from tutorschedule.model import CancellationPolicy, Group, Roster, ScheduleDay, Session, Student
from tutorschedule.storage import load_roster, save_roster


class TestStorage(unittest.TestCase):
    def test_load_missing_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            roster = load_roster(Path(d) / "missing.json")
            self.assertEqual(roster, Roster())

    def test_load_corrupt_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "roster.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_roster(p), Roster())

    def test_camel_case_fields_and_defaults(self) -> None:
        data = {
            "students": [
                {
                    "id": "s1",
                    "name": "Sara",
                    "sessionDuration": 90,
                    "sessionType": "online",
                    "scheduleDays": [{"dayOfWeek": 1}, {"dayOfWeek": 9}],
                    "cancellationPolicy": {"monthlyLimit": 2},
                    "sessions": [
                        {"id": "x1", "date": "2025-03-10", "status": "completed"},
                        {"id": "x2", "date": "2025-03-11", "status": "weird"},
                        {"date": "2025-03-12"},
                    ],
                },
                "garbage",
            ],
            "groups": [{"id": "g1", "name": "Math", "sessionTime": "18:00"}],
        }
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "roster.json"
            p.write_text(json.dumps(data), encoding="utf-8")
            roster = load_roster(p)

        self.assertEqual(len(roster.students), 1)
        s = roster.students[0]
        self.assertEqual(s.session_time, "16:00")
        self.assertEqual(s.session_duration, 90)
        self.assertEqual(s.session_type, "online")
        self.assertEqual(s.schedule_days, [ScheduleDay(day_of_week=1)])
        self.assertEqual(s.cancellation_policy, CancellationPolicy(monthly_limit=2))
        self.assertEqual([x.id for x in s.sessions], ["x1", "x2"])
        self.assertEqual(s.sessions[0].status, "completed")
        # unknown status falls back to scheduled
        self.assertEqual(s.sessions[1].status, "scheduled")
        self.assertEqual(roster.groups[0].session_time, "18:00")

    def test_save_and_load_roundtrip(self) -> None:
        roster = Roster(
            students=[
                Student(
                    id="s1",
                    name="Sara",
                    session_time="17:00",
                    sessions=[Session(id="x1", date="2025-03-10", time="17:30", duration=45, status="vacation")],
                )
            ],
            groups=[Group(id="g1", name="Math", sessions=[Session(id="g1-1", date="2025-03-10")])],
        )
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "roster.json"
            save_roster(roster, p)
            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["students"][0]["sessionTime"], "17:00")
            self.assertNotIn("phone", data["students"][0])
            self.assertEqual(load_roster(p), roster)


if __name__ == "__main__":
    unittest.main()
