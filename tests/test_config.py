import json
import tempfile
import unittest
from pathlib import Path

from tutorschedule.config import Settings, load_settings


class TestSettings(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            settings = load_settings(Path(d) / "settings.json")
        self.assertEqual(settings, Settings())
        self.assertEqual(settings.default_session_duration, 60)
        self.assertEqual(settings.closeness_threshold, 30)

    def test_fields_are_read(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "settings.json"
            p.write_text(
                json.dumps(
                    {
                        "defaultSessionDuration": 45,
                        "workingHoursStart": "14:00",
                        "workingHoursEnd": "21:00",
                        "closenessThresholdMinutes": 15,
                    }
                ),
                encoding="utf-8",
            )
            settings = load_settings(p)
        self.assertEqual(settings, Settings(45, "14:00", "21:00", 15))

    def test_invalid_values_fall_back(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "settings.json"
            p.write_text(json.dumps({"defaultSessionDuration": -5, "workingHoursStart": 8}), encoding="utf-8")
            settings = load_settings(p)
        self.assertEqual(settings, Settings())

    def test_broken_json(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "settings.json"
            p.write_text("[1, 2", encoding="utf-8")
            with self.assertLogs("tutorschedule.config", level="WARNING"):
                settings = load_settings(p)
        self.assertEqual(settings, Settings())


if __name__ == "__main__":
    unittest.main()
