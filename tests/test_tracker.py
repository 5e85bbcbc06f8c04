import tempfile
import unittest
from datetime import date
from pathlib import Path

from daily_log import LogStore
from errors import StorageError
from ledger import CycleRecord
from storage import CsvStore
from tracker import PeriodTracker


class MemoryStore:
    """In-memory stand-in for CsvStore."""

    def __init__(self, records=(), logs=None, fail_save=False):
        self.records = list(records)
        self.logs = logs or LogStore()
        self.fail_save = fail_save
        self.saved = None

    def load(self):
        return list(self.records), self.logs

    def save(self, records, logs):
        if self.fail_save:
            raise StorageError("disk full")
        self.saved = (list(records), logs)


def spacings(tracker):
    return [(r.start_date.isoformat(), r.spacing_days) for r in tracker.cycles()]


class TestPeriodTracker(unittest.TestCase):
    def test_add_delete_undo_scenario(self) -> None:
        t = PeriodTracker()
        self.assertTrue(t.add_cycle("2024-01-01", "2024-01-05").ok)
        self.assertEqual(spacings(t), [("2024-01-01", 0)])
        self.assertTrue(t.add_cycle("2024-01-29", "2024-02-02").ok)
        self.assertEqual(spacings(t), [("2024-01-01", 0), ("2024-01-29", 28)])
        self.assertTrue(t.delete_cycle("2024-01-01").ok)
        self.assertEqual(len(t.cycles()), 1)
        outcome = t.undo()
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.message, "Undo: restored cycle starting 2024-01-01")
        self.assertEqual(spacings(t), [("2024-01-01", 0), ("2024-01-29", 28)])

    def test_errors_are_reported_not_raised(self) -> None:
        t = PeriodTracker()
        with self.assertLogs("tracker", level="WARNING"):
            self.assertFalse(t.add_cycle("2024-01-05", "2024-01-01").ok)
            self.assertFalse(t.add_cycle("not a date", "2024-01-01").ok)
            self.assertFalse(t.delete_cycle("2024-01-01").ok)
            self.assertFalse(t.undo().ok)
            self.assertFalse(t.redo().ok)
            self.assertFalse(t.add_reminder("2024-99-01", "x").ok)
        self.assertEqual(t.cycles(), [])

    def test_insert_undo_insert_clears_redo(self) -> None:
        t = PeriodTracker()
        t.add_cycle("2024-01-01", "2024-01-05")
        t.undo()
        t.add_cycle("2024-02-01", "2024-02-05")
        outcome = t.redo()
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, "nothing to redo")

    def test_redo_messages(self) -> None:
        t = PeriodTracker()
        t.add_cycle("2024-01-01", "2024-01-05")
        t.undo()
        self.assertEqual(t.redo().message, "Redo: restored cycle starting 2024-01-01")
        t.delete_cycle("2024-01-01")
        t.undo()
        self.assertEqual(t.redo().message, "Redo: removed cycle starting 2024-01-01")

    def test_derived_reminder_follows_every_mutation(self) -> None:
        t = PeriodTracker()
        today = date(2024, 1, 1)

        def derived():
            return [r.message for r, _ in t.upcoming_reminders(today) if r.message.startswith("Predicted")]

        t.add_cycle("2024-01-01", "2024-01-05")
        self.assertEqual(derived(), ["Predicted next period: 2024-01-29"])
        t.add_cycle("2024-01-31", "2024-02-03")
        self.assertEqual(derived(), ["Predicted next period: 2024-03-01"])
        t.undo()
        self.assertEqual(derived(), ["Predicted next period: 2024-01-29"])
        t.redo()
        self.assertEqual(derived(), ["Predicted next period: 2024-03-01"])
        t.delete_cycle("2024-01-31")
        t.delete_cycle("2024-01-01")
        self.assertEqual(derived(), [])

    def test_upcoming_reminders_include_days_left(self) -> None:
        t = PeriodTracker(settings={"reminder_limit": 2})
        t.add_reminder("2024-01-10", "pharmacy")
        t.add_reminder("2024-01-01", "today")
        t.add_reminder("2023-12-31", "yesterday")
        t.add_reminder("2024-02-01", "later")
        upcoming = t.upcoming_reminders(date(2024, 1, 1))
        self.assertEqual([(r.message, d) for r, d in upcoming], [("today", 0), ("pharmacy", 9)])

    def test_prediction(self) -> None:
        t = PeriodTracker(settings={"cycle_length": 30})
        self.assertIsNone(t.prediction())
        t.add_cycle("2024-01-01", "2024-01-05")
        pred = t.prediction(today=date(2024, 1, 21))
        self.assertEqual(pred, {"average_spacing": 30, "predicted": date(2024, 1, 31), "days_until": 10})

    def test_log_day_merges(self) -> None:
        t = PeriodTracker()
        t.log_day("2024-01-02", "cramps", "tired")
        t.log_day("2024-01-02", "headache", "")
        t.log_day("2024-01-01", "", "fine")
        entries = t.daily_logs()
        self.assertEqual([e.day for e in entries], [date(2024, 1, 1), date(2024, 1, 2)])
        self.assertEqual(entries[1].symptoms, "cramps; headache")
        self.assertEqual(entries[1].mood, "tired")

    def test_load_and_save(self) -> None:
        stored = [
            CycleRecord(date(2024, 1, 29), date(2024, 2, 2), 4, 28),
            CycleRecord(date(2024, 1, 1), date(2024, 1, 5), 4, 0),
        ]
        store = MemoryStore(stored)
        t = PeriodTracker(store)
        self.assertTrue(t.load().ok)
        self.assertEqual(spacings(t), [("2024-01-01", 0), ("2024-01-29", 28)])
        self.assertIsNotNone(t.reminders.derived)
        self.assertFalse(t.undo().ok)
        self.assertTrue(t.save().ok)
        self.assertEqual(store.saved[0], stored)

    def test_failed_save_keeps_state(self) -> None:
        t = PeriodTracker(MemoryStore(fail_save=True))
        t.add_cycle("2024-01-01", "2024-01-05")
        with self.assertLogs("tracker", level="WARNING"):
            outcome = t.save()
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, "disk full")
        self.assertEqual(len(t.cycles()), 1)
        self.assertTrue(t.undo().ok)

    def test_bad_settings_fall_back_to_defaults(self) -> None:
        with self.assertLogs("storage", level="WARNING"):
            t = PeriodTracker(settings={"cycle_length": "x", "reminder_message": "{when}"})
        self.assertTrue(t.add_cycle("2024-01-01", "2024-01-05").ok)
        self.assertEqual(t.reminders.derived.message, "Predicted next period: 2024-01-29")

    def test_load_with_undecodable_bytes(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            (Path(d) / "cycles.csv").write_bytes(b"2024-01-01,2024-01-05,4,0\n\xff\xfe,bad,1,1\n")
            t = PeriodTracker(CsvStore(Path(d)))
            with self.assertLogs("storage", level="WARNING"):
                outcome = t.load()
        self.assertTrue(outcome.ok)
        self.assertEqual(spacings(t), [("2024-01-01", 0)])

    def test_without_store(self) -> None:
        t = PeriodTracker()
        self.assertFalse(t.load().ok)
        self.assertFalse(t.save().ok)


if __name__ == "__main__":
    unittest.main()
