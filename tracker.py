"""Period tracker session

Ties the ledger, undo/redo history, reminders and daily log together. Every
user action returns an Outcome instead of raising, so a failed action is
reported and the session carries on.
"""
from __future__ import annotations
from datetime import date
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from daily_log import DailyLog, LogStore
from errors import TrackerError
from history import ActionKind, History
from ledger import CycleRecord, Ledger
from models import cycle_summary, days_until, instant_to_iso, iso, predict_next, to_date, to_instant
from reminders import Reminder, ReminderScheduler
from storage import normalize_settings

log = logging.getLogger(__name__)


class Outcome(NamedTuple):
    ok: bool
    message: str


class PeriodTracker:
    def __init__(self, store=None, settings: Optional[Dict[str, Any]] = None):
        self.store = store
        self.settings = normalize_settings(settings or {})
        self.ledger = Ledger(int(self.settings["cycle_length"]))
        self.history = History()
        self.reminders = ReminderScheduler(self.settings["reminder_message"])
        self.logs = LogStore()

    def _mutated(self) -> None:
        self.reminders.rebuild_derived(self.ledger)

    def _fail(self, exc: TrackerError) -> Outcome:
        log.warning("%s: %s", type(exc).__name__, exc)
        return Outcome(False, str(exc))

    # --- persistence ---

    def load(self) -> Outcome:
        if self.store is None:
            return Outcome(False, "no storage configured")
        try:
            records, logs = self.store.load()
        except TrackerError as exc:
            return self._fail(exc)
        self.ledger = Ledger.from_records(records, self.ledger.default_spacing)
        self.logs = logs
        self.history.clear()
        self._mutated()
        return Outcome(True, f"Loaded {len(self.ledger)} cycle(s).")

    def save(self) -> Outcome:
        if self.store is None:
            return Outcome(False, "no storage configured")
        try:
            self.store.save(list(self.ledger), self.logs)
        except TrackerError as exc:
            return self._fail(exc)
        return Outcome(True, "Data saved.")

    # --- ledger edits ---

    def add_cycle(self, start, end) -> Outcome:
        try:
            record = CycleRecord.from_range(to_date(start), to_date(end))
            stored = self.ledger.insert(record)
        except TrackerError as exc:
            return self._fail(exc)
        self.history.record_add(stored)
        self._mutated()
        log.info("recorded cycle %s -> %s", iso(stored.start_date), iso(stored.end_date))
        return Outcome(True, f"Cycle recorded: {iso(stored.start_date)} -> {iso(stored.end_date)} "
                             f"({stored.duration_days} days)")

    def delete_cycle(self, start) -> Outcome:
        try:
            removed = self.ledger.delete_by_start(to_date(start))
        except TrackerError as exc:
            return self._fail(exc)
        self.history.record_delete(removed)
        self._mutated()
        log.info("deleted cycle starting %s", iso(removed.start_date))
        return Outcome(True, f"Deleted cycle starting {iso(removed.start_date)}")

    def undo(self) -> Outcome:
        try:
            action = self.history.undo(self.ledger)
        except TrackerError as exc:
            return self._fail(exc)
        self._mutated()
        verb = "removed" if action.kind is ActionKind.ADD else "restored"
        return Outcome(True, f"Undo: {verb} cycle starting {iso(action.record.start_date)}")

    def redo(self) -> Outcome:
        try:
            action = self.history.redo(self.ledger)
        except TrackerError as exc:
            return self._fail(exc)
        self._mutated()
        verb = "restored" if action.kind is ActionKind.ADD else "removed"
        return Outcome(True, f"Redo: {verb} cycle starting {iso(action.record.start_date)}")

    # --- daily log ---

    def log_day(self, day, symptoms: str = "", mood: str = "") -> Outcome:
        try:
            entry = self.logs.log_day(to_date(day), symptoms, mood)
        except TrackerError as exc:
            return self._fail(exc)
        return Outcome(True, f"Logged for {iso(entry.day)}")

    def daily_logs(self) -> List[DailyLog]:
        return self.logs.entries()

    # --- views ---

    def cycles(self) -> List[CycleRecord]:
        return self.ledger.list_chronological()

    def prediction(self, today: Optional[date] = None) -> Optional[Dict[str, Any]]:
        """Average spacing, predicted next start and days left, or None without data."""
        predicted = predict_next(self.ledger)
        if predicted is None:
            return None
        return {
            "average_spacing": self.ledger.average_spacing(),
            "predicted": predicted,
            "days_until": days_until(predicted, today),
        }

    def analytics(self) -> dict:
        return cycle_summary(self.ledger)

    # --- reminders ---

    def add_reminder(self, day, message: str) -> Outcome:
        try:
            when = to_instant(day)
        except TrackerError as exc:
            return self._fail(exc)
        self.reminders.add_manual(when, message.strip())
        return Outcome(True, f"Reminder added for {instant_to_iso(when)}")

    def upcoming_reminders(self, today: Optional[date] = None) -> List[Tuple[Reminder, int]]:
        """Pending reminders (earliest first) with the days left until each."""
        today = today or date.today()
        now = to_instant(today)
        limit = int(self.settings["reminder_limit"])
        return [(r, days_until(r.when.date(), today)) for r in self.reminders.list_upcoming(now, limit)]
