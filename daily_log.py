"""Symptom and mood log, one entry per day."""
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date
import logging
from typing import Dict, Iterable, List, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyLog:
    day: date
    symptoms: str = ""
    mood: str = ""


class LogStore:
    def __init__(self, entries: Iterable[DailyLog] = ()):
        self._entries: Dict[date, DailyLog] = {}
        for e in entries:
            self._entries[e.day] = e

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, day: date) -> Optional[DailyLog]:
        return self._entries.get(day)

    def log_day(self, day: date, symptoms: str = "", mood: str = "") -> DailyLog:
        """Record symptoms/mood for a day.

        Logging a day twice appends the new symptoms ("; " separated) and
        replaces the mood only when a new one is given.
        """
        symptoms = (symptoms or "").strip()
        mood = (mood or "").strip()
        cur = self._entries.get(day)
        if cur is None:
            entry = DailyLog(day, symptoms, mood)
        else:
            merged = cur.symptoms
            if symptoms:
                merged = f"{merged}; {symptoms}" if merged else symptoms
            entry = replace(cur, symptoms=merged, mood=mood or cur.mood)
        self._entries[day] = entry
        log.info("logged %s", day.isoformat())
        return entry

    def entries(self) -> List[DailyLog]:
        return [self._entries[d] for d in sorted(self._entries)]
