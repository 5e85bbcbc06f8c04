"""Cycle ledger

Holds the recorded cycles. Each record carries:
- start/end dates and the duration between them
- spacing: days since the chronologically previous start (0 = unknown)

Records may be stored out of chronological order after undo/redo restores,
so every read that cares about order sorts by start date.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date
import logging
from typing import Iterable, Iterator, List, Optional

import numpy as np

from errors import DuplicateRecord, InvalidRange, NotFound

log = logging.getLogger(__name__)

DEFAULT_SPACING = 28  # fallback cycle length, not a statistic


@dataclass(frozen=True)
class CycleRecord:
    start_date: date
    end_date: date
    duration_days: int = 0
    spacing_days: int = 0

    @classmethod
    def from_range(cls, start: date, end: date) -> "CycleRecord":
        duration = (end - start).days
        if duration < 0:
            raise InvalidRange(f"end date {end.isoformat()} is before start date {start.isoformat()}")
        return cls(start, end, duration, 0)

    @property
    def key(self) -> tuple:
        return (self.start_date, self.end_date)


class Ledger:
    def __init__(self, default_spacing: int = DEFAULT_SPACING):
        self._records: List[CycleRecord] = []
        self.default_spacing = int(default_spacing)

    @classmethod
    def from_records(cls, records: Iterable[CycleRecord], default_spacing: int = DEFAULT_SPACING) -> "Ledger":
        """Build a ledger from stored records, keeping their stored spacing.

        Duplicate start dates are skipped (first one wins).
        """
        ledger = cls(default_spacing)
        for r in records:
            try:
                ledger.restore(r)
            except DuplicateRecord:
                log.warning("skipping duplicate cycle starting %s", r.start_date.isoformat())
        return ledger

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CycleRecord]:
        # storage order
        return iter(list(self._records))

    def _previous_start(self, start: date) -> Optional[date]:
        earlier = [r.start_date for r in self._records if r.start_date < start]
        return max(earlier) if earlier else None

    def find_by_start(self, start: date) -> Optional[CycleRecord]:
        return next((r for r in self._records if r.start_date == start), None)

    def contains(self, record: CycleRecord) -> bool:
        return any(r.key == record.key for r in self._records)

    def insert(self, record: CycleRecord) -> CycleRecord:
        """Append a new record with spacing recomputed against its chronological predecessor."""
        if record.end_date < record.start_date:
            raise InvalidRange(
                f"end date {record.end_date.isoformat()} is before start date {record.start_date.isoformat()}"
            )
        if self.find_by_start(record.start_date) is not None:
            raise DuplicateRecord(f"a cycle starting {record.start_date.isoformat()} already exists")
        prev = self._previous_start(record.start_date)
        spacing = (record.start_date - prev).days if prev is not None else 0
        log.debug("spacing for %s: %s (previous start %s)", record.start_date, spacing, prev)
        stored = replace(
            record,
            duration_days=(record.end_date - record.start_date).days,
            spacing_days=spacing,
        )
        self._records.append(stored)
        return stored

    def restore(self, record: CycleRecord) -> CycleRecord:
        """Put a previously stored record back exactly as it was."""
        if self.find_by_start(record.start_date) is not None:
            raise DuplicateRecord(f"a cycle starting {record.start_date.isoformat()} already exists")
        self._records.append(record)
        return record

    def delete_by_start(self, start: date) -> CycleRecord:
        for i, r in enumerate(self._records):
            if r.start_date == start:
                return self._records.pop(i)
        raise NotFound(f"no cycle starts on {start.isoformat()}")

    def remove(self, record: CycleRecord) -> bool:
        """Remove the record matching start and end date. False if absent."""
        for i, r in enumerate(self._records):
            if r.key == record.key:
                del self._records[i]
                return True
        return False

    def list_chronological(self) -> List[CycleRecord]:
        return sorted(self._records, key=lambda r: r.start_date)

    def average_spacing(self) -> int:
        """Mean of the positive spacings, truncated; default_spacing when none exist."""
        spacings = np.array([r.spacing_days for r in self._records], dtype=int)
        spacings = spacings[spacings > 0]
        if not spacings.size:
            return self.default_spacing
        return int(spacings.sum()) // int(spacings.size)

    def latest_start(self) -> Optional[date]:
        if not self._records:
            return None
        return max(r.start_date for r in self._records)
