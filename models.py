"""Date helpers and cycle prediction

Simple rules:
- spacing = days between a cycle start and the chronologically previous start
- predicted next start = latest recorded start + average spacing
- average spacing falls back to the configured cycle length when nothing is known

Functions accept and return datetime.date objects and ISO date strings.
"""
from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import Optional, TYPE_CHECKING

import numpy as np

from errors import InvalidDate

if TYPE_CHECKING:
    from ledger import Ledger


DATE_FORMAT = "%Y-%m-%d"


def to_date(d) -> date:
    """Parse a YYYY-MM-DD string. Dates pass through untouched."""
    if isinstance(d, datetime):
        return d.date()
    if isinstance(d, date):
        return d
    try:
        return datetime.strptime(str(d).strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDate(f"invalid date {d!r}, expected YYYY-MM-DD") from exc


def iso(d: date) -> str:
    return d.isoformat()


def to_instant(d) -> datetime:
    """Midnight of the given calendar date."""
    return datetime.combine(to_date(d), time.min)


def instant_to_iso(when: datetime) -> str:
    return when.date().isoformat()


def days_between(d1, d2) -> int:
    """Whole days from d1 to d2 (negative when d2 is earlier)."""
    return (to_date(d2) - to_date(d1)).days


def add_days(d, days: int) -> date:
    return to_date(d) + timedelta(days=int(days))


def days_until(d, today=None) -> int:
    """Signed day count: positive in the future, negative in the past, zero today."""
    if today is None:
        today = date.today()
    return days_between(today, d)


def predict_next(ledger: "Ledger") -> Optional[date]:
    """Latest start + average spacing, or None for an empty ledger."""
    last = ledger.latest_start()
    if last is None:
        return None
    return add_days(last, ledger.average_spacing())


def cycle_summary(ledger: "Ledger") -> dict:
    """Analytics over the ledger.

    Returns a dict with keys:
    - "count": number of records
    - "duration": {"avg", "min", "max"} over all records, or None when empty
    - "spacing": {"avg", "min", "max"} over positive spacings, or None without data
    """
    records = ledger.list_chronological()
    summary = {"count": len(records), "duration": None, "spacing": None}
    if not records:
        return summary

    durations = np.array([r.duration_days for r in records])
    summary["duration"] = {
        "avg": round(float(np.mean(durations)), 2),
        "min": int(np.min(durations)),
        "max": int(np.max(durations)),
    }

    spacings = np.array([r.spacing_days for r in records])
    spacings = spacings[spacings > 0]
    if spacings.size:
        summary["spacing"] = {
            "avg": round(float(np.mean(spacings)), 2),
            "min": int(np.min(spacings)),
            "max": int(np.max(spacings)),
        }
    return summary
