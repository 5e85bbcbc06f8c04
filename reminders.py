"""Time-ordered reminders

Reminders are kept in a list sorted by (when, insertion sequence), so listing
is a slice and never consumes entries. At most one reminder is "derived"
from the ledger (the predicted next start); it is replaced on every ledger
change. Manual reminders stay until they expire.
"""
from __future__ import annotations
from bisect import bisect_left, insort
from dataclasses import dataclass
from datetime import datetime
import itertools
import logging
from typing import List, Optional, Tuple, TYPE_CHECKING

from models import iso, predict_next, to_instant

if TYPE_CHECKING:
    from ledger import Ledger

log = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Predicted next period: {date}"


@dataclass(frozen=True)
class Reminder:
    when: datetime
    message: str


class ReminderScheduler:
    def __init__(self, message_template: str = DEFAULT_MESSAGE):
        self.message_template = message_template
        self._entries: List[Tuple[datetime, int, Reminder]] = []
        self._seq = itertools.count()
        self._derived_seq: Optional[int] = None

    def __len__(self) -> int:
        return len(self._entries)

    def _push(self, reminder: Reminder) -> int:
        seq = next(self._seq)
        insort(self._entries, (reminder.when, seq, reminder))
        return seq

    @property
    def derived(self) -> Optional[Reminder]:
        for _, seq, r in self._entries:
            if seq == self._derived_seq:
                return r
        return None

    def add_manual(self, when: datetime, message: str) -> Reminder:
        reminder = Reminder(when, message)
        self._push(reminder)
        log.info("manual reminder for %s: %s", when.date().isoformat(), message)
        return reminder

    def rebuild_derived(self, ledger: "Ledger") -> Optional[Reminder]:
        """Replace the ledger-derived reminder with one at the current prediction."""
        if self._derived_seq is not None:
            self._entries = [e for e in self._entries if e[1] != self._derived_seq]
            self._derived_seq = None
        predicted = predict_next(ledger)
        if predicted is None:
            log.debug("ledger empty, no derived reminder")
            return None
        reminder = Reminder(to_instant(predicted), self.message_template.format(date=iso(predicted)))
        self._derived_seq = self._push(reminder)
        log.debug("derived reminder set for %s", iso(predicted))
        return reminder

    def prune_expired(self, now: datetime) -> int:
        """Drop every reminder earlier than now. Returns how many were dropped."""
        cut = bisect_left(self._entries, (now,))
        if not cut:
            return 0
        if any(seq == self._derived_seq for _, seq, _ in self._entries[:cut]):
            self._derived_seq = None
        del self._entries[:cut]
        log.debug("pruned %d expired reminder(s)", cut)
        return cut

    def list_upcoming(self, now: datetime, limit: int = 10) -> List[Reminder]:
        self.prune_expired(now)
        return [r for _, _, r in self._entries[:max(0, int(limit))]]
