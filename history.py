"""Undo/redo over the cycle ledger

Instead of snapshotting the whole ledger we keep the inverse of each edit:
an Add is undone by removing the record, a Delete by restoring it. Records
are frozen, so the copies on the stacks cannot be changed by later edits.
"""
from __future__ import annotations
from dataclasses import dataclass
import enum
import logging
from typing import List

from errors import DuplicateRecord, EmptyHistory, StaleState
from ledger import CycleRecord, Ledger

log = logging.getLogger(__name__)


class ActionKind(enum.Enum):
    ADD = "add"
    DELETE = "delete"


@dataclass(frozen=True)
class HistoryAction:
    kind: ActionKind
    record: CycleRecord


class History:
    def __init__(self):
        self._undo: List[HistoryAction] = []
        self._redo: List[HistoryAction] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _push(self, action: HistoryAction) -> None:
        self._undo.append(action)
        self._redo.clear()

    def record_add(self, record: CycleRecord) -> None:
        self._push(HistoryAction(ActionKind.ADD, record))

    def record_delete(self, record: CycleRecord) -> None:
        self._push(HistoryAction(ActionKind.DELETE, record))

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def undo(self, ledger: Ledger) -> HistoryAction:
        """Revert the most recent action. Returns the action that was reverted."""
        if not self._undo:
            raise EmptyHistory("nothing to undo")
        action = self._undo.pop()
        if action.kind is ActionKind.ADD:
            _unapply_add(ledger, action.record)
        else:
            _unapply_delete(ledger, action.record)
        self._redo.append(action)
        log.info("undo %s of cycle starting %s", action.kind.value, action.record.start_date)
        return action

    def redo(self, ledger: Ledger) -> HistoryAction:
        """Re-apply the most recently undone action."""
        if not self._redo:
            raise EmptyHistory("nothing to redo")
        action = self._redo.pop()
        if action.kind is ActionKind.ADD:
            # re-adding is the inverse of undoing an add
            _unapply_delete(ledger, action.record)
        else:
            _unapply_add(ledger, action.record)
        self._undo.append(action)
        log.info("redo %s of cycle starting %s", action.kind.value, action.record.start_date)
        return action


def _unapply_add(ledger: Ledger, record: CycleRecord) -> None:
    if not ledger.remove(record):
        raise StaleState(f"cycle starting {record.start_date.isoformat()} is no longer recorded")


def _unapply_delete(ledger: Ledger, record: CycleRecord) -> None:
    if ledger.contains(record):
        raise StaleState(f"cycle starting {record.start_date.isoformat()} is already recorded")
    try:
        ledger.restore(record)
    except DuplicateRecord as exc:
        raise StaleState(str(exc)) from exc
