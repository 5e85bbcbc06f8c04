"""Error kinds raised by the tracker core.

Every error is recoverable: the session catches TrackerError at the user
action and reports it, then keeps accepting commands.
"""
from __future__ import annotations


class TrackerError(Exception):
    pass


class InvalidDate(TrackerError, ValueError):
    pass


class InvalidRange(TrackerError, ValueError):
    """End date before start date."""


class NotFound(TrackerError, LookupError):
    pass


class DuplicateRecord(TrackerError):
    """A record with the same start date is already in the ledger."""


class EmptyHistory(TrackerError):
    pass


class StaleState(TrackerError):
    """Undo/redo target was changed out-of-band since the action was recorded."""


class StorageError(TrackerError, OSError):
    pass
