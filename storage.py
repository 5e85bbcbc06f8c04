"""File storage for the period tracker

Files in the data directory:
- "cycles.csv": start,end,duration,spacing per line (dates YYYY-MM-DD)
- "daily_logs.csv": date,symptoms,mood per line
- "settings.json": {"cycle_length": int, "reminder_limit": int, ...}

Free-text log fields are written with csv quoting, so commas survive a
save/load cycle. Older files where commas were rewritten to ';' still load.
"""
from __future__ import annotations
import csv
import io
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from daily_log import DailyLog, LogStore
from errors import InvalidDate, StorageError
from ledger import CycleRecord
from models import iso, to_date

log = logging.getLogger(__name__)

CYCLES_FILENAME = "cycles.csv"
LOGS_FILENAME = "daily_logs.csv"
SETTINGS_FILENAME = "settings.json"
HOME_ENV = "PERIOD_TRACKER_HOME"


def data_dir() -> Path:
    """$PERIOD_TRACKER_HOME if set, else the current working directory."""
    env = os.environ.get(HOME_ENV)
    if env:
        return Path(env).expanduser()
    return Path.cwd()


def default_settings() -> Dict[str, Any]:
    return {
        # fallback spacing when no cycle lengths are known yet
        "cycle_length": 28,
        "reminder_limit": 10,
        "reminder_message": "Predicted next period: {date}",
        "log_level": "WARNING",
    }


def _valid_int(value, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def _valid_template(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        value.format(date="2000-01-01")
    except (AttributeError, KeyError, IndexError, ValueError):
        return False
    return True


_CHECKS = {
    "cycle_length": lambda v: _valid_int(v, 1),
    "reminder_limit": lambda v: _valid_int(v, 0),
    "reminder_message": _valid_template,
    "log_level": lambda v: isinstance(v, str) and isinstance(logging.getLevelName(v.upper()), int),
}


def normalize_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in missing keys and replace invalid values with their defaults."""
    out = dict(settings)
    for key, value in default_settings().items():
        if key not in out:
            out[key] = value
        elif not _CHECKS[key](out[key]):
            log.warning("invalid setting %s=%r, using %r", key, out[key], value)
            out[key] = value
    return out


def load_settings(directory: Optional[Path] = None) -> Dict[str, Any]:
    path = Path(directory or data_dir()) / SETTINGS_FILENAME
    settings: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                settings = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning("could not read %s (%s), using defaults", path, exc)
            settings = {}
        if not isinstance(settings, dict):
            log.warning("%s is not a JSON object, using defaults", path)
            settings = {}
    return normalize_settings(settings)


def save_settings(settings: Dict[str, Any], directory: Optional[Path] = None) -> None:
    path = Path(directory or data_dir()) / SETTINGS_FILENAME
    _atomic_write(path, json.dumps(settings, indent=2, sort_keys=True))


def _tmp_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".tmp")


def _discard(paths: Iterable[Path]) -> None:
    for p in paths:
        try:
            p.unlink()
        except OSError:
            pass


def _atomic_write_all(files: Dict[Path, str]) -> None:
    """Write every file to a .tmp sibling first, then swap them all in.

    Nothing is replaced unless every temporary file was written.
    """
    tmps = {path: _tmp_path(path) for path in files}
    try:
        for path, text in files.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmps[path], "w", encoding="utf-8", newline="") as f:
                f.write(text)
    except OSError as exc:
        _discard(tmps.values())
        raise StorageError(f"could not write data in {next(iter(files)).parent}: {exc}") from exc
    try:
        for path, tmp in tmps.items():
            os.replace(tmp, path)
    except OSError as exc:
        _discard(tmps.values())
        raise StorageError(f"could not replace {path}: {exc}") from exc


def _atomic_write(path: Path, text: str) -> None:
    _atomic_write_all({path: text})


def _rows(path: Path) -> Iterable[Tuple[int, List[str]]]:
    if not path.exists():
        return []
    # undecodable bytes become U+FFFD so the row fails date parsing and is skipped
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return [(n, [p.strip() for p in row]) for n, row in enumerate(csv.reader(f), 1) if any(row)]


def _csv_text(rows: Iterable[List[str]]) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerows(rows)
    return buf.getvalue()


def parse_cycle_row(row: List[str]) -> CycleRecord:
    if len(row) < 4:
        raise ValueError(f"expected 4 fields, got {len(row)}")
    start, end = to_date(row[0]), to_date(row[1])
    if end < start:
        raise ValueError("end date before start date")
    duration = (end - start).days
    if int(row[2]) != duration:
        log.warning("duration %s for cycle starting %s corrected to %d", row[2], iso(start), duration)
    return CycleRecord(start, end, duration, int(row[3]))


def cycle_row(record: CycleRecord) -> List[str]:
    return [iso(record.start_date), iso(record.end_date), str(record.duration_days), str(record.spacing_days)]


class CsvStore:
    """Loads and saves the ledger and the daily log as CSV files."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory or data_dir())

    @property
    def cycles_path(self) -> Path:
        return self.directory / CYCLES_FILENAME

    @property
    def logs_path(self) -> Path:
        return self.directory / LOGS_FILENAME

    def load(self) -> Tuple[List[CycleRecord], LogStore]:
        """Read both files. Malformed rows are skipped, missing files mean no data."""
        try:
            records = self._load_cycles()
            logs = self._load_logs()
        except (OSError, csv.Error) as exc:
            raise StorageError(f"could not read data in {self.directory}: {exc}") from exc
        log.info("loaded %d cycle(s) and %d log entr(ies) from %s", len(records), len(logs), self.directory)
        return records, logs

    def _load_cycles(self) -> List[CycleRecord]:
        records = []
        for n, row in _rows(self.cycles_path):
            try:
                records.append(parse_cycle_row(row))
            except (InvalidDate, ValueError) as exc:
                log.warning("%s:%d skipped (%s)", self.cycles_path.name, n, exc)
        return records

    def _load_logs(self) -> LogStore:
        entries = []
        for n, row in _rows(self.logs_path):
            if len(row) < 3:
                log.warning("%s:%d skipped (expected 3 fields, got %d)", self.logs_path.name, n, len(row))
                continue
            try:
                entries.append(DailyLog(to_date(row[0]), row[1], row[2]))
            except InvalidDate as exc:
                log.warning("%s:%d skipped (%s)", self.logs_path.name, n, exc)
        return LogStore(entries)

    def save(self, records: Iterable[CycleRecord], logs: LogStore) -> None:
        """Write both files; neither is replaced unless both were written."""
        _atomic_write_all({
            self.cycles_path: _csv_text(cycle_row(r) for r in records),
            self.logs_path: _csv_text([iso(e.day), e.symptoms, e.mood] for e in logs.entries()),
        })
        log.info("saved data to %s", self.directory)
