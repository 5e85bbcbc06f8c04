"""Quick fix to recompute the spacing column of cycles.csv in chronological order"""
from __future__ import annotations
from dataclasses import replace
import logging
import sys
from typing import List

import numpy as np

from ledger import CycleRecord
from storage import CsvStore, data_dir


def recompute_spacing(records: List[CycleRecord]) -> List[CycleRecord]:
    # Sort by start date
    records = sorted(records, key=lambda r: r.start_date)
    if not records:
        return []

    ords = np.array([r.start_date.toordinal() for r in records])
    # first record has no predecessor
    spacings = np.concatenate(([0], np.diff(ords)))
    return [replace(r, spacing_days=int(s)) for r, s in zip(records, spacings)]


def main(directory=None) -> int:
    store = CsvStore(directory or data_dir())
    records, logs = store.load()
    fixed = recompute_spacing(records)
    changed = sum(1 for a, b in zip(sorted(records, key=lambda r: r.start_date), fixed) if a != b)
    store.save(fixed, logs)
    print(f"Rewrote {store.cycles_path} ({changed} of {len(fixed)} row(s) changed)")
    return 0


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
