"""Console period tracker.

Menu-driven front end over PeriodTracker:
- add/delete cycles with undo/redo
- daily symptom & mood log
- cycle history, next-period prediction and analytics
- reminders (predicted next period plus manual ones)

Data lives in $PERIOD_TRACKER_HOME (default: current directory) as
cycles.csv, daily_logs.csv and settings.json.
"""
from __future__ import annotations
import logging
from typing import Callable

from models import instant_to_iso
from storage import CsvStore, data_dir, load_settings
from tracker import Outcome, PeriodTracker

MENU = """
--------- PERIOD TRACKER ---------
1. Add New Cycle
2. Delete Cycle (by start date)
3. Undo (last add/delete)
4. Redo
5. Log Daily Symptom & Mood
6. View Cycle History
7. Predict Next Period
8. Reminders (show) / Add manual reminder
9. Analytics Summary
10. View Daily Logs
11. Save & Exit
----------------------------------"""


def _report(write: Callable, outcome: Outcome) -> None:
    write(outcome.message if outcome.ok else f"Error: {outcome.message}")


def show_cycles(tracker: PeriodTracker, write: Callable = print) -> None:
    records = tracker.cycles()
    if not records:
        write("No cycles recorded yet.")
        return
    write(f"{'START':<12}{'END':<12}{'DAYS':<8}{'CYCLE_LEN':<12}")
    write("-" * 44)
    for r in records:
        spacing = str(r.spacing_days) if r.spacing_days > 0 else "N/A"
        write(f"{r.start_date.isoformat():<12}{r.end_date.isoformat():<12}{r.duration_days:<8}{spacing:<12}")


def show_prediction(tracker: PeriodTracker, write: Callable = print) -> None:
    pred = tracker.prediction()
    if pred is None:
        write("Add at least one cycle to predict.")
        return
    write(f"Average cycle length: {pred['average_spacing']} days")
    write(f"Next predicted period start: {pred['predicted'].isoformat()}")
    if pred["days_until"] >= 0:
        write(f"Days left until next period: {pred['days_until']}")
    else:
        write(f"Predicted date is in the past by {-pred['days_until']} day(s).")


def show_reminders(tracker: PeriodTracker, write: Callable = print) -> None:
    upcoming = tracker.upcoming_reminders()
    if not upcoming:
        write("No upcoming reminders.")
        return
    for i, (r, days) in enumerate(upcoming, 1):
        write(f"{i}. {r.message} (Date: {instant_to_iso(r.when)}, in {days} day(s))")


def show_analytics(tracker: PeriodTracker, write: Callable = print) -> None:
    s = tracker.analytics()
    if not s["count"]:
        write("No cycles to analyze.")
        return
    d = s["duration"]
    write(f"Cycles recorded: {s['count']}")
    write(f"Duration (days) - Avg: {d['avg']:.2f}, Min: {d['min']}, Max: {d['max']}")
    if s["spacing"]:
        c = s["spacing"]
        write(f"Cycle length (days) - Avg: {c['avg']:.2f}, Min: {c['min']}, Max: {c['max']}")
    else:
        write("Cycle length data insufficient (need >=2 cycles to compute lengths).")


def show_logs(tracker: PeriodTracker, write: Callable = print) -> None:
    entries = tracker.daily_logs()
    if not entries:
        write("No logs yet.")
        return
    write(f"{'DATE':<12}{'SYMPTOMS':<40}MOOD")
    write("-" * 64)
    for e in entries:
        write(f"{e.day.isoformat():<12}{e.symptoms:<40}{e.mood}")


def run_console(tracker: PeriodTracker, read: Callable = input, write: Callable = print) -> None:
    """Menu loop. Returns after 'Save & Exit', end of input or Ctrl-C."""
    while True:
        write(MENU)
        try:
            choice = read("Enter choice (1-11): ").strip()
            if choice == "1":
                start = read("Enter START date (YYYY-MM-DD): ")
                end = read("Enter END date (YYYY-MM-DD): ")
                _report(write, tracker.add_cycle(start, end))
            elif choice == "2":
                _report(write, tracker.delete_cycle(read("Enter START date of cycle to delete (YYYY-MM-DD): ")))
            elif choice == "3":
                _report(write, tracker.undo())
            elif choice == "4":
                _report(write, tracker.redo())
            elif choice == "5":
                day = read("Enter DATE (YYYY-MM-DD): ")
                symptoms = read("Enter SYMPTOMS: ")
                mood = read("Enter MOOD: ")
                _report(write, tracker.log_day(day, symptoms, mood))
            elif choice == "6":
                show_cycles(tracker, write)
            elif choice == "7":
                show_prediction(tracker, write)
            elif choice == "8":
                sub = read("a) Show reminders   b) Add manual reminder\nChoose (a/b): ").strip().lower()
                if sub == "a":
                    show_reminders(tracker, write)
                elif sub == "b":
                    day = read("Enter date (YYYY-MM-DD): ")
                    _report(write, tracker.add_reminder(day, read("Enter reminder message: ")))
                else:
                    write("Invalid option")
            elif choice == "9":
                show_analytics(tracker, write)
            elif choice == "10":
                show_logs(tracker, write)
            elif choice == "11":
                outcome = tracker.save()
                _report(write, outcome)
                if outcome.ok:
                    write("Goodbye!")
                    return
            else:
                write("Invalid choice (1-11).")
        except (EOFError, KeyboardInterrupt):
            write("")
            return


def main():
    directory = data_dir()
    settings = load_settings(directory)
    logging.basicConfig(
        level=getattr(logging, str(settings.get("log_level", "WARNING")).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    tracker = PeriodTracker(CsvStore(directory), settings)
    outcome = tracker.load()
    if not outcome.ok:
        print(f"Error: {outcome.message}")
    run_console(tracker)


if __name__ == '__main__':
    main()
