"""
CLI (Command Line Interface).

Quick terminal commands on top of the scheduling engine, e.g.:

    tutorschedule check 2025-03-10 16:30 --duration 60
    tutorschedule restore-check <student_id> <session_id>
    tutorschedule restore <student_id> <session_id> [--force]
    tutorschedule gaps 2025-03-10
    tutorschedule scan
    tutorschedule slots 2025-03-10 --suggest
    tutorschedule week --type online

Note:
- The roster is read from data/roster.json (or --roster)
- Settings are read from data/settings.json (or --settings)
"""

from __future__ import annotations

import argparse
import logging

from rich import box
from rich.console import Console
from rich.table import Table

from tutorschedule.config import Settings, load_settings
from tutorschedule.conflicts import (
    check_conflict,
    check_restore_conflict,
    find_session,
    get_sessions_with_gaps,
    scan_all_conflicts,
)
from tutorschedule.lifecycle import change_status, restore_session
from tutorschedule.model import SCHEDULED, SEVERITY_NONE, Candidate, ConflictResult, Roster
from tutorschedule.slots import get_available_slots, get_suggested_slots
from tutorschedule.storage import load_roster, save_roster
from tutorschedule.timeutil import is_valid_date, minutes_to_time
from tutorschedule.weekly import DAY_NAMES, analyze_week

console = Console()

SEVERITY_STYLE = {"none": "green", "warning": "yellow", "error": "bold red"}
GAP_STYLE = {"good": "green", "warning": "yellow", "critical": "bold red"}
PRIORITY_STYLE = {"high": "green", "medium": "yellow", "low": "red"}


def _print_result(result: ConflictResult, title: str) -> None:
    style = SEVERITY_STYLE.get(result.severity, "")
    console.print(f"{title}: [{style}]{result.severity}[/]")
    if not result.conflicts:
        return

    table = Table(title=f"Conflicts with {len(result.conflicts)} session(s)", box=box.SIMPLE)
    table.add_column("Who")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Type")
    table.add_column("Details")
    for c in result.conflicts:
        table.add_row(c.owner.display_name, c.session.date, c.session.time or c.owner.session_time, c.type, c.message)
    console.print(table)

    if result.suggestions:
        console.print("Try instead: " + ", ".join(s.label for s in result.suggestions))


def _cmd_check(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Check a proposed session time against the roster.
    """
    date = (args.date or "").strip()
    if not is_valid_date(date):
        console.print("Please provide a date as YYYY-MM-DD.")
        return 1

    candidate = Candidate(date=date, start_time=args.time, duration=args.duration)
    result = check_conflict(roster.students, candidate, roster.groups, settings=settings)
    _print_result(result, f"{date} {args.time}")
    return 0


def _cmd_restore_check(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Check whether restoring a session would clash with the current roster.
    """
    if find_session(roster.students, args.student_id, args.session_id, roster.groups) is None:
        console.print(f"Session not found: {args.student_id}/{args.session_id}")
        return 1

    result = check_restore_conflict(roster.students, args.student_id, args.session_id, roster.groups, settings)
    _print_result(result, f"Restore {args.session_id}")
    return 0


def _cmd_restore(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Bring a completed/cancelled/vacation session back to "scheduled" and save.

    Refuses when the restore would conflict, unless --force is given.
    """
    try:
        session, result = restore_session(
            roster.students, args.student_id, args.session_id, roster.groups, settings
        )
    except (LookupError, ValueError) as exc:
        console.print(str(exc))
        return 1

    _print_result(result, f"Restore {args.session_id}")
    if result.severity != SEVERITY_NONE and not args.force:
        console.print("Not restored (use --force to restore anyway).")
        return 1

    change_status(session, SCHEDULED, note="restored")
    save_roster(roster, args.roster)
    console.print(f"Restored: {args.session_id}")
    return 0


def _cmd_gaps(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Print the day's sessions in order with the gap to the next one.
    """
    date = (args.date or "").strip()
    if not is_valid_date(date):
        console.print("Please provide a date as YYYY-MM-DD.")
        return 1

    rows = get_sessions_with_gaps(roster.students, date, roster.groups, settings)
    if not rows:
        console.print("No sessions on this date.")
        return 0

    table = Table(title=f"Sessions on {date}", box=box.SIMPLE)
    table.add_column("Time")
    table.add_column("Who")
    table.add_column("Gap after", justify="right")
    table.add_column("Conflict")
    for row in rows:
        gap = "" if row.gap_after is None else f"[{GAP_STYLE[row.gap_severity]}]{row.gap_after} min[/]"
        table.add_row(
            f"{minutes_to_time(row.start)}-{minutes_to_time(row.end)}",
            row.owner.display_name,
            gap,
            row.conflict_type or "",
        )
    console.print(table)
    return 0


def _cmd_scan(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Print every session that currently conflicts with another one.
    """
    results = scan_all_conflicts(roster.students, roster.groups, settings)
    if not results:
        console.print("No conflicts found.")
        return 0

    console.print(f"Sessions with conflicts: {len(results)}")
    for session_id, result in results.items():
        _print_result(result, session_id)
    return 0


def _cmd_slots(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Print free slots on a date (or the top suggestions with --suggest).
    """
    date = (args.date or "").strip()
    if not is_valid_date(date):
        console.print("Please provide a date as YYYY-MM-DD.")
        return 1

    if args.suggest:
        slots = get_suggested_slots(roster.students, date, args.duration, groups=roster.groups, settings=settings)
    else:
        slots = get_available_slots(roster.students, date, args.duration, groups=roster.groups, settings=settings)

    if not slots:
        console.print("No free slots.")
        return 0

    table = Table(title=f"Free slots on {date}", box=box.SIMPLE)
    table.add_column("Time")
    table.add_column("Duration", justify="right")
    table.add_column("Period")
    for slot in slots:
        table.add_row(f"{slot.time} ({slot.label})", str(slot.duration), slot.period)
    console.print(table)
    return 0


def _cmd_week(args: argparse.Namespace, roster: Roster, settings: Settings) -> int:
    """
    Weekly overview of the recurring schedule: which days and times suit a new student.
    """
    week = analyze_week(roster.students, args.type, settings)

    console.print(
        f"Recurring sessions: {week.total_sessions} "
        f"({week.avg_sessions_per_day:.1f} per day), load: {week.overall_load}"
    )

    table = Table(title="Week", box=box.SIMPLE)
    table.add_column("Day")
    table.add_column("Sessions", justify="right")
    table.add_column("Online/Onsite", justify="right")
    table.add_column("Advice")
    table.add_column("Suggested times")
    for day in week.day_suggestions:
        style = PRIORITY_STYLE.get(day.priority, "")
        notes = [n for n in (day.travel_consideration, day.consecutive_warning, day.energy_tip) if n]
        table.add_row(
            day.day_name,
            str(day.session_count),
            f"{day.online_count}/{day.onsite_count}",
            f"[{style}]{day.message}[/]" + "".join(f"\n{n}" for n in notes),
            ", ".join(s.label for s in day.suggested_time_slots[:3]),
        )
    console.print(table)

    if week.best_days:
        console.print("Best days: " + ", ".join(DAY_NAMES[d] for d in week.best_days))
    if week.avoid_days:
        console.print("Avoid: " + ", ".join(DAY_NAMES[d] for d in week.avoid_days))
    for line in week.general_tips + week.recommendations:
        console.print(f"- {line}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="tutorschedule", description="Tutoring session conflict checker")
    parser.add_argument("--roster", type=str, default=None, help="Path to roster.json")
    parser.add_argument("--settings", type=str, default=None, help="Path to settings.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Check a proposed session time")
    p_check.add_argument("date", type=str, help="Date (YYYY-MM-DD)")
    p_check.add_argument("time", type=str, help="Start time (HH:MM)")
    p_check.add_argument("--duration", type=int, default=None, help="Duration in minutes")

    p_rcheck = sub.add_parser("restore-check", help="Check restoring a session for conflicts")
    p_rcheck.add_argument("student_id", type=str)
    p_rcheck.add_argument("session_id", type=str)

    p_restore = sub.add_parser("restore", help="Restore a session to scheduled")
    p_restore.add_argument("student_id", type=str)
    p_restore.add_argument("session_id", type=str)
    p_restore.add_argument("--force", action="store_true", help="Restore even if it conflicts")

    p_gaps = sub.add_parser("gaps", help="Show the day's sessions with gaps")
    p_gaps.add_argument("date", type=str, help="Date (YYYY-MM-DD)")

    sub.add_parser("scan", help="Show all sessions that conflict")

    p_slots = sub.add_parser("slots", help="Show free slots on a date")
    p_slots.add_argument("date", type=str, help="Date (YYYY-MM-DD)")
    p_slots.add_argument("--duration", type=int, default=None, help="Duration in minutes")
    p_slots.add_argument("--suggest", action="store_true", help="Only the best few slots")

    p_week = sub.add_parser("week", help="Weekly load and the best days for a new student")
    p_week.add_argument("--type", choices=["online", "onsite"], default=None, help="Session type of the new student")

    return parser


COMMANDS = {
    "check": _cmd_check,
    "restore-check": _cmd_restore_check,
    "restore": _cmd_restore,
    "gaps": _cmd_gaps,
    "scan": _cmd_scan,
    "slots": _cmd_slots,
    "week": _cmd_week,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    roster = load_roster(args.roster)
    settings = load_settings(args.settings)

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)
    raise SystemExit(handler(args, roster, settings))
