"""
Conflict detection.

Given a roster snapshot (students and groups with their sessions) and a
candidate (date, start time, duration), detect sessions on the same date that
overlap the candidate or sit too close to it.

Overlap rule:
    start < other_end AND end > other_start

Classification against one opposing session:
- same start                      -> "exact"   (severity error)
- any other overlap               -> "partial" (severity error)
- gap below closeness threshold   -> "close"   (severity warning)

Only "scheduled" and "completed" sessions occupy time. Cancelled and vacation
sessions never take part in any check.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Sequence

from tutorschedule.config import Settings
from tutorschedule.model import (
    CONFLICT_CLOSE,
    CONFLICT_EXACT,
    CONFLICT_NONE,
    CONFLICT_PARTIAL,
    CONFLICT_RANK,
    OCCUPYING_STATUSES,
    SEVERITY_ERROR,
    SEVERITY_NONE,
    SEVERITY_RANK,
    SEVERITY_WARNING,
    Candidate,
    ConflictDetail,
    ConflictResult,
    Group,
    Interval,
    Owner,
    Session,
    SessionGap,
    Student,
    TimeSuggestion,
)
from tutorschedule.timeutil import (
    format_time_12h,
    gap_between,
    make_interval,
    minutes_to_time,
    normalize_date,
    overlaps,
    resolve_duration,
    resolve_effective_interval,
    resolve_start_time,
)

logger = logging.getLogger(__name__)

# Suggested start times must fall within [08:00, 23:00)
EARLIEST_SUGGESTION = 8 * 60
LATEST_SUGGESTION = 23 * 60
MAX_SUGGESTIONS = 3

SEVERITY_BY_TYPE = {
    CONFLICT_EXACT: SEVERITY_ERROR,
    CONFLICT_PARTIAL: SEVERITY_ERROR,
    CONFLICT_CLOSE: SEVERITY_WARNING,
    CONFLICT_NONE: SEVERITY_NONE,
}

OccupiedSlot = tuple[Session, Owner, Interval]


def _owners(students: Iterable[Student], groups: Iterable[Group]) -> Iterator[Owner]:
    # students first, then groups, both in insertion order
    yield from students
    yield from groups


def occupies_time(session: Session) -> bool:
    return session.status in OCCUPYING_STATUSES


def occupied_slots(
    students: Iterable[Student],
    date: str,
    groups: Iterable[Group] = (),
    exclude_session_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> list[OccupiedSlot]:
    """
    Collect every session occupying time on `date`, with its effective interval.
    Order follows the roster (owner order, then session order).
    """
    settings = settings or Settings()
    # both sides compared in canonical form, so "2025-3-10" matches "2025-03-10"
    day = normalize_date(date)
    if day is None:
        return []
    out: list[OccupiedSlot] = []
    for owner in _owners(students, groups):
        for session in owner.sessions:
            if exclude_session_id is not None and session.id == exclude_session_id:
                continue
            if not occupies_time(session):
                continue
            if normalize_date(session.date) != day:
                continue
            interval = resolve_effective_interval(session, owner, settings.default_session_duration)
            out.append((session, owner, interval))
    return out


def classify(candidate: Interval, other: Interval, threshold: int) -> tuple[str, Optional[int]]:
    """
    Return (conflict type, gap in minutes) for one pair of intervals.
    The gap is only reported for "close" pairs.
    """
    if overlaps(candidate, other):
        if candidate.start == other.start:
            return CONFLICT_EXACT, None
        return CONFLICT_PARTIAL, None

    gap = gap_between(candidate, other)
    if 0 <= gap < threshold:
        return CONFLICT_CLOSE, gap

    return CONFLICT_NONE, None


def _message(conflict_type: str, candidate: Interval, other: Interval, owner: Owner, gap: Optional[int]) -> str:
    name = owner.display_name
    if conflict_type == CONFLICT_EXACT:
        return f"Conflicts with {name}'s session at the same time"
    if conflict_type == CONFLICT_PARTIAL:
        return f"Overlaps with {name}'s session"
    if candidate.end <= other.start:
        return f"Only {gap} min gap before {name}'s session"
    return f"Only {gap} min gap after {name}'s session"


def _higher(current: str, new: str, rank: dict[str, int]) -> str:
    return new if rank[new] > rank[current] else current


def suggest_times(
    slots: Sequence[OccupiedSlot], duration: int, threshold: int, limit: int = MAX_SUGGESTIONS
) -> list[TimeSuggestion]:
    """
    Propose alternative start times around the day's occupied sessions:
    - one before the first session (ending `threshold` minutes before it)
    - one after each session, if the next session leaves enough room
    """
    intervals = sorted((interval for _, _, interval in slots), key=lambda iv: iv.start)
    if not intervals:
        return []

    suggestions: list[TimeSuggestion] = []

    first = intervals[0]
    if first.start >= duration + threshold:
        start = first.start - duration - threshold
        if start >= EARLIEST_SUGGESTION:
            time = minutes_to_time(start)
            suggestions.append(TimeSuggestion(time=time, label=f"Before: {format_time_12h(time)}"))

    for idx, interval in enumerate(intervals):
        nxt = intervals[idx + 1] if idx + 1 < len(intervals) else None
        start = interval.end + threshold
        end = start + duration
        if nxt is not None and end + threshold > nxt.start:
            continue
        if start < LATEST_SUGGESTION:
            time = minutes_to_time(start)
            suggestions.append(TimeSuggestion(time=time, label=f"After: {format_time_12h(time)}"))

    return suggestions[:limit]


def check_conflict(
    students: Sequence[Student],
    candidate: Candidate,
    groups: Sequence[Group] = (),
    exclude_session_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ConflictResult:
    """
    Check a candidate against every other occupying session on its date.

    Every contributing session is reported (no early exit), in roster order.
    Severity is the maximum seen: error > warning > none.
    """
    settings = settings or Settings()
    result = ConflictResult()

    if normalize_date(candidate.date) is None:
        logger.debug("Skipping conflict check for invalid date %r", candidate.date)
        return result

    duration = candidate.duration if candidate.duration and candidate.duration > 0 else settings.default_session_duration
    cand = make_interval(candidate.start_time, duration)

    slots = occupied_slots(students, candidate.date, groups, exclude_session_id, settings)
    for session, owner, other in slots:
        conflict_type, gap = classify(cand, other, settings.closeness_threshold)
        if conflict_type == CONFLICT_NONE:
            continue
        result.conflicts.append(
            ConflictDetail(
                session=session,
                owner=owner,
                type=conflict_type,
                message=_message(conflict_type, cand, other, owner, gap),
                gap=gap,
            )
        )
        result.type = _higher(result.type, conflict_type, CONFLICT_RANK)
        result.severity = _higher(result.severity, SEVERITY_BY_TYPE[conflict_type], SEVERITY_RANK)

    if result.severity != SEVERITY_NONE:
        result.suggestions = suggest_times(slots, duration, settings.closeness_threshold)

    logger.debug(
        "Conflict check %s %s (%d min): %d opposing, severity=%s",
        candidate.date,
        minutes_to_time(cand.start),
        duration,
        len(result.conflicts),
        result.severity,
    )
    return result


def find_session(
    students: Sequence[Student], owner_id: str, session_id: str, groups: Sequence[Group] = ()
) -> Optional[tuple[Session, Owner]]:
    for owner in _owners(students, groups):
        if owner.id != owner_id:
            continue
        for session in owner.sessions:
            if session.id == session_id:
                return session, owner
        return None
    return None


def check_restore_conflict(
    students: Sequence[Student],
    student_id: str,
    session_id: str,
    groups: Sequence[Group] = (),
    settings: Optional[Settings] = None,
) -> ConflictResult:
    """
    Check whether bringing a session back to "scheduled" would clash with the
    current roster. The session itself is never reported.
    """
    settings = settings or Settings()
    found = find_session(students, student_id, session_id, groups)
    if found is None:
        logger.debug("Restore check: session %s of %s not found", session_id, student_id)
        return ConflictResult()

    session, owner = found
    candidate = Candidate(
        date=session.date,
        start_time=resolve_start_time(session, owner),
        duration=resolve_duration(session, owner, settings.default_session_duration),
    )
    return check_conflict(students, candidate, groups, exclude_session_id=session_id, settings=settings)


def _gap_severity(gap: Optional[int], threshold: int) -> str:
    if gap is None:
        return "good"
    if gap < 0:
        return "critical"
    if gap < threshold:
        return "warning"
    return "good"


def get_sessions_with_gaps(
    students: Sequence[Student],
    date: str,
    groups: Sequence[Group] = (),
    settings: Optional[Settings] = None,
) -> list[SessionGap]:
    """
    All occupying sessions on `date`, ordered by effective start time, each
    annotated with the gap to the next session and its own conflict status.
    """
    settings = settings or Settings()
    if normalize_date(date) is None:
        return []

    slots = occupied_slots(students, date, groups, settings=settings)
    # sorted() is stable, so equal starts keep roster order
    slots = sorted(slots, key=lambda slot: slot[2].start)

    out: list[SessionGap] = []
    for idx, (session, owner, interval) in enumerate(slots):
        gap_after: Optional[int] = None
        if idx + 1 < len(slots):
            gap_after = slots[idx + 1][2].start - interval.end

        # Variable durations mean a session can overlap a non-adjacent one,
        # so compare against every other session of the day.
        worst = CONFLICT_NONE
        for other_idx, (_, _, other) in enumerate(slots):
            if other_idx == idx:
                continue
            conflict_type, _ = classify(interval, other, settings.closeness_threshold)
            worst = _higher(worst, conflict_type, CONFLICT_RANK)

        out.append(
            SessionGap(
                session=session,
                owner=owner,
                start=interval.start,
                end=interval.end,
                gap_after=gap_after,
                gap_severity=_gap_severity(gap_after, settings.closeness_threshold),
                has_conflict=worst != CONFLICT_NONE,
                conflict_type=worst if worst != CONFLICT_NONE else None,
            )
        )

    return out


def scan_all_conflicts(
    students: Sequence[Student],
    groups: Sequence[Group] = (),
    settings: Optional[Settings] = None,
) -> dict[str, ConflictResult]:
    """
    Re-check every occupying session against the rest of the roster.
    Returns only the sessions whose severity is not "none", keyed by session id.
    """
    settings = settings or Settings()
    results: dict[str, ConflictResult] = {}

    for owner in _owners(students, groups):
        for session in owner.sessions:
            if not occupies_time(session):
                continue
            candidate = Candidate(
                date=session.date,
                start_time=resolve_start_time(session, owner),
                duration=resolve_duration(session, owner, settings.default_session_duration),
            )
            result = check_conflict(students, candidate, groups, exclude_session_id=session.id, settings=settings)
            if result.severity != SEVERITY_NONE:
                results[session.id] = result

    logger.debug("Roster scan: %d sessions with conflicts", len(results))
    return results
