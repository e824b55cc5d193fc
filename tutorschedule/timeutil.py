"""
Time-interval utilities.

All arithmetic is local wall-clock minutes since midnight; there is no timezone
handling. Overlap rule (half-open intervals):
    start < other_end AND end > other_start
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from tutorschedule.model import DEFAULT_SESSION_DURATION, DEFAULT_SESSION_TIME, Interval, Owner, Session

MINUTES_PER_DAY = 24 * 60

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def time_to_minutes(hhmm: Optional[str], default: str = DEFAULT_SESSION_TIME) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.

    Never raises: a missing minute part counts as ':00', and empty or
    unparseable input falls back to `default`.
    """
    minutes = _parse_hhmm(hhmm or "")
    if minutes is None:
        minutes = _parse_hhmm(default)
    return minutes if minutes is not None else 16 * 60


def _parse_hhmm(text: str) -> Optional[int]:
    parts = text.strip().split(":")
    try:
        h = int(parts[0])
        m = int(parts[1]) if len(parts) > 1 and parts[1].strip() else 0
    except ValueError:
        return None
    return h * 60 + m


def minutes_to_time(minutes: int) -> str:
    # wrap into one day so that negative / overflowing values stay printable
    normalized = minutes % MINUTES_PER_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"


def format_time_12h(hhmm: Optional[str]) -> str:
    """
    '16:30' -> '4:30 PM'
    """
    minutes = time_to_minutes(hhmm) % MINUTES_PER_DAY
    h, m = divmod(minutes, 60)
    period = "PM" if h >= 12 else "AM"
    hour12 = h % 12 or 12
    return f"{hour12}:{m:02d} {period}"


def time_period(minutes: int) -> str:
    if minutes < 12 * 60:
        return "morning"
    if minutes < 17 * 60:
        return "afternoon"
    return "evening"


def is_valid_date(value: Optional[str]) -> bool:
    """
    Strict 'YYYY-MM-DD' check: zero padding required, calendar date must exist.
    """
    if not value or not DATE_RE.match(value.strip()):
        return False
    return normalize_date(value) is not None


def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Canonical 'YYYY-MM-DD' form of a date, or None if it is not a date.

    Accepts missing zero padding ('2025-3-10' -> '2025-03-10') so that a
    loosely written date still compares equal to the stored one.
    """
    if not value:
        return None
    try:
        parsed = datetime.strptime(value.strip(), "%Y-%m-%d")
    except ValueError:
        return None
    return parsed.strftime("%Y-%m-%d")


def interval_end(start: int, duration: int) -> int:
    return start + duration


def make_interval(start_time: Optional[str], duration: int) -> Interval:
    start = time_to_minutes(start_time)
    return Interval(start=start, end=interval_end(start, duration))


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and a.end > b.start


def gap_between(a: Interval, b: Interval) -> int:
    """
    Minutes from the end of the earlier interval to the start of the later one.
    Negative when the two intervals overlap.
    """
    first, second = (a, b) if a.start <= b.start else (b, a)
    return second.start - first.end


def _positive(value: Optional[int]) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def resolve_duration(session: Session, owner: Owner, default_duration: int = DEFAULT_SESSION_DURATION) -> int:
    return _positive(session.duration) or _positive(owner.session_duration) or default_duration


def resolve_start_time(session: Session, owner: Owner) -> str:
    return session.time or owner.session_time or DEFAULT_SESSION_TIME


def resolve_effective_interval(
    session: Session, owner: Owner, default_duration: int = DEFAULT_SESSION_DURATION
) -> Interval:
    """
    Apply the owner's defaults to a session once, before any comparison.
    """
    return make_interval(resolve_start_time(session, owner), resolve_duration(session, owner, default_duration))
