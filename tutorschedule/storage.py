"""
Roster snapshot storage.

This module manages the file:

    data/roster.json

    {"students": [ ... ], "groups": [ ... ]}

Keys are camelCase (sessionTime, sessionDuration, scheduleDays, ...), the same
shape the tutoring app exports. The scheduling engine only ever reads a
snapshot; this module turns the file into model objects and back.

Loading is deliberately defensive: a missing or corrupted file gives an empty
roster, and malformed entries are skipped instead of aborting the whole load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from tutorschedule.model import (
    DEFAULT_SESSION_TIME,
    SCHEDULED,
    SESSION_STATUSES,
    CancellationPolicy,
    Group,
    Roster,
    ScheduleDay,
    Session,
    StatusChange,
    Student,
)

logger = logging.getLogger(__name__)


def _default_roster_path() -> Path:
    """
    Return the default path of roster.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "roster.json"


def _str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def _int(x: Any) -> Optional[int]:
    if isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    if isinstance(x, float) and x.is_integer():
        return int(x)
    return None


def _float(x: Any) -> Optional[float]:
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return None
    return float(x)


def _list(x: Any) -> list[Any]:
    return x if isinstance(x, list) else []


def _session_from_dict(d: Any) -> Optional[Session]:
    if not isinstance(d, dict):
        return None
    sid = _str(d.get("id"))
    date = _str(d.get("date"))
    if not sid or not date:
        return None

    status = _str(d.get("status")) or SCHEDULED
    if status not in SESSION_STATUSES:
        status = SCHEDULED

    history: list[StatusChange] = []
    for h in _list(d.get("history")):
        if isinstance(h, dict) and _str(h.get("status")) in SESSION_STATUSES:
            history.append(
                StatusChange(
                    status=str(h["status"]).strip(),
                    timestamp=_str(h.get("timestamp")) or "",
                    note=_str(h.get("note")),
                )
            )

    return Session(
        id=sid,
        date=date,
        time=_str(d.get("time")),
        duration=_int(d.get("duration")),
        status=status,
        topic=_str(d.get("topic")),
        notes=_str(d.get("notes")),
        homework=_str(d.get("homework")),
        history=history,
    )


def _sessions_from_list(items: Any) -> list[Session]:
    out: list[Session] = []
    for item in _list(items):
        session = _session_from_dict(item)
        if session is None:
            logger.warning("Skipping malformed session entry: %r", item)
            continue
        out.append(session)
    return out


def _schedule_day_from_dict(d: Any) -> Optional[ScheduleDay]:
    if not isinstance(d, dict):
        return None
    day = _int(d.get("dayOfWeek"))
    if day is None or not (0 <= day <= 6):
        return None
    return ScheduleDay(day_of_week=day, time=_str(d.get("time")), duration=_int(d.get("duration")))


def _student_from_dict(d: Any) -> Optional[Student]:
    if not isinstance(d, dict):
        return None
    sid = _str(d.get("id"))
    if not sid:
        return None

    policy = None
    raw_policy = d.get("cancellationPolicy")
    if isinstance(raw_policy, dict) and _int(raw_policy.get("monthlyLimit")) is not None:
        policy = CancellationPolicy(monthly_limit=int(raw_policy["monthlyLimit"]))

    days = [day for day in (_schedule_day_from_dict(x) for x in _list(d.get("scheduleDays"))) if day]

    return Student(
        id=sid,
        name=_str(d.get("name")) or sid,
        session_time=_str(d.get("sessionTime")) or DEFAULT_SESSION_TIME,
        session_duration=_int(d.get("sessionDuration")),
        session_type=_str(d.get("sessionType")) or "onsite",
        schedule_days=days,
        sessions=_sessions_from_list(d.get("sessions")),
        phone=_str(d.get("phone")),
        custom_price_onsite=_float(d.get("customPriceOnsite")),
        custom_price_online=_float(d.get("customPriceOnline")),
        cancellation_policy=policy,
        semester_start=_str(d.get("semesterStart")),
        semester_end=_str(d.get("semesterEnd")),
    )


def _group_from_dict(d: Any) -> Optional[Group]:
    if not isinstance(d, dict):
        return None
    gid = _str(d.get("id"))
    if not gid:
        return None
    return Group(
        id=gid,
        name=_str(d.get("name")) or gid,
        session_time=_str(d.get("sessionTime")) or DEFAULT_SESSION_TIME,
        session_duration=_int(d.get("sessionDuration")),
        session_type=_str(d.get("sessionType")) or "onsite",
        sessions=_sessions_from_list(d.get("sessions")),
    )


def roster_from_dict(data: Any) -> Roster:
    if not isinstance(data, dict):
        return Roster()

    students: list[Student] = []
    for item in _list(data.get("students")):
        student = _student_from_dict(item)
        if student is None:
            logger.warning("Skipping malformed student entry")
            continue
        students.append(student)

    groups: list[Group] = []
    for item in _list(data.get("groups")):
        group = _group_from_dict(item)
        if group is None:
            logger.warning("Skipping malformed group entry")
            continue
        groups.append(group)

    return Roster(students=students, groups=groups)


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _session_to_dict(s: Session) -> dict[str, Any]:
    return _drop_none(
        {
            "id": s.id,
            "date": s.date,
            "time": s.time,
            "duration": s.duration,
            "status": s.status,
            "topic": s.topic,
            "notes": s.notes,
            "homework": s.homework,
            "history": [_drop_none({"status": h.status, "timestamp": h.timestamp, "note": h.note}) for h in s.history],
        }
    )


def roster_to_dict(roster: Roster) -> dict[str, Any]:
    students = []
    for st in roster.students:
        students.append(
            _drop_none(
                {
                    "id": st.id,
                    "name": st.name,
                    "sessionTime": st.session_time,
                    "sessionDuration": st.session_duration,
                    "sessionType": st.session_type,
                    "scheduleDays": [
                        _drop_none({"dayOfWeek": d.day_of_week, "time": d.time, "duration": d.duration})
                        for d in st.schedule_days
                    ],
                    "sessions": [_session_to_dict(s) for s in st.sessions],
                    "phone": st.phone,
                    "customPriceOnsite": st.custom_price_onsite,
                    "customPriceOnline": st.custom_price_online,
                    "cancellationPolicy": (
                        {"monthlyLimit": st.cancellation_policy.monthly_limit} if st.cancellation_policy else None
                    ),
                    "semesterStart": st.semester_start,
                    "semesterEnd": st.semester_end,
                }
            )
        )

    groups = []
    for g in roster.groups:
        groups.append(
            _drop_none(
                {
                    "id": g.id,
                    "name": g.name,
                    "sessionTime": g.session_time,
                    "sessionDuration": g.session_duration,
                    "sessionType": g.session_type,
                    "sessions": [_session_to_dict(s) for s in g.sessions],
                }
            )
        )

    return {"students": students, "groups": groups}


def load_roster(path: str | Path | None = None) -> Roster:
    """
    Load the roster snapshot from roster.json.

    Returns an empty roster if the file does not exist or is invalid.
    """
    # Use custom path if provided (mainly for tests),
    # otherwise fall back to the default package location
    roster_path = Path(path) if path is not None else _default_roster_path()

    # Not exported yet -> nothing scheduled
    if not roster_path.exists():
        return Roster()

    try:
        data = json.loads(roster_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read roster from %s (%s); starting empty", roster_path, exc)
        return Roster()

    return roster_from_dict(data)


def save_roster(roster: Roster, path: str | Path | None = None) -> None:
    """
    Save the roster snapshot to roster.json.

    Creates parent directories if needed.
    """
    roster_path = Path(path) if path is not None else _default_roster_path()
    roster_path.parent.mkdir(parents=True, exist_ok=True)

    payload = roster_to_dict(roster)
    roster_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
