"""
Free time slots on a given date.

Slots are generated every 30 minutes inside the working hours. A slot is free
when it keeps at least the closeness threshold away from every session that
occupies time on that date.
"""

from __future__ import annotations

from typing import Optional, Sequence

from tutorschedule.config import Settings
from tutorschedule.conflicts import occupied_slots
from tutorschedule.model import AvailableSlot, Group, Student
from tutorschedule.timeutil import format_time_12h, minutes_to_time, normalize_date, time_period, time_to_minutes

SLOT_STEP_MINUTES = 30

# Common tutoring start times, offered first when present
PREFERRED_TIMES = ["14:00", "15:00", "16:00", "17:00", "18:00", "19:00", "20:00"]


def get_available_slots(
    students: Sequence[Student],
    date: str,
    duration: Optional[int] = None,
    working_hours_start: Optional[str] = None,
    working_hours_end: Optional[str] = None,
    groups: Sequence[Group] = (),
    settings: Optional[Settings] = None,
) -> list[AvailableSlot]:
    settings = settings or Settings()
    if normalize_date(date) is None:
        return []

    duration = duration if duration and duration > 0 else settings.default_session_duration
    work_start = time_to_minutes(working_hours_start or settings.working_hours_start)
    work_end = time_to_minutes(working_hours_end or settings.working_hours_end)
    buffer = settings.closeness_threshold

    busy = [interval for _, _, interval in occupied_slots(students, date, groups, settings=settings)]

    out: list[AvailableSlot] = []
    slot_start = work_start
    while slot_start + duration <= work_end:
        slot_end = slot_start + duration
        blocked = any(slot_start < iv.end + buffer and slot_end + buffer > iv.start for iv in busy)
        if not blocked:
            time = minutes_to_time(slot_start)
            out.append(
                AvailableSlot(
                    time=time,
                    label=format_time_12h(time),
                    duration=duration,
                    period=time_period(slot_start),
                )
            )
        slot_start += SLOT_STEP_MINUTES

    return out


def _preference_key(slot: AvailableSlot) -> tuple[int, int]:
    if slot.time in PREFERRED_TIMES:
        return (0, PREFERRED_TIMES.index(slot.time))
    return (1, time_to_minutes(slot.time))


def get_suggested_slots(
    students: Sequence[Student],
    date: str,
    duration: Optional[int] = None,
    working_hours_start: Optional[str] = None,
    working_hours_end: Optional[str] = None,
    max_suggestions: int = 6,
    groups: Sequence[Group] = (),
    settings: Optional[Settings] = None,
) -> list[AvailableSlot]:
    """
    Free slots ranked for display: preferred common times first (in their
    listed order), then the remaining slots by time.
    """
    slots = get_available_slots(
        students, date, duration, working_hours_start, working_hours_end, groups=groups, settings=settings
    )
    return sorted(slots, key=_preference_key)[:max_suggestions]
