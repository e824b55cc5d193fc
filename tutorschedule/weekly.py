"""
Weekly planning advice.

Looks at the recurring week (every student's schedule days) rather than at
concrete dated sessions, and answers "which weekday and time should a new
student get?":

- each weekday is classified as free / light / moderate / busy
  (busy from BUSY_DAY_THRESHOLD sessions on)
- days where all sessions share the new student's session type are preferred
  (same_type_cluster); days mixing online and onsite are flagged (mixed_type)
- back-to-back sessions (less than 15 min apart) are counted per day
- peak hours and the morning / afternoon / evening balance drive the
  priority of suggested start times
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from tutorschedule.config import Settings
from tutorschedule.model import (
    DEFAULT_SESSION_TIME,
    DaySuggestion,
    PeakHour,
    Student,
    SuggestedTimeSlot,
    WeeklySlot,
    WeeklySuggestions,
    WorkloadBalance,
)
from tutorschedule.timeutil import format_time_12h, minutes_to_time, time_period, time_to_minutes

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

BUSY_DAY_THRESHOLD = 5
CONSECUTIVE_GAP_MINUTES = 15
TRAVEL_MINUTES = 45
FIRST_PEAK_HOUR = 8
LAST_PEAK_HOUR = 21
MAX_DAY_SLOTS = 5

PERIODS = ["morning", "afternoon", "evening"]
PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def _start(slot: WeeklySlot) -> int:
    return time_to_minutes(slot.time)


def weekly_slots(students: Sequence[Student], settings: Optional[Settings] = None) -> list[list[WeeklySlot]]:
    """
    Seven lists (index 0 = Sunday) of recurring sessions, each ordered by start time.
    """
    settings = settings or Settings()
    days: list[list[WeeklySlot]] = [[] for _ in range(7)]
    for student in students:
        for day in student.schedule_days:
            if not 0 <= day.day_of_week <= 6:
                continue
            days[day.day_of_week].append(
                WeeklySlot(
                    time=day.time or student.session_time or DEFAULT_SESSION_TIME,
                    duration=day.duration or student.session_duration or settings.default_session_duration,
                    session_type=student.session_type,
                    student_name=student.name,
                )
            )
    return [sorted(slots, key=_start) for slots in days]


def count_consecutive_sessions(slots: Sequence[WeeklySlot]) -> int:
    """
    Number of neighbouring pairs with less than 15 minutes between them.
    """
    ordered = sorted(slots, key=_start)
    count = 0
    for current, nxt in zip(ordered, ordered[1:]):
        if _start(nxt) - (_start(current) + current.duration) < CONSECUTIVE_GAP_MINUTES:
            count += 1
    return count


def analyze_peak_hours(days: Sequence[Sequence[WeeklySlot]]) -> list[PeakHour]:
    """
    Sessions per starting hour (08-21). An hour is a peak when it has at
    least 60% of the busiest hour's count.
    """
    counts: dict[int, int] = {}
    for slots in days:
        for slot in slots:
            hour = _start(slot) // 60
            counts[hour] = counts.get(hour, 0) + 1

    threshold = max(counts.values(), default=0) * 0.6
    out: list[PeakHour] = []
    for hour in range(FIRST_PEAK_HOUR, LAST_PEAK_HOUR + 1):
        n = counts.get(hour, 0)
        out.append(PeakHour(hour=hour, session_count=n, is_peak=n > 0 and n >= threshold))
    return out


def analyze_workload_balance(days: Sequence[Sequence[WeeklySlot]]) -> WorkloadBalance:
    counts = {period: 0 for period in PERIODS}
    for slots in days:
        for slot in slots:
            counts[time_period(_start(slot))] += 1

    # ties go to the later period
    busiest = PERIODS[0]
    quietest = PERIODS[0]
    for period in PERIODS[1:]:
        if counts[period] >= counts[busiest]:
            busiest = period
        if counts[period] <= counts[quietest]:
            quietest = period

    high = max(counts.values())
    low = min(counts.values())
    balanced = high <= 3 if low == 0 else high / low <= 2

    return WorkloadBalance(
        morning_count=counts["morning"],
        afternoon_count=counts["afternoon"],
        evening_count=counts["evening"],
        busiest_period=busiest,
        quietest_period=quietest,
        is_balanced=balanced,
    )


def _slot(minutes: int, reason: str, priority: str, peak: bool) -> SuggestedTimeSlot:
    time = minutes_to_time(minutes)
    return SuggestedTimeSlot(
        time=time,
        label=format_time_12h(time),
        reason=reason,
        priority=priority,
        period=time_period(minutes),
        is_peak_hour=peak,
    )


def find_day_time_slots(
    slots: Sequence[WeeklySlot],
    session_type: Optional[str],
    peak_hours: Sequence[PeakHour],
    balance: WorkloadBalance,
    settings: Optional[Settings] = None,
) -> list[SuggestedTimeSlot]:
    """
    Start times for a new session on one weekday: before the first session,
    in gaps wide enough for a session plus breaks, and after the last one.
    Onsite sessions next to onsite sessions need travel time instead of the
    usual break.
    """
    settings = settings or Settings()
    day_start = time_to_minutes(settings.working_hours_start)
    day_end = time_to_minutes(settings.working_hours_end)
    duration = settings.default_session_duration
    min_gap = settings.closeness_threshold
    onsite = session_type == "onsite"

    peaks = {p.hour for p in peak_hours if p.is_peak}

    def period_priority(period: str) -> str:
        if period == balance.quietest_period:
            return "high"
        if period == balance.busiest_period:
            return "low"
        return "medium"

    if not slots:
        out: list[SuggestedTimeSlot] = []
        for time, reason in [
            ("10:00", "Comfortable morning time"),
            ("14:00", "Early afternoon"),
            ("16:00", "Late afternoon, the most common time"),
            ("18:00", "Evening"),
        ]:
            minutes = time_to_minutes(time)
            peak = minutes // 60 in peaks
            priority = period_priority(time_period(minutes))
            if not peak and priority == "medium":
                priority = "high"
                reason += " (quiet hour)"
            elif peak and priority == "high":
                priority = "medium"
                reason += " (peak hour)"
            out.append(_slot(minutes, reason, priority, peak))
        return sorted(out, key=lambda s: s.priority != "high")

    ordered = sorted(slots, key=_start)
    out = []

    first = ordered[0]
    first_start = _start(first)
    needed = duration + (TRAVEL_MINUTES if onsite and first.session_type == "onsite" else min_gap)
    if first_start - day_start >= needed:
        minutes = max(day_start, first_start - needed)
        peak = minutes // 60 in peaks
        reason = f"Before {first.student_name}'s session" + (" (peak hour)" if peak else "")
        out.append(_slot(minutes, reason, "low" if peak else period_priority(time_period(minutes)), peak))

    for current, nxt in zip(ordered, ordered[1:]):
        current_end = _start(current) + current.duration
        gap = _start(nxt) - current_end
        travel = onsite and (current.session_type == "onsite" or nxt.session_type == "onsite")
        needed = duration + (TRAVEL_MINUTES if travel else min_gap) * 2
        if gap >= needed:
            minutes = current_end + (TRAVEL_MINUTES if onsite else min_gap)
            reason = f"Between {current.student_name} and {nxt.student_name}"
            out.append(_slot(minutes, reason, "high", minutes // 60 in peaks))

    last = ordered[-1]
    last_end = _start(last) + last.duration
    needed = duration + (TRAVEL_MINUTES if onsite and last.session_type == "onsite" else min_gap)
    if day_end - last_end >= needed:
        minutes = last_end + (TRAVEL_MINUTES if onsite else min_gap)
        peak = minutes // 60 in peaks
        reason = f"After {last.student_name}'s session" + (" (peak hour)" if peak else "")
        out.append(_slot(minutes, reason, "medium" if peak else period_priority(time_period(minutes)), peak))

    out.sort(key=lambda s: (s.is_peak_hour, PRIORITY_RANK[s.priority]))
    return out[:MAX_DAY_SLOTS]


def classify_day(
    day_of_week: int,
    slots: Sequence[WeeklySlot],
    session_type: Optional[str],
    time_slots: list[SuggestedTimeSlot],
) -> DaySuggestion:
    total = len(slots)
    online = sum(1 for s in slots if s.session_type == "online")
    onsite = total - online

    day = DaySuggestion(
        day_of_week=day_of_week,
        day_name=DAY_NAMES[day_of_week],
        type="light_day",
        priority="medium",
        message="",
        session_count=total,
        online_count=online,
        onsite_count=onsite,
        suggested_time_slots=time_slots,
    )

    if total == 0:
        day.type, day.priority, day.is_recommended = "free_day", "high", True
        day.message = "Free day, highly recommended"
    elif total <= 2:
        day.type, day.priority, day.is_recommended = "light_day", "high", True
        day.message = f"Light day ({total} sessions), a good choice"
    elif total < BUSY_DAY_THRESHOLD:
        day.type, day.priority = "moderate_day", "medium"
        day.message = f"Moderate day ({total} sessions), acceptable"
    else:
        day.type, day.priority, day.is_warning = "busy_day", "low", True
        day.message = f"Busy day ({total} sessions), better avoided"

    if session_type and total > 0 and not day.is_warning:
        if session_type == "online" and online > 0 and onsite == 0:
            day.type, day.priority, day.is_recommended = "same_type_cluster", "high", True
            day.message = f"All sessions online ({online}), easy to group"
        elif session_type == "onsite" and onsite > 0 and online == 0:
            day.type, day.priority, day.is_recommended = "same_type_cluster", "high", True
            day.message = f"All sessions onsite ({onsite}), easy to group"
            day.travel_consideration = "Leave enough time to travel between onsite sessions"
        elif online > 0 and onsite > 0:
            day.type = "mixed_type"
            day.message = f"Mixed day ({online} online, {onsite} onsite)"
            if session_type == "onsite":
                day.travel_consideration = "You may need travel time between onsite and online sessions"

    if session_type == "onsite" and onsite >= 2:
        day.travel_consideration = f"{onsite} onsite sessions, make sure there is time to travel"

    consecutive = count_consecutive_sessions(slots)
    if consecutive > 0:
        day.consecutive_warning = f"{consecutive} back-to-back sessions without a break"

    periods = [time_period(_start(s)) for s in slots]
    if periods.count("evening") >= 3:
        day.energy_tip = "Mostly evening sessions, make sure to rest"
    elif periods.count("morning") >= 3:
        day.energy_tip = "Mostly morning sessions, start the day early"

    return day


def _best_day_key(day: DaySuggestion) -> tuple[bool, bool, int]:
    # free days first, then same-type clusters, then the lightest days
    return (day.session_count != 0, day.type != "same_type_cluster", day.session_count)


def analyze_week(
    students: Sequence[Student],
    session_type: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> WeeklySuggestions:
    """
    Weekly advice for placing a new student of `session_type` ("online",
    "onsite" or None when not chosen yet).
    """
    settings = settings or Settings()
    days = weekly_slots(students, settings)

    peak_hours = analyze_peak_hours(days)
    balance = analyze_workload_balance(days)

    total = sum(len(slots) for slots in days)
    consecutive_days = [i for i, slots in enumerate(days) if count_consecutive_sessions(slots) > 0]

    longest_streak = 0
    streak = 0
    for slots in days:
        streak = streak + 1 if slots else 0
        longest_streak = max(longest_streak, streak)

    if total > 25:
        overall_load = "heavy"
    elif total > 12:
        overall_load = "moderate"
    else:
        overall_load = "light"

    day_suggestions = [
        classify_day(i, slots, session_type, find_day_time_slots(slots, session_type, peak_hours, balance, settings))
        for i, slots in enumerate(days)
    ]

    best = sorted((d for d in day_suggestions if d.is_recommended and not d.is_warning), key=_best_day_key)
    best_days = [d.day_of_week for d in best[:3]]
    avoid_days = [d.day_of_week for d in day_suggestions if d.is_warning]

    tips: list[str] = []
    if overall_load == "heavy":
        tips.append("Your week is crowded, try to spread sessions out")
    if best_days:
        tips.append("Best days to add: " + ", ".join(DAY_NAMES[d] for d in best_days))
    if 0 < len(avoid_days) < 5:
        tips.append(
            f"Busy days ({BUSY_DAY_THRESHOLD}+ sessions): " + ", ".join(DAY_NAMES[d] for d in avoid_days)
        )
    counts = [len(slots) for slots in days]
    if max(counts) - min(counts) > 4:
        tips.append("Your week is unbalanced, try to spread sessions evenly")
    if session_type == "onsite" and any(d.onsite_count >= 2 for d in day_suggestions):
        tips.append("Leave at least 30-60 minutes between onsite sessions for travel")

    recommendations: list[str] = []
    peak_list = [p for p in peak_hours if p.is_peak]
    if peak_list:
        recommendations.append(
            "Peak hours: " + ", ".join(format_time_12h(f"{p.hour}:00") for p in peak_list)
        )
    if not balance.is_balanced:
        recommendations.append(
            f"Most sessions are in the {balance.busiest_period}; try the {balance.quietest_period}"
        )
    if longest_streak >= 5:
        recommendations.append(f"{longest_streak} working days in a row, take a day off")
    if all(counts) and total > 10:
        recommendations.append("No rest day in the week, keep at least one day free")
    online_total = sum(d.online_count for d in day_suggestions)
    onsite_total = sum(d.onsite_count for d in day_suggestions)
    if online_total and onsite_total and max(online_total, onsite_total) / min(online_total, onsite_total) > 3:
        dominant = "online" if online_total > onsite_total else "onsite"
        recommendations.append(f"Most sessions are {dominant}; some variety may help")

    logger.debug("Weekly analysis: %d recurring sessions, load=%s, best=%s", total, overall_load, best_days)

    return WeeklySuggestions(
        day_suggestions=day_suggestions,
        best_days=best_days,
        avoid_days=avoid_days,
        general_tips=tips,
        overall_load=overall_load,
        peak_hours=peak_hours,
        workload_balance=balance,
        total_sessions=total,
        avg_sessions_per_day=total / 7,
        consecutive_session_days=consecutive_days,
        longest_streak=longest_streak,
        recommendations=recommendations,
    )
