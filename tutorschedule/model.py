"""
Central data model definitions used across the project.

This module defines the canonical structure of the roster (students, groups,
sessions) and of the derived conflict/gap results so that:
- all modules share the same field names
- the detector, the storage layer and the CLI agree on one shape
- results stay plain data (no behavior hidden in the model)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, List, Union


# Session status values
SCHEDULED = "scheduled"
COMPLETED = "completed"
CANCELLED = "cancelled"
VACATION = "vacation"

SESSION_STATUSES = (SCHEDULED, COMPLETED, CANCELLED, VACATION)

# Only these statuses occupy the tutor's time
OCCUPYING_STATUSES = (SCHEDULED, COMPLETED)

# Severity, ordered from lowest to highest
SEVERITY_NONE = "none"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"

SEVERITY_RANK = {SEVERITY_NONE: 0, SEVERITY_WARNING: 1, SEVERITY_ERROR: 2}

# Conflict types, ordered from lowest to highest
CONFLICT_NONE = "none"
CONFLICT_CLOSE = "close"
CONFLICT_PARTIAL = "partial"
CONFLICT_EXACT = "exact"

CONFLICT_RANK = {CONFLICT_NONE: 0, CONFLICT_CLOSE: 1, CONFLICT_PARTIAL: 2, CONFLICT_EXACT: 3}

DEFAULT_SESSION_TIME = "16:00"
DEFAULT_SESSION_DURATION = 60


@dataclass
class StatusChange:
    status: str
    timestamp: str
    note: Optional[str] = None


@dataclass
class Session:
    """
    One concrete occurrence of a student's (or group's) schedule.

    `time` and `duration` are optional; when missing, the owner's defaults apply.
    """

    id: str
    date: str
    time: Optional[str] = None
    duration: Optional[int] = None
    status: str = SCHEDULED
    topic: Optional[str] = None
    notes: Optional[str] = None
    homework: Optional[str] = None
    history: List[StatusChange] = field(default_factory=list)


@dataclass
class ScheduleDay:
    # 0 = Sunday, 1 = Monday, ...
    day_of_week: int
    time: Optional[str] = None
    duration: Optional[int] = None


@dataclass
class CancellationPolicy:
    monthly_limit: int


@dataclass
class Student:
    """
    A tutoring client, owning its list of sessions.
    """

    id: str
    name: str
    session_time: str = DEFAULT_SESSION_TIME
    session_duration: Optional[int] = None
    session_type: str = "onsite"
    schedule_days: List[ScheduleDay] = field(default_factory=list)
    sessions: List[Session] = field(default_factory=list)
    phone: Optional[str] = None
    custom_price_onsite: Optional[float] = None
    custom_price_online: Optional[float] = None
    cancellation_policy: Optional[CancellationPolicy] = None
    semester_start: Optional[str] = None
    semester_end: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name


@dataclass
class Group:
    """
    Several students taught together in one shared session.
    """

    id: str
    name: str
    session_time: str = DEFAULT_SESSION_TIME
    session_duration: Optional[int] = None
    session_type: str = "onsite"
    sessions: List[Session] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return f"Group {self.name}"


Owner = Union[Student, Group]


@dataclass
class Candidate:
    """
    A proposed (date, start time, duration) not yet committed to the roster.
    """

    date: str
    start_time: str
    duration: Optional[int] = None


@dataclass(frozen=True)
class Interval:
    # half-open [start, end) in minutes since midnight
    start: int
    end: int


@dataclass
class ConflictDetail:
    session: Session
    owner: Owner
    type: str
    message: str
    gap: Optional[int] = None


@dataclass
class TimeSuggestion:
    time: str
    label: str


@dataclass
class ConflictResult:
    severity: str = SEVERITY_NONE
    type: str = CONFLICT_NONE
    conflicts: List[ConflictDetail] = field(default_factory=list)
    suggestions: List[TimeSuggestion] = field(default_factory=list)


@dataclass
class SessionGap:
    """
    One session in a same-day ordered view, annotated with the gap to the next.
    """

    session: Session
    owner: Owner
    start: int
    end: int
    gap_after: Optional[int]
    gap_severity: str
    has_conflict: bool
    conflict_type: Optional[str]


@dataclass
class AvailableSlot:
    time: str
    label: str
    duration: int
    period: str


@dataclass
class Roster:
    students: List[Student] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)


# Weekly planning (derived from students' schedule days)


@dataclass
class WeeklySlot:
    """
    One recurring weekly session taken from a student's schedule days.
    """

    time: str
    duration: int
    session_type: str
    student_name: str


@dataclass
class PeakHour:
    hour: int
    session_count: int
    is_peak: bool


@dataclass
class WorkloadBalance:
    morning_count: int
    afternoon_count: int
    evening_count: int
    busiest_period: str
    quietest_period: str
    is_balanced: bool


@dataclass
class SuggestedTimeSlot:
    time: str
    label: str
    reason: str
    priority: str
    period: str
    is_peak_hour: bool = False


@dataclass
class DaySuggestion:
    day_of_week: int
    day_name: str
    type: str
    priority: str
    message: str
    session_count: int
    online_count: int
    onsite_count: int
    suggested_time_slots: List[SuggestedTimeSlot] = field(default_factory=list)
    is_recommended: bool = False
    is_warning: bool = False
    travel_consideration: Optional[str] = None
    consecutive_warning: Optional[str] = None
    energy_tip: Optional[str] = None


@dataclass
class WeeklySuggestions:
    day_suggestions: List[DaySuggestion]
    best_days: List[int]
    avoid_days: List[int]
    general_tips: List[str]
    overall_load: str
    peak_hours: List[PeakHour]
    workload_balance: WorkloadBalance
    total_sessions: int
    avg_sessions_per_day: float
    consecutive_session_days: List[int]
    longest_streak: int
    recommendations: List[str] = field(default_factory=list)
