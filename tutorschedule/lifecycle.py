"""
Session status transitions.

    scheduled -> completed | cancelled | vacation
    completed | cancelled | vacation -> scheduled   (restore / undo)

Restoring a session can collide with sessions added while it was inactive, so
`restore_session` re-checks the current roster before the caller applies it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from tutorschedule.config import Settings
from tutorschedule.conflicts import check_restore_conflict, find_session
from tutorschedule.model import (
    CANCELLED,
    COMPLETED,
    SCHEDULED,
    SESSION_STATUSES,
    VACATION,
    ConflictResult,
    Group,
    Session,
    StatusChange,
    Student,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    SCHEDULED: {COMPLETED, CANCELLED, VACATION},
    COMPLETED: {SCHEDULED},
    CANCELLED: {SCHEDULED},
    VACATION: {SCHEDULED},
}


def change_status(
    session: Session, status: str, note: Optional[str] = None, now: Optional[datetime] = None
) -> Session:
    """
    Move a session to `status` and record the change in its history.

    Raises ValueError for unknown statuses and forbidden transitions.
    """
    if status not in SESSION_STATUSES:
        raise ValueError(f"Unknown session status: {status!r}")
    if status not in ALLOWED_TRANSITIONS.get(session.status, set()):
        raise ValueError(f"Cannot change session {session.id} from {session.status!r} to {status!r}")

    stamp = (now or datetime.now()).isoformat(timespec="seconds")
    session.history.append(StatusChange(status=status, timestamp=stamp, note=note))
    logger.info("Session %s: %s -> %s", session.id, session.status, status)
    session.status = status
    return session


def restore_session(
    students: Sequence[Student],
    student_id: str,
    session_id: str,
    groups: Sequence[Group] = (),
    settings: Optional[Settings] = None,
) -> tuple[Session, ConflictResult]:
    """
    Look up an inactive session and check it against the current roster.

    Nothing is changed here; conflicts are advisory and the caller decides
    whether to go ahead with change_status(session, "scheduled").
    Raises LookupError if the session does not exist, ValueError if it is
    already scheduled.
    """
    found = find_session(students, student_id, session_id, groups)
    if found is None:
        raise LookupError(f"Session {session_id} of {student_id} not found")

    session, _ = found
    if session.status == SCHEDULED:
        raise ValueError(f"Session {session_id} is already scheduled")

    result = check_restore_conflict(students, student_id, session_id, groups, settings)
    return session, result
