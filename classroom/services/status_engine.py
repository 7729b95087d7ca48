"""
Status derivation for assignments and their submission records.

Everything in here is pure: callers pass the current time in, nothing reads
the clock and nothing touches the database.

Two kinds of status live side by side:

- the *aggregate* status stored on the assignment, a strict priority ladder
  over how many assigned students have delivered / been graded;
- the *display* status, what a particular viewer is shown (a student sees
  their own record, the owning teacher sees the most urgent record).

``late`` is a specialization of ``pending`` once the due date has passed. It
is persisted when a write happens after the deadline, and projected at read
time otherwise. It never feeds the aggregate ladder, so an assignment with
some late students keeps whatever status its delivered records give it.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from classroom.models.assignment import Assignment
from classroom.models.enums import AssignmentStatus, SubmissionStatus
from classroom.models.submission import Submission

DELIVERED_STATUSES = frozenset(
    {
        SubmissionStatus.SUBMITTED.value,
        SubmissionStatus.AWAITING_CORRECTION.value,
        SubmissionStatus.GRADED.value,
    }
)

# lower rank is shown first to the teacher
TEACHER_DISPLAY_RANK = {
    SubmissionStatus.LATE.value: 1,
    SubmissionStatus.AWAITING_CORRECTION.value: 2,
    SubmissionStatus.RETURNED.value: 3,
    SubmissionStatus.GRADED.value: 4,
    SubmissionStatus.SUBMITTED.value: 5,
    SubmissionStatus.PENDING.value: 6,
}


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_past_due(due_at: datetime, now: datetime) -> bool:
    return as_utc(now) > as_utc(due_at)


def derive_aggregate_status(statuses: Iterable[str], total: int) -> AssignmentStatus:
    """
    Map the record statuses of one assignment to its aggregate status.

    ``total`` is the number of assigned students, not the number of records.
    The checks run top to bottom and the first match wins.
    """
    statuses = list(statuses)
    delivered = sum(1 for s in statuses if s in DELIVERED_STATUSES)
    graded_n = statuses.count(SubmissionStatus.GRADED.value)
    awaiting_n = statuses.count(SubmissionStatus.AWAITING_CORRECTION.value)

    if total == 0:
        return AssignmentStatus.ACTIVE
    if graded_n == total:
        return AssignmentStatus.FULLY_GRADED
    if graded_n > 0:
        return AssignmentStatus.PARTIALLY_GRADED
    if awaiting_n > 0:
        return AssignmentStatus.AWAITING_CORRECTION
    if delivered == total:
        return AssignmentStatus.FULLY_SUBMITTED
    if delivered > 0:
        return AssignmentStatus.PARTIALLY_SUBMITTED
    return AssignmentStatus.ACTIVE


def effective_status(record: Submission, due_at: datetime, now: datetime) -> str:
    """Status of ``record`` as seen at ``now``: pending past the due date reads as late."""
    if record.status == SubmissionStatus.PENDING.value and is_past_due(due_at, now):
        return SubmissionStatus.LATE.value
    return record.status


def apply_late_detection(assignment: Assignment, now: datetime) -> list[int]:
    """
    Re-derive ``late`` on every record that has not been delivered.

    Past the due date pending records become late; if the due date was moved
    forward, late records go back to pending. Returns the affected student ids.
    """
    if is_past_due(assignment.due_at, now):
        source, target = SubmissionStatus.PENDING.value, SubmissionStatus.LATE.value
    else:
        source, target = SubmissionStatus.LATE.value, SubmissionStatus.PENDING.value

    flipped = []
    for student_id, record in assignment.submissions.items():
        if record.status == source:
            record.status = target
            flipped.append(student_id)
    return flipped


def _status_without_record(assignment: Assignment, now: datetime) -> str:
    if is_past_due(assignment.due_at, now):
        return SubmissionStatus.LATE.value
    return SubmissionStatus.PENDING.value


def student_display_status(assignment: Assignment, student_id: int, now: datetime) -> str:
    record = assignment.submissions.get(student_id)
    if record is None:
        return _status_without_record(assignment, now)
    return effective_status(record, assignment.due_at, now)


def teacher_display_status(assignment: Assignment, now: datetime) -> str:
    statuses = [
        effective_status(record, assignment.due_at, now)
        for record in assignment.submissions.values()
    ]
    if not statuses:
        return _status_without_record(assignment, now)
    # min() keeps the first of equally ranked statuses
    return min(statuses, key=lambda s: TEACHER_DISPLAY_RANK.get(s, len(TEACHER_DISPLAY_RANK) + 1))


def progress(assignment: Assignment) -> dict:
    total = len(assignment.students)
    statuses = [r.status for r in assignment.submissions.values()]
    delivered = sum(1 for s in statuses if s in DELIVERED_STATUSES)
    graded = statuses.count(SubmissionStatus.GRADED.value)

    def _pct(n: int) -> int:
        return round(n * 100 / total) if total > 0 else 0

    return {
        "total_students": total,
        "submitted": delivered,
        "graded": graded,
        "percent_submitted": _pct(delivered),
        "percent_graded": _pct(graded),
    }
