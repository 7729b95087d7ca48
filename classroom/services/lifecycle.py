"""
Submission lifecycle: submit, grade, return for revision, and the scheduled
re-check that moves delivered work into the correction queue.

Every operation takes the loaded assignment aggregate (with its records),
mutates it in place and finishes with ``recompute``. Persisting is the
caller's job. ``now`` is always passed in.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from classroom.core.config import AWAITING_CORRECTION_GRACE, DEFAULT_RETURN_NOTE
from classroom.core.errors import DeadlinePassedError, NotAuthorizedError, NotFoundError, ValidationError
from classroom.models.assignment import Assignment
from classroom.models.enums import AssignmentStatus, SubmissionStatus
from classroom.models.submission import Submission
from classroom.models.user import User
from classroom.services.status_engine import apply_late_detection, as_utc, derive_aggregate_status, is_past_due

logger = logging.getLogger(__name__)

MIN_GRADE = 0
MAX_GRADE = 100


def new_pending_record(student_id: int) -> Submission:
    return Submission(
        student_id=student_id,
        response_text="",
        attachments=[],
        status=SubmissionStatus.PENDING.value,
        competencies=[],
        difficulties=[],
    )


def recompute(assignment: Assignment, now: datetime) -> AssignmentStatus:
    """Late detection, then the aggregate ladder. Safe to call any number of times."""
    apply_late_detection(assignment, now)
    status = derive_aggregate_status(
        (r.status for r in assignment.submissions.values()),
        total=len(assignment.students),
    )
    assignment.status = status.value
    return status


def assign_students(assignment: Assignment, students: Iterable[User], now: datetime) -> None:
    """Attach ``students`` and give each of them a pending record if they lack one."""
    for student in students:
        if student.id in assignment.student_ids:
            continue
        assignment.students.append(student)
        if student.id not in assignment.submissions:
            assignment.submissions[student.id] = new_pending_record(student.id)
    recompute(assignment, now)


def _touch(assignment: Assignment, now: datetime) -> None:
    assignment.updated_at = now


def require_record(assignment: Assignment, student_id: int) -> Submission:
    record = assignment.submissions.get(student_id)
    if record is None:
        raise NotFoundError("Submission not found")
    return record


def submit(
    assignment: Assignment,
    student_id: int,
    *,
    response_text: Optional[str],
    attachments: Optional[list[dict[str, Any]]] = None,
    execution_time: Optional[int] = None,
    now: datetime,
) -> Submission:
    if student_id not in assignment.student_ids:
        raise NotAuthorizedError("You are not assigned to this assignment")

    # no late deliveries: the record is left exactly as it was
    if is_past_due(assignment.due_at, now):
        raise DeadlinePassedError("The deadline for this assignment has passed")

    text = (response_text or "").strip()
    attachments = list(attachments or [])
    if not text and not attachments:
        raise ValidationError("A response text or at least one attachment is required")

    record = assignment.submissions.get(student_id)
    if record is None:
        record = new_pending_record(student_id)
        assignment.submissions[student_id] = record

    record.response_text = text
    record.attachments = attachments
    record.execution_time = execution_time
    record.submitted_at = now
    record.status = SubmissionStatus.SUBMITTED.value

    # a new delivery invalidates earlier grading
    record.clear_feedback()

    _touch(assignment, now)
    recompute(assignment, now)
    logger.info("submission_received assignment=%s student=%s", assignment.id, student_id)
    return record


def validate_grade(grade: Any) -> float:
    if isinstance(grade, bool) or not isinstance(grade, (int, float)):
        raise ValidationError("grade must be a number")
    if not MIN_GRADE <= grade <= MAX_GRADE:
        raise ValidationError(f"grade must be between {MIN_GRADE} and {MAX_GRADE}")
    return float(grade)


def grade(
    assignment: Assignment,
    student_id: int,
    *,
    grade: Any,
    feedback_text: Optional[str],
    now: datetime,
    competencies: Optional[list[dict[str, Any]]] = None,
    difficulties: Optional[list[dict[str, Any]]] = None,
) -> Submission:
    record = require_record(assignment, student_id)
    value = validate_grade(grade)

    text = (feedback_text or "").strip()
    if not text:
        raise ValidationError("Feedback text is required")

    apply_late_detection(assignment, now)

    record.status = SubmissionStatus.GRADED.value
    record.grade = value
    record.feedback_text = text
    record.corrected_at = now
    record.competencies = list(competencies or [])
    record.difficulties = list(difficulties or [])

    assignment.feedback_version = (assignment.feedback_version or 0) + 1
    _touch(assignment, now)
    recompute(assignment, now)
    logger.info(
        "submission_graded assignment=%s student=%s grade=%s",
        assignment.id,
        student_id,
        value,
    )
    return record


def return_for_revision(
    assignment: Assignment,
    student_id: int,
    *,
    feedback_text: Optional[str] = None,
    now: datetime,
) -> Submission:
    record = require_record(assignment, student_id)

    apply_late_detection(assignment, now)

    record.status = SubmissionStatus.RETURNED.value
    record.feedback_text = (feedback_text or "").strip() or DEFAULT_RETURN_NOTE
    record.grade = None
    record.corrected_at = now

    assignment.feedback_version = (assignment.feedback_version or 0) + 1
    _touch(assignment, now)
    recompute(assignment, now)
    logger.info("submission_returned assignment=%s student=%s", assignment.id, student_id)
    return record


def promote_to_awaiting_correction(
    assignment: Assignment,
    student_id: int,
    *,
    now: datetime,
    grace: timedelta = AWAITING_CORRECTION_GRACE,
) -> bool:
    """
    Scheduled re-check for one delivery.

    A record still ``submitted`` whose grace interval has elapsed moves to
    ``awaiting_correction``. Anything else is left alone, so running the
    check late or twice is harmless. Returns whether the record moved.
    """
    record = assignment.submissions.get(student_id)
    if record is None or record.status != SubmissionStatus.SUBMITTED.value:
        return False
    if record.submitted_at is None or as_utc(now) - as_utc(record.submitted_at) < grace:
        return False

    record.status = SubmissionStatus.AWAITING_CORRECTION.value
    _touch(assignment, now)
    recompute(assignment, now)
    logger.info("submission_awaiting_correction assignment=%s student=%s", assignment.id, student_id)
    return True


def promote_all_due(assignment: Assignment, *, now: datetime, grace: timedelta = AWAITING_CORRECTION_GRACE) -> list[int]:
    promoted = []
    for student_id in list(assignment.submissions):
        if promote_to_awaiting_correction(assignment, student_id, now=now, grace=grace):
            promoted.append(student_id)
    return promoted
