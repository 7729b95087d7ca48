import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db, get_now
from classroom.core.errors import NotFoundError, ValidationError
from classroom.core.permissions import ensure_owner, require_student
from classroom.models.assignment import Assignment
from classroom.models.user import User
from classroom.schemas.assignment import AssignmentRead
from classroom.schemas.submission import SubmissionCreate, SubmissionGrade, SubmissionRead, SubmissionReturn
from classroom.services import lifecycle
from classroom.services.ai_feedback import OllamaClient, get_ai_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_assignment(db: Session, assignment_id: int) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a:
        raise NotFoundError("Assignment not found")
    return a


def _load_assignment_for_update(db: Session, assignment_id: int) -> Assignment:
    # writes to one assignment are serialized on its row; reload what an
    # earlier unlocked read may have cached
    a = (
        db.query(Assignment)
        .filter(Assignment.id == assignment_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not a:
        raise NotFoundError("Assignment not found")
    return a


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


@router.post("/assignments/{assignment_id}/submit", response_model=AssignmentRead)
def submit_assignment(
    assignment_id: int,
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
    now: datetime = Depends(get_now),
):
    assignment = _load_assignment_for_update(db, assignment_id)

    lifecycle.submit(
        assignment,
        me.id,
        response_text=payload.response_text,
        attachments=[att.model_dump(mode="json") for att in payload.attachments],
        execution_time=payload.execution_time,
        now=now,
    )

    _commit(db)
    db.refresh(assignment)
    return AssignmentRead.from_aggregate(assignment, me, now)


@router.get("/assignments/{assignment_id}/submissions", response_model=list[SubmissionRead])
def list_submissions_for_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    assignment = _load_assignment(db, assignment_id)
    ensure_owner(assignment.teacher_id, current_user, "Only the assignment teacher can view submissions")

    return AssignmentRead.from_aggregate(assignment, current_user, now).submissions


@router.post(
    "/assignments/{assignment_id}/submissions/{student_id}/grade",
    response_model=AssignmentRead,
)
def grade_submission(
    assignment_id: int,
    student_id: int,
    payload: SubmissionGrade,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
    ai: OllamaClient = Depends(get_ai_client),
):
    # checks and the AI draft run before the row lock is taken
    assignment = _load_assignment(db, assignment_id)
    ensure_owner(assignment.teacher_id, current_user, "Only the assignment teacher can grade")

    record = lifecycle.require_record(assignment, student_id)
    lifecycle.validate_grade(payload.grade)

    feedback = payload.feedback
    if not (feedback or "").strip() and payload.use_ai:
        answer = (record.response_text or "").strip()
        if not answer:
            raise ValidationError("There is no answer text to draft feedback from; write the feedback instead")
        feedback = ai.generate_feedback(answer)

    assignment = _load_assignment_for_update(db, assignment_id)

    lifecycle.grade(
        assignment,
        student_id,
        grade=payload.grade,
        feedback_text=feedback,
        now=now,
        competencies=[c.model_dump(mode="json") for c in payload.competencies],
        difficulties=[d.model_dump(mode="json") for d in payload.difficulties],
    )

    _commit(db)
    db.refresh(assignment)
    return AssignmentRead.from_aggregate(assignment, current_user, now)


@router.post(
    "/assignments/{assignment_id}/submissions/{student_id}/return",
    response_model=AssignmentRead,
)
def return_submission(
    assignment_id: int,
    student_id: int,
    payload: SubmissionReturn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    assignment = _load_assignment_for_update(db, assignment_id)
    ensure_owner(assignment.teacher_id, current_user, "Only the assignment teacher can return work")

    lifecycle.return_for_revision(assignment, student_id, feedback_text=payload.feedback, now=now)

    _commit(db)
    db.refresh(assignment)
    return AssignmentRead.from_aggregate(assignment, current_user, now)


@router.post(
    "/assignments/{assignment_id}/submissions/{student_id}/recheck",
    response_model=AssignmentRead,
)
def recheck_submission(
    assignment_id: int,
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    """Grace-interval re-check, called by the job runner after a delivery."""
    assignment = _load_assignment_for_update(db, assignment_id)
    ensure_owner(assignment.teacher_id, current_user, "Only the assignment teacher can re-check submissions")
    lifecycle.require_record(assignment, student_id)

    lifecycle.promote_to_awaiting_correction(assignment, student_id, now=now)

    _commit(db)
    db.refresh(assignment)
    return AssignmentRead.from_aggregate(assignment, current_user, now)


@router.post("/assignments/{assignment_id}/recompute", response_model=AssignmentRead)
def recompute_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    assignment = _load_assignment_for_update(db, assignment_id)
    ensure_owner(assignment.teacher_id, current_user, "Only the assignment teacher can recompute it")

    lifecycle.recompute(assignment, now)

    _commit(db)
    db.refresh(assignment)
    return AssignmentRead.from_aggregate(assignment, current_user, now)
