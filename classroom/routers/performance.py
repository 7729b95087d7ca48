from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db
from classroom.core.errors import NotFoundError
from classroom.core.permissions import ensure_can_view_student
from classroom.models.assignment import Assignment
from classroom.models.enums import Role
from classroom.models.submission import Submission
from classroom.models.user import User
from classroom.schemas.performance import FeedbackEntry, FeedbackHistory, PerformanceSummary
from classroom.services import performance

router = APIRouter(prefix="/students", tags=["performance"])


def _load_student(db: Session, student_id: int, viewer: User) -> User:
    ensure_can_view_student(db, student_id, viewer)
    student = db.get(User, student_id)
    if not student or student.role != Role.STUDENT:
        raise NotFoundError("Student not found")
    return student


def _records(db: Session, student_id: int, viewer: User):
    query = (
        db.query(Submission)
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .filter(Submission.student_id == student_id)
    )
    # a teacher only sees the grades of their own assignments
    if viewer.role == Role.TEACHER:
        query = query.filter(Assignment.teacher_id == viewer.id)
    return query


@router.get("/{student_id}/performance", response_model=PerformanceSummary)
def student_performance(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student = _load_student(db, student_id, current_user)
    records = _records(db, student.id, current_user).filter(Submission.grade.isnot(None)).all()
    return PerformanceSummary(student_id=student.id, **performance.summarize(records))


@router.get("/{student_id}/feedback", response_model=FeedbackHistory)
def feedback_history(
    student_id: int,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Graded and returned records that carry feedback, newest first."""
    student = _load_student(db, student_id, current_user)
    with_feedback = _records(db, student.id, current_user).filter(
        Submission.feedback_text.isnot(None),
        Submission.corrected_at.isnot(None),
    )

    total = with_feedback.count()
    page = (
        with_feedback.order_by(Submission.corrected_at.desc(), Submission.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    summary = performance.summarize(with_feedback.filter(Submission.grade.isnot(None)).all())

    return FeedbackHistory(
        student_id=student.id,
        total=total,
        average_grade=summary["average_grade"],
        trend=summary["trend"],
        items=[
            FeedbackEntry(
                assignment_id=record.assignment_id,
                title=record.assignment.title,
                status=record.status,
                grade=record.grade,
                feedback_text=record.feedback_text,
                corrected_at=record.corrected_at,
            )
            for record in page
        ],
    )
