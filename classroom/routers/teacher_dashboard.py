from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from classroom.core.deps import get_db
from classroom.core.permissions import require_teacher
from classroom.models.assignment import Assignment, assignment_classrooms
from classroom.models.classroom import Classroom, classroom_students
from classroom.models.enums import SubmissionStatus
from classroom.models.submission import Submission
from classroom.models.user import User
from classroom.schemas.teacher_dashboard import TeacherClassroomStats
from classroom.services.status_engine import DELIVERED_STATUSES

router = APIRouter(tags=["teacher"])

DELIVERED = tuple(sorted(DELIVERED_STATUSES))


def _submission_count(db: Session, classroom_id: int, *statuses: str) -> int:
    return (
        db.query(func.count(func.distinct(Submission.id)))
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .join(assignment_classrooms, assignment_classrooms.c.assignment_id == Assignment.id)
        .filter(
            assignment_classrooms.c.classroom_id == classroom_id,
            Submission.status.in_(statuses),
        )
        .scalar()
    ) or 0


@router.get("/teacher/dashboard", response_model=list[TeacherClassroomStats])
def teacher_dashboard(
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    classrooms = (
        db.query(Classroom)
        .filter(Classroom.teacher_id == me.id)
        .order_by(Classroom.name.asc())
        .all()
    )

    rows: list[TeacherClassroomStats] = []

    for classroom in classrooms:
        total_students = (
            db.query(func.count(classroom_students.c.student_id))
            .filter(classroom_students.c.classroom_id == classroom.id)
            .scalar()
        ) or 0

        total_assignments = (
            db.query(func.count(assignment_classrooms.c.assignment_id))
            .filter(assignment_classrooms.c.classroom_id == classroom.id)
            .scalar()
        ) or 0

        rows.append(
            TeacherClassroomStats(
                classroom_id=classroom.id,
                classroom_name=classroom.name,
                total_students=total_students,
                total_assignments=total_assignments,
                total_submissions=_submission_count(db, classroom.id, *DELIVERED),
                awaiting_correction=_submission_count(
                    db, classroom.id, SubmissionStatus.AWAITING_CORRECTION.value
                ),
                graded=_submission_count(db, classroom.id, SubmissionStatus.GRADED.value),
            )
        )

    return rows
