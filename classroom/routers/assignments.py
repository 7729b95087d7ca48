import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db, get_now
from classroom.core.errors import NotAuthorizedError, NotFoundError
from classroom.core.permissions import ensure_owner, require_student, require_teacher
from classroom.models.assignment import Assignment
from classroom.models.classroom import Classroom
from classroom.models.enums import Role
from classroom.models.subject import Subject
from classroom.models.user import User
from classroom.schemas.assignment import AssignmentCreate, AssignmentRead, AssignmentUpdate
from classroom.services import lifecycle, status_engine

logger = logging.getLogger(__name__)

router = APIRouter()


def _ensure_assignment_exists(db: Session, assignment_id: int, for_update: bool = False) -> Assignment:
    query = db.query(Assignment).filter(Assignment.id == assignment_id)
    if for_update:
        query = query.with_for_update()
    a = query.first()
    if not a:
        raise NotFoundError("Assignment not found")
    return a


def _ensure_can_view(assignment: Assignment, user: User) -> None:
    if user.role == Role.ADMIN or assignment.teacher_id == user.id:
        return
    if user.id in assignment.student_ids and assignment.is_visible:
        return
    raise NotAuthorizedError("You do not have access to this assignment")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


@router.post(
    "/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
    now: datetime = Depends(get_now),
):
    classroom_ids = sorted(set(payload.classroom_ids))
    classrooms = db.query(Classroom).filter(Classroom.id.in_(classroom_ids)).all()
    if len(classrooms) != len(classroom_ids):
        raise NotFoundError("One or more classrooms were not found")
    if any(c.teacher_id != teacher.id for c in classrooms):
        raise NotAuthorizedError("You cannot assign work to one or more of the selected classrooms")

    if payload.subject_id is not None:
        subject = db.query(Subject).filter(Subject.id == payload.subject_id).first()
        if not subject:
            raise NotFoundError("Subject not found")
        ensure_owner(subject.teacher_id, teacher, "You cannot use a subject you do not teach")

    a = Assignment(
        teacher_id=teacher.id,
        subject_id=payload.subject_id,
        title=payload.title,
        description=payload.description,
        activity_type=payload.activity_type.value,
        topics=list(payload.topics),
        attachments=[att.model_dump(mode="json") for att in payload.attachments],
        due_at=payload.due_at,
        points=payload.points,
        is_visible=payload.is_visible,
        feedback_version=0,
        classrooms=classrooms,
    )

    # every student of every target classroom, once
    students = {s.id: s for c in classrooms for s in c.students}
    lifecycle.assign_students(a, students.values(), now)

    db.add(a)
    _commit(db)
    db.refresh(a)

    logger.info("assignment_created id=%s teacher=%s students=%s", a.id, teacher.id, len(students))
    return AssignmentRead.from_aggregate(a, teacher, now)


@router.get("/assignments", response_model=list[AssignmentRead])
def list_assignments(
    classroom_id: Optional[int] = None,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    """
    Teachers see their own assignments, students the visible ones assigned to
    them. ``status_filter`` matches either the aggregate status or the
    viewer's display status.
    """
    query = db.query(Assignment)
    if current_user.role == Role.TEACHER:
        query = query.filter(Assignment.teacher_id == current_user.id)
    elif current_user.role == Role.STUDENT:
        query = query.filter(
            Assignment.students.any(User.id == current_user.id),
            Assignment.is_visible.is_(True),
        )

    if classroom_id is not None:
        query = query.filter(Assignment.classrooms.any(Classroom.id == classroom_id))

    rows = [
        AssignmentRead.from_aggregate(a, current_user, now)
        for a in query.order_by(Assignment.due_at.asc(), Assignment.id.asc()).all()
    ]

    if status_filter:
        rows = [r for r in rows if status_filter in (r.status, r.display_status)]
    return rows


@router.get("/assignments/pending", response_model=list[AssignmentRead])
def list_pending_assignments(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
    now: datetime = Depends(get_now),
):
    assignments = (
        db.query(Assignment)
        .filter(
            Assignment.students.any(User.id == me.id),
            Assignment.is_visible.is_(True),
        )
        .order_by(Assignment.due_at.asc(), Assignment.id.asc())
        .all()
    )

    return [
        AssignmentRead.from_aggregate(a, me, now)
        for a in assignments
        if status_engine.student_display_status(a, me.id, now) not in status_engine.DELIVERED_STATUSES
    ]


@router.get("/assignments/{assignment_id}", response_model=AssignmentRead)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_can_view(assignment, current_user)
    return AssignmentRead.from_aggregate(assignment, current_user, now)


@router.patch("/assignments/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    assignment = _ensure_assignment_exists(db, assignment_id, for_update=True)
    ensure_owner(assignment.teacher_id, current_user, "You cannot edit this assignment")

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(assignment, field, value)

    assignment.updated_at = now
    lifecycle.recompute(assignment, now)
    _commit(db)
    db.refresh(assignment)
    return AssignmentRead.from_aggregate(assignment, current_user, now)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = _ensure_assignment_exists(db, assignment_id, for_update=True)
    ensure_owner(assignment.teacher_id, current_user, "You cannot delete this assignment")

    db.delete(assignment)
    _commit(db)
    logger.info("assignment_deleted id=%s", assignment_id)
