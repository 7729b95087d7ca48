from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db, get_now
from classroom.core.errors import NotAuthorizedError, NotFoundError
from classroom.core.permissions import ensure_owner, require_student, require_teacher
from classroom.models.classroom import Classroom
from classroom.models.enums import Role, SubmissionStatus
from classroom.models.user import User
from classroom.schemas.classroom import (
    ClassroomAddStudent,
    ClassroomAssignmentStats,
    ClassroomCreate,
    ClassroomDashboard,
    ClassroomDetail,
    ClassroomJoin,
    ClassroomRead,
    ClassroomUpdate,
)
from classroom.schemas.user import UserRead
from classroom.services import status_engine

router = APIRouter()


def _ensure_classroom_exists(db: Session, classroom_id: int) -> Classroom:
    classroom = db.query(Classroom).filter(Classroom.id == classroom_id).first()
    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


def _ensure_member(classroom: Classroom, user: User) -> None:
    if user.role == Role.ADMIN or classroom.teacher_id == user.id:
        return
    if not any(s.id == user.id for s in classroom.students):
        raise NotAuthorizedError("You are not a member of this classroom")


def _detail(classroom: Classroom) -> ClassroomDetail:
    return ClassroomDetail(
        **ClassroomRead.model_validate(classroom).model_dump(),
        student_ids=sorted(s.id for s in classroom.students),
        subject_ids=sorted(s.id for s in classroom.subjects),
        assignment_ids=sorted(a.id for a in classroom.assignments),
    )


@router.post("/", response_model=ClassroomRead, status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    classroom = Classroom(
        name=payload.name,
        description=payload.description,
        allow_self_enrollment=payload.allow_self_enrollment,
        theme_color=payload.theme_color,
        teacher_id=teacher.id,
    )
    db.add(classroom)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="You already have a classroom with this name")

    db.refresh(classroom)
    return classroom


@router.get("/", response_model=list[ClassroomRead])
def list_classrooms(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Classroom)
    if current_user.role == Role.TEACHER:
        query = query.filter(Classroom.teacher_id == current_user.id)
    elif current_user.role == Role.STUDENT:
        query = query.filter(Classroom.students.any(User.id == current_user.id))
    return query.order_by(Classroom.name.asc()).all()


@router.post("/join", response_model=ClassroomRead)
def join_classroom(
    payload: ClassroomJoin,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    code = payload.access_code.strip().upper()
    classroom = db.query(Classroom).filter(Classroom.access_code == code).first()
    if not classroom:
        raise NotFoundError("No classroom with this access code")
    if not classroom.is_active or not classroom.allow_self_enrollment:
        raise NotAuthorizedError("This classroom does not accept new students")
    if any(s.id == me.id for s in classroom.students):
        raise HTTPException(status_code=409, detail="Already enrolled")

    classroom.students.append(me)
    db.commit()
    db.refresh(classroom)
    return classroom


@router.get("/{classroom_id}", response_model=ClassroomDetail)
def get_classroom(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    _ensure_member(classroom, current_user)
    return _detail(classroom)


@router.patch("/{classroom_id}", response_model=ClassroomRead)
def update_classroom(
    classroom_id: int,
    payload: ClassroomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can edit it")

    # owner, members and access code are not editable here
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(classroom, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="You already have a classroom with this name")

    db.refresh(classroom)
    return classroom


@router.get("/{classroom_id}/students", response_model=list[UserRead])
def list_classroom_students(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can list its students")
    return sorted(classroom.students, key=lambda s: s.email)


@router.post("/{classroom_id}/students", response_model=ClassroomDetail)
def add_student(
    classroom_id: int,
    payload: ClassroomAddStudent,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can add students")

    student = db.query(User).filter(User.id == payload.student_id).first()
    if not student or student.role != Role.STUDENT:
        raise NotFoundError("Student not found")
    if any(s.id == student.id for s in classroom.students):
        raise HTTPException(status_code=409, detail="Already enrolled")

    classroom.students.append(student)
    db.commit()
    db.refresh(classroom)
    return _detail(classroom)


@router.delete("/{classroom_id}/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_student(
    classroom_id: int,
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can remove students")

    student = next((s for s in classroom.students if s.id == student_id), None)
    if student is None:
        raise NotFoundError("Student is not in this classroom")

    classroom.students.remove(student)
    db.commit()


@router.get("/{classroom_id}/dashboard", response_model=ClassroomDashboard)
def classroom_dashboard(
    classroom_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can view its dashboard")

    rows: list[ClassroomAssignmentStats] = []
    for assignment in sorted(classroom.assignments, key=lambda a: (a.due_at, a.id)):
        counts = status_engine.progress(assignment)
        records = list(assignment.submissions.values())
        grades = [r.grade for r in records if r.grade is not None]

        rows.append(
            ClassroomAssignmentStats(
                assignment_id=assignment.id,
                assignment_title=assignment.title,
                due_at=assignment.due_at,
                status=assignment.status,
                total_students=counts["total_students"],
                submitted=counts["submitted"],
                graded=counts["graded"],
                awaiting_correction=sum(
                    1 for r in records if r.status == SubmissionStatus.AWAITING_CORRECTION.value
                ),
                late=sum(
                    1
                    for r in records
                    if status_engine.effective_status(r, assignment.due_at, now) == SubmissionStatus.LATE.value
                ),
                average_grade=round(sum(grades) / len(grades), 2) if grades else None,
            )
        )

    return ClassroomDashboard(
        classroom_id=classroom.id,
        classroom_name=classroom.name,
        total_students=len(classroom.students),
        total_assignments=len(classroom.assignments),
        total_subjects=len(classroom.subjects),
        assignments=rows,
    )
