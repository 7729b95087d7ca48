from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db, get_now
from classroom.core.errors import NotAuthorizedError, NotFoundError
from classroom.core.permissions import ensure_can_view_student, require_admin
from classroom.core.security import hash_password
from classroom.models.assignment import Assignment, assignment_students
from classroom.models.classroom import Classroom
from classroom.models.enums import Role
from classroom.models.user import User
from classroom.schemas.user import (
    StudentAssignment,
    StudentDetail,
    TeacherRead,
    UserCreate,
    UserRead,
    UserUpdate,
)
from classroom.services import status_engine

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Email already registered"},
    },
)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    existing_user = db.query(User).filter(User.email == payload.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(
        email=payload.email,
        full_name=payload.full_name,
        role=payload.role,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.full_name is not None:
        current_user.full_name = payload.full_name
    if payload.password is not None:
        current_user.hashed_password = hash_password(payload.password)

    db.commit()
    db.refresh(current_user)
    return current_user


@router.get("/teachers", response_model=list[TeacherRead])
def list_teachers(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    teachers = db.query(User).filter(User.role == Role.TEACHER.value).order_by(User.email.asc()).all()

    rows: list[TeacherRead] = []
    for teacher in teachers:
        classroom_ids = [
            row.id
            for row in db.query(Classroom.id)
            .filter(Classroom.teacher_id == teacher.id)
            .order_by(Classroom.id.asc())
        ]
        rows.append(TeacherRead(**UserRead.model_validate(teacher).model_dump(), classroom_ids=classroom_ids))
    return rows


@router.get("/students/{student_id}", response_model=StudentDetail)
def get_student(
    student_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
):
    """Profile, classrooms and visible assignments of one student, for their teachers and admins."""
    if current_user.role == Role.STUDENT:
        raise NotAuthorizedError("Teacher or admin role required")
    ensure_can_view_student(db, student_id, current_user)

    student = db.get(User, student_id)
    if not student or student.role != Role.STUDENT:
        raise NotFoundError("Student not found")

    query = (
        db.query(Assignment)
        .join(assignment_students, assignment_students.c.assignment_id == Assignment.id)
        .filter(
            assignment_students.c.student_id == student.id,
            Assignment.is_visible.is_(True),
        )
    )
    if current_user.role == Role.TEACHER:
        query = query.filter(Assignment.teacher_id == current_user.id)

    assignments = [
        StudentAssignment(
            id=a.id,
            title=a.title,
            due_at=a.due_at,
            status=status_engine.student_display_status(a, student.id, now),
            past_due=status_engine.is_past_due(a.due_at, now),
        )
        for a in query.order_by(Assignment.due_at.asc(), Assignment.id.asc()).all()
    ]

    return StudentDetail(
        **UserRead.model_validate(student).model_dump(),
        classroom_ids=sorted(c.id for c in student.classrooms),
        assignments=assignments,
    )
