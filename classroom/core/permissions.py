from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.errors import NotAuthorizedError
from classroom.models.classroom import Classroom, classroom_students
from classroom.models.enums import Role
from classroom.models.user import User


def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.TEACHER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher role required",
        )
    return current_user


def require_student(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student role required",
        )
    return current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return current_user


def ensure_owner(owner_id: int, user: User, detail: str) -> None:
    """Owners and admins pass; everyone else is refused with ``detail``."""
    if user.role == Role.ADMIN:
        return
    if owner_id != user.id:
        raise NotAuthorizedError(detail)


def ensure_can_view_student(db: Session, student_id: int, user: User) -> None:
    """The student, admins and teachers with the student in one of their classrooms pass."""
    if user.role == Role.ADMIN or user.id == student_id:
        return
    if user.role == Role.TEACHER:
        shared = (
            db.query(Classroom.id)
            .join(classroom_students, classroom_students.c.classroom_id == Classroom.id)
            .filter(
                Classroom.teacher_id == user.id,
                classroom_students.c.student_id == student_id,
            )
            .first()
        )
        if shared is not None:
            return
    raise NotAuthorizedError("You cannot view this student")
