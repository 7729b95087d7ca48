from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db
from classroom.core.errors import NotAuthorizedError, NotFoundError
from classroom.core.permissions import ensure_owner, require_teacher
from classroom.models.classroom import Classroom
from classroom.models.enums import Role
from classroom.models.subject import Subject
from classroom.models.user import User
from classroom.schemas.subject import SubjectCreate, SubjectRead, SubjectUpdate

router = APIRouter()


def _ensure_subject_exists(db: Session, subject_id: int) -> Subject:
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise NotFoundError("Subject not found")
    return subject


def _ensure_classroom_exists(db: Session, classroom_id: int) -> Classroom:
    classroom = db.query(Classroom).filter(Classroom.id == classroom_id).first()
    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


def _commit_or_conflict(db: Session, detail: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=detail)


@router.post("/", response_model=SubjectRead, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    subject = Subject(
        name=payload.name,
        description=payload.description,
        code=payload.code,
        color=payload.color,
        teacher_id=teacher.id,
    )
    db.add(subject)
    _commit_or_conflict(db, "A subject with this name or code already exists")
    db.refresh(subject)
    return SubjectRead.from_model(subject)


@router.get("/", response_model=list[SubjectRead])
def list_subjects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Subject)
    if current_user.role == Role.TEACHER:
        query = query.filter(Subject.teacher_id == current_user.id)
    elif current_user.role != Role.ADMIN:
        raise HTTPException(status_code=403, detail="Teacher or admin role required")
    return [SubjectRead.from_model(s) for s in query.order_by(Subject.name.asc()).all()]


@router.get("/classroom/{classroom_id}", response_model=list[SubjectRead])
def list_classroom_subjects(
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    is_member = (
        current_user.role == Role.ADMIN
        or classroom.teacher_id == current_user.id
        or any(s.id == current_user.id for s in classroom.students)
    )
    if not is_member:
        raise NotAuthorizedError("You are not a member of this classroom")
    return [SubjectRead.from_model(s) for s in classroom.subjects]


@router.get("/{subject_id}", response_model=SubjectRead)
def get_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subject = _ensure_subject_exists(db, subject_id)
    ensure_owner(subject.teacher_id, current_user, "Only the subject teacher can view it")
    return SubjectRead.from_model(subject)


@router.patch("/{subject_id}", response_model=SubjectRead)
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subject = _ensure_subject_exists(db, subject_id)
    ensure_owner(subject.teacher_id, current_user, "Only the subject teacher can edit it")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(subject, field, value)

    _commit_or_conflict(db, "A subject with this name already exists")
    db.refresh(subject)
    return SubjectRead.from_model(subject)


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subject = _ensure_subject_exists(db, subject_id)
    ensure_owner(subject.teacher_id, current_user, "Only the subject teacher can delete it")
    db.delete(subject)
    db.commit()


@router.post("/{subject_id}/classrooms/{classroom_id}", response_model=SubjectRead)
def link_classroom(
    subject_id: int,
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subject = _ensure_subject_exists(db, subject_id)
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(subject.teacher_id, current_user, "Only the subject teacher can link it")
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can link subjects to it")

    if classroom not in subject.classrooms:
        subject.classrooms.append(classroom)
        db.commit()
        db.refresh(subject)
    return SubjectRead.from_model(subject)


@router.delete("/{subject_id}/classrooms/{classroom_id}", response_model=SubjectRead)
def unlink_classroom(
    subject_id: int,
    classroom_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subject = _ensure_subject_exists(db, subject_id)
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(subject.teacher_id, current_user, "Only the subject teacher can unlink it")

    if classroom not in subject.classrooms:
        raise NotFoundError("Subject is not linked to this classroom")

    subject.classrooms.remove(classroom)
    db.commit()
    db.refresh(subject)
    return SubjectRead.from_model(subject)
