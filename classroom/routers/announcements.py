from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classroom.core.current_user import get_current_user
from classroom.core.deps import get_db, get_now
from classroom.core.errors import NotAuthorizedError, NotFoundError
from classroom.core.permissions import ensure_owner
from classroom.models.announcement import Announcement
from classroom.models.classroom import Classroom
from classroom.models.enums import Role
from classroom.models.user import User
from classroom.schemas.announcement import AnnouncementCreate, AnnouncementRead, AnnouncementUpdate
from classroom.services.status_engine import as_utc

router = APIRouter()


def _ensure_classroom_exists(db: Session, classroom_id: int) -> Classroom:
    classroom = db.query(Classroom).filter(Classroom.id == classroom_id).first()
    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


def _ensure_announcement_exists(db: Session, announcement_id: int) -> Announcement:
    announcement = db.query(Announcement).filter(Announcement.id == announcement_id).first()
    if not announcement:
        raise NotFoundError("Announcement not found")
    return announcement


def _ensure_member(classroom: Classroom, user: User) -> None:
    if user.role == Role.ADMIN or classroom.teacher_id == user.id:
        return
    if not any(s.id == user.id for s in classroom.students):
        raise NotAuthorizedError("You are not a member of this classroom")


def _to_read(announcement: Announcement, now: datetime) -> AnnouncementRead:
    expired = announcement.expires_at is not None and as_utc(now) > as_utc(announcement.expires_at)
    return AnnouncementRead(
        id=announcement.id,
        classroom_id=announcement.classroom_id,
        author_id=announcement.author_id,
        title=announcement.title,
        content=announcement.content,
        priority=announcement.priority,
        attachments=announcement.attachments or [],
        published_at=announcement.published_at,
        expires_at=announcement.expires_at,
        status="expired" if expired else "active",
    )


@router.post(
    "/classrooms/{classroom_id}/announcements",
    response_model=AnnouncementRead,
    status_code=status.HTTP_201_CREATED,
)
def create_announcement(
    classroom_id: int,
    payload: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    ensure_owner(classroom.teacher_id, current_user, "Only the classroom teacher can post announcements")

    announcement = Announcement(
        classroom_id=classroom.id,
        author_id=current_user.id,
        title=payload.title,
        content=payload.content,
        priority=payload.priority.value,
        attachments=[att.model_dump(mode="json") for att in payload.attachments],
        published_at=now,
        expires_at=payload.expires_at,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return _to_read(announcement, now)


@router.get("/classrooms/{classroom_id}/announcements", response_model=list[AnnouncementRead])
def list_announcements(
    classroom_id: int,
    include_expired: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    classroom = _ensure_classroom_exists(db, classroom_id)
    _ensure_member(classroom, current_user)

    announcements = (
        db.query(Announcement)
        .filter(Announcement.classroom_id == classroom_id)
        .order_by(Announcement.published_at.desc(), Announcement.id.desc())
        .all()
    )
    rows = [_to_read(a, now) for a in announcements]
    if not include_expired:
        rows = [r for r in rows if r.status == "active"]
    return rows


@router.get("/announcements/{announcement_id}", response_model=AnnouncementRead)
def get_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    announcement = _ensure_announcement_exists(db, announcement_id)
    _ensure_member(announcement.classroom, current_user)
    return _to_read(announcement, now)


@router.patch("/announcements/{announcement_id}", response_model=AnnouncementRead)
def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    announcement = _ensure_announcement_exists(db, announcement_id)
    ensure_owner(announcement.author_id, current_user, "Only the author can edit this announcement")

    # expires_at may be cleared with null; the other fields are required columns
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "expires_at":
            continue
        if field == "priority":
            value = value.value
        setattr(announcement, field, value)

    db.commit()
    db.refresh(announcement)
    return _to_read(announcement, now)


@router.delete("/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    announcement = _ensure_announcement_exists(db, announcement_id)
    ensure_owner(announcement.author_id, current_user, "Only the author can delete this announcement")
    db.delete(announcement)
    db.commit()
