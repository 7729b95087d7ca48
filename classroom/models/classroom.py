import secrets
import string
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from classroom.db.base_class import Base

ACCESS_CODE_LENGTH = 6
_ACCESS_CODE_CHARS = string.ascii_uppercase + string.digits

classroom_students = Table(
    "classroom_students",
    Base.metadata,
    Column("classroom_id", ForeignKey("classrooms.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

classroom_subjects = Table(
    "classroom_subjects",
    Base.metadata,
    Column("classroom_id", ForeignKey("classrooms.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)


def generate_access_code() -> str:
    return "".join(secrets.choice(_ACCESS_CODE_CHARS) for _ in range(ACCESS_CODE_LENGTH))


class Classroom(Base):
    __tablename__ = "classrooms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    access_code: Mapped[str] = mapped_column(
        String(ACCESS_CODE_LENGTH), unique=True, nullable=False, default=generate_access_code
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_self_enrollment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    theme_color: Mapped[str] = mapped_column(String(7), nullable=False, default="#4f46e5")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("name", "teacher_id", name="uq_classroom_name_teacher"),
    )

    teacher = relationship("User", foreign_keys=[teacher_id])
    students = relationship(
        "User", secondary="classroom_students", back_populates="classrooms"
    )
    subjects = relationship(
        "Subject", secondary="classroom_subjects", back_populates="classrooms"
    )
    announcements = relationship(
        "Announcement", back_populates="classroom", cascade="all, delete-orphan"
    )
    assignments = relationship(
        "Assignment", secondary="assignment_classrooms", back_populates="classrooms"
    )
