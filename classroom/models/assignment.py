from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import attribute_keyed_dict, relationship

from classroom.db.base_class import Base
from classroom.models.enums import AssignmentStatus

assignment_classrooms = Table(
    "assignment_classrooms",
    Base.metadata,
    Column("assignment_id", ForeignKey("assignments.id", ondelete="CASCADE"), primary_key=True),
    Column("classroom_id", ForeignKey("classrooms.id", ondelete="CASCADE"), primary_key=True),
)

assignment_students = Table(
    "assignment_students",
    Base.metadata,
    Column("assignment_id", ForeignKey("assignments.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    activity_type = Column(String(20), nullable=False)
    topics = Column(JSON, nullable=False, default=list)
    attachments = Column(JSON, nullable=False, default=list)

    due_at = Column(DateTime(timezone=True), nullable=False, index=True)
    points = Column(Integer, nullable=False)
    is_visible = Column(Boolean, nullable=False, default=True)

    # derived from the submission records; see services.status_engine
    status = Column(String(30), nullable=False, default=AssignmentStatus.ACTIVE.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    feedback_version = Column(Integer, nullable=False, default=0)

    teacher = relationship("User", foreign_keys=[teacher_id])
    subject = relationship("Subject", back_populates="assignments")
    classrooms = relationship(
        "Classroom", secondary="assignment_classrooms", back_populates="assignments"
    )
    students = relationship("User", secondary="assignment_students")

    # one record per student, looked up by student id
    submissions = relationship(
        "Submission",
        back_populates="assignment",
        collection_class=attribute_keyed_dict("student_id"),
        cascade="all, delete-orphan",
    )

    @property
    def student_ids(self) -> set[int]:
        return {s.id for s in self.students}
