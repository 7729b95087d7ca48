from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from classroom.db.base_class import Base
from classroom.models.enums import SubmissionStatus


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)

    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    response_text = Column(Text, nullable=False, default="")
    attachments = Column(JSON, nullable=False, default=list)
    execution_time = Column(Integer, nullable=True)

    # null until the first delivery
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(30), nullable=False, default=SubmissionStatus.PENDING.value, index=True)

    # Feedback fields (nullable until graded or returned)
    feedback_text = Column(Text, nullable=True)
    grade = Column(Float, nullable=True)
    corrected_at = Column(DateTime(timezone=True), nullable=True)
    competencies = Column(JSON, nullable=False, default=list)
    difficulties = Column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User")

    def clear_feedback(self) -> None:
        self.feedback_text = None
        self.grade = None
        self.corrected_at = None
        self.competencies = []
        self.difficulties = []
