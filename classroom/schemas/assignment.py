from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from classroom.models.assignment import Assignment
from classroom.models.enums import ActivityType, Role
from classroom.models.user import User
from classroom.schemas.submission import AttachmentDescriptor, SubmissionRead
from classroom.services import status_engine


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    due_at: datetime
    points: int = Field(ge=1, le=100)
    classroom_ids: list[int] = Field(min_length=1)
    activity_type: ActivityType
    subject_id: Optional[int] = None
    topics: list[str] = []
    attachments: list[AttachmentDescriptor] = []
    is_visible: bool = True

    @field_validator("due_at")
    @classmethod
    def due_at_in_utc(cls, value: datetime) -> datetime:
        return status_engine.as_utc(value)


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    due_at: Optional[datetime] = None
    points: Optional[int] = Field(default=None, ge=1, le=100)
    is_visible: Optional[bool] = None

    @field_validator("due_at")
    @classmethod
    def due_at_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # stored without an offset, so it must already be UTC
        return status_engine.as_utc(value) if value is not None else None


class AssignmentProgress(BaseModel):
    total_students: int
    submitted: int
    graded: int
    percent_submitted: int
    percent_graded: int


class AssignmentRead(BaseModel):
    id: int
    teacher_id: int
    subject_id: Optional[int]
    title: str
    description: str
    activity_type: str
    topics: list[str]
    attachments: list[AttachmentDescriptor]
    due_at: datetime
    points: int
    is_visible: bool
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    feedback_version: int = 0

    classroom_ids: list[int]
    student_ids: list[int]
    display_status: str
    progress: AssignmentProgress
    submissions: list[SubmissionRead]

    @classmethod
    def from_aggregate(cls, assignment: Assignment, viewer: User, now: datetime) -> "AssignmentRead":
        """Render an assignment for ``viewer``; students only ever see their own record."""
        if viewer.role == Role.STUDENT:
            display = status_engine.student_display_status(assignment, viewer.id, now)
            records = [r for sid, r in assignment.submissions.items() if sid == viewer.id]
        else:
            display = status_engine.teacher_display_status(assignment, now)
            records = sorted(assignment.submissions.values(), key=lambda r: r.student_id)

        submissions = [
            SubmissionRead(
                student_id=r.student_id,
                response_text=r.response_text or "",
                attachments=r.attachments or [],
                execution_time=r.execution_time,
                submitted_at=r.submitted_at,
                status=r.status,
                effective_status=status_engine.effective_status(r, assignment.due_at, now),
                feedback_text=r.feedback_text,
                grade=r.grade,
                corrected_at=r.corrected_at,
                competencies=r.competencies or [],
                difficulties=r.difficulties or [],
            )
            for r in records
        ]

        return cls(
            id=assignment.id,
            teacher_id=assignment.teacher_id,
            subject_id=assignment.subject_id,
            title=assignment.title,
            description=assignment.description,
            activity_type=assignment.activity_type,
            topics=assignment.topics or [],
            attachments=assignment.attachments or [],
            due_at=assignment.due_at,
            points=assignment.points,
            is_visible=assignment.is_visible,
            status=assignment.status,
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
            feedback_version=assignment.feedback_version or 0,
            classroom_ids=sorted(c.id for c in assignment.classrooms),
            student_ids=sorted(assignment.student_ids),
            display_status=display,
            progress=AssignmentProgress(**status_engine.progress(assignment)),
            submissions=submissions,
        )
