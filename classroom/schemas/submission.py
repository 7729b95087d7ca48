from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from classroom.models.enums import Competency, DifficultyCategory


class AttachmentDescriptor(BaseModel):
    name: str
    url: str
    mime_type: str
    size_bytes: int = Field(ge=0)


class SubmissionCreate(BaseModel):
    response_text: Optional[str] = None
    attachments: list[AttachmentDescriptor] = []
    # seconds the student spent on the task, if the client tracks it
    execution_time: Optional[int] = Field(default=None, ge=0)


class CompetencyTag(BaseModel):
    name: Competency
    level: int = Field(ge=1, le=5)


class DifficultyTag(BaseModel):
    topic: str = Field(min_length=1)
    category: DifficultyCategory
    level: Optional[int] = Field(default=None, ge=1, le=3)


class SubmissionGrade(BaseModel):
    # range is checked by the grading workflow so a bad grade leaves the record untouched
    grade: float
    feedback: Optional[str] = None
    use_ai: bool = True
    competencies: list[CompetencyTag] = []
    difficulties: list[DifficultyTag] = []


class SubmissionReturn(BaseModel):
    feedback: Optional[str] = None


class SubmissionRead(BaseModel):
    student_id: int
    response_text: str
    attachments: list[AttachmentDescriptor] = []
    execution_time: Optional[int] = None
    submitted_at: Optional[datetime] = None
    status: str
    # status as of the request time (pending past due reads as late)
    effective_status: str

    feedback_text: Optional[str] = None
    grade: Optional[float] = None
    corrected_at: Optional[datetime] = None
    competencies: list[CompetencyTag] = []
    difficulties: list[DifficultyTag] = []

    class Config:
        from_attributes = True
