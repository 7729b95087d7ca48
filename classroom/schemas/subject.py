from datetime import datetime

from pydantic import BaseModel, Field

from classroom.schemas.classroom import HEX_COLOR

SUBJECT_CODE = r"^[A-Z]{3}\d{3}$"


class SubjectCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    code: str | None = Field(default=None, pattern=SUBJECT_CODE)
    color: str = Field(default="#3b82f6", pattern=HEX_COLOR)


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=HEX_COLOR)
    is_active: bool | None = None


class SubjectRead(BaseModel):
    id: int
    name: str
    description: str | None = None
    code: str | None = None
    teacher_id: int
    color: str
    is_active: bool
    created_at: datetime | None = None
    classroom_ids: list[int] = []

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, subject) -> "SubjectRead":
        read = cls.model_validate(subject)
        read.classroom_ids = sorted(c.id for c in subject.classrooms)
        return read
