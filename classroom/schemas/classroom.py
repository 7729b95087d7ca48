from datetime import datetime

from pydantic import BaseModel, Field

HEX_COLOR = r"^#([0-9a-fA-F]{3}){1,2}$"


class ClassroomCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    allow_self_enrollment: bool = True
    theme_color: str = Field(default="#4f46e5", pattern=HEX_COLOR)


class ClassroomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    allow_self_enrollment: bool | None = None
    theme_color: str | None = Field(default=None, pattern=HEX_COLOR)
    is_active: bool | None = None


class ClassroomRead(BaseModel):
    id: int
    name: str
    description: str | None = None
    teacher_id: int
    access_code: str
    is_active: bool
    allow_self_enrollment: bool
    theme_color: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ClassroomDetail(ClassroomRead):
    student_ids: list[int]
    subject_ids: list[int]
    assignment_ids: list[int]


class ClassroomJoin(BaseModel):
    access_code: str = Field(min_length=6, max_length=6)


class ClassroomAddStudent(BaseModel):
    student_id: int


class ClassroomAssignmentStats(BaseModel):
    assignment_id: int
    assignment_title: str
    due_at: datetime
    status: str
    total_students: int
    submitted: int
    graded: int
    awaiting_correction: int
    late: int
    average_grade: float | None


class ClassroomDashboard(BaseModel):
    classroom_id: int
    classroom_name: str
    total_students: int
    total_assignments: int
    total_subjects: int
    assignments: list[ClassroomAssignmentStats]
