from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    full_name: str | None = None
    # admins are provisioned out of band
    role: Literal["student", "teacher"] = "student"


class UserUpdate(BaseModel):
    full_name: str | None = None
    password: str | None = Field(default=None, min_length=8, max_length=72)


class UserRead(BaseModel):
    id: int
    email: EmailStr
    full_name: str | None = None
    role: str
    is_active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class TeacherRead(UserRead):
    classroom_ids: list[int] = []


class StudentAssignment(BaseModel):
    id: int
    title: str
    due_at: datetime
    # as the student would see it right now
    status: str
    past_due: bool


class StudentDetail(UserRead):
    classroom_ids: list[int] = []
    assignments: list[StudentAssignment] = []
