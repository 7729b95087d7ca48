from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from classroom.models.enums import AnnouncementPriority
from classroom.schemas.submission import AttachmentDescriptor
from classroom.services.status_engine import as_utc


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1, max_length=2000)
    priority: AnnouncementPriority = AnnouncementPriority.LOW
    expires_at: Optional[datetime] = None
    attachments: list[AttachmentDescriptor] = []

    @field_validator("expires_at")
    @classmethod
    def expires_at_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    content: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    priority: Optional[AnnouncementPriority] = None
    expires_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def expires_at_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


class AnnouncementRead(BaseModel):
    id: int
    classroom_id: int
    author_id: int
    title: str
    content: str
    priority: str
    attachments: list[AttachmentDescriptor] = []
    published_at: datetime
    expires_at: Optional[datetime] = None
    status: str  # "active" | "expired"
