from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from classroom.db.base_class import Base
from classroom.models.enums import AnnouncementPriority


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=False, default=list)
    priority = Column(String(10), nullable=False, default=AnnouncementPriority.LOW.value)

    published_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    classroom = relationship("Classroom", back_populates="announcements")
    author = relationship("User")
