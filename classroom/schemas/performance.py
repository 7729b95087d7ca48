from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class GradeTrend(BaseModel):
    difference: float
    direction: Literal["improving", "declining", "stable"]
    magnitude: Literal["significant", "moderate"]


class SubjectAverage(BaseModel):
    subject: Optional[str] = None
    graded: int
    average_grade: float


class TimelineEntry(BaseModel):
    assignment_id: int
    title: str
    subject: Optional[str] = None
    grade: float
    corrected_at: datetime


class CompetencyAverage(BaseModel):
    name: str
    samples: int
    average_level: float


class DifficultTopic(BaseModel):
    topic: str
    occurrences: int


class PerformanceSummary(BaseModel):
    student_id: int
    total_graded: int
    average_grade: Optional[float] = None
    max_grade: Optional[float] = None
    min_grade: Optional[float] = None
    std_dev: Optional[float] = None
    coefficient_of_variation: Optional[float] = None
    band: Optional[Literal["low", "medium", "high"]] = None
    trend: Optional[GradeTrend] = None
    by_subject: list[SubjectAverage] = []
    timeline: list[TimelineEntry] = []
    competencies: list[CompetencyAverage] = []
    difficult_topics: list[DifficultTopic] = []


class FeedbackEntry(BaseModel):
    assignment_id: int
    title: str
    status: str
    grade: Optional[float] = None
    feedback_text: str
    corrected_at: datetime


class FeedbackHistory(BaseModel):
    student_id: int
    total: int
    average_grade: Optional[float] = None
    trend: Optional[GradeTrend] = None
    items: list[FeedbackEntry] = []
