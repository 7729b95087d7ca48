import enum


class Role(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    AWAITING_CORRECTION = "awaiting_correction"
    GRADED = "graded"
    RETURNED = "returned"
    LATE = "late"


class AssignmentStatus(str, enum.Enum):
    ACTIVE = "active"
    PARTIALLY_SUBMITTED = "partially_submitted"
    FULLY_SUBMITTED = "fully_submitted"
    AWAITING_CORRECTION = "awaiting_correction"
    PARTIALLY_GRADED = "partially_graded"
    FULLY_GRADED = "fully_graded"
    ARCHIVED = "archived"


class ActivityType(str, enum.Enum):
    EXAM = "exam"
    EXERCISE = "exercise"
    ESSAY = "essay"
    PRESENTATION = "presentation"
    QUIZ = "quiz"
    PROJECT = "project"


class Competency(str, enum.Enum):
    READING_COMPREHENSION = "reading_comprehension"
    ALGEBRAIC_CALCULATION = "algebraic_calculation"
    CRITICAL_ANALYSIS = "critical_analysis"
    PROBLEM_SOLVING = "problem_solving"
    TIME_MANAGEMENT = "time_management"


class DifficultyCategory(str, enum.Enum):
    CONCEPTUAL = "conceptual"
    PRACTICAL = "practical"
    TEMPORAL = "temporal"
    ASSESSMENT = "assessment"


class AnnouncementPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
