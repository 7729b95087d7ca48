from pydantic import BaseModel


class TeacherClassroomStats(BaseModel):
    classroom_id: int
    classroom_name: str
    total_students: int
    total_assignments: int
    total_submissions: int
    awaiting_correction: int
    graded: int
