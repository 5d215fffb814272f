from pydantic import BaseModel, Field
from datetime import datetime


class StudentCourseGradeResponse(BaseModel):
    id: int
    student_uuid: str
    course_id: int
    assignment_avg: float
    quiz_avg: float
    midterm_score: float
    final_score: float
    weight_sum: float
    weighted_total: float
    letter_grade: str
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class CourseReportResponse(BaseModel):
    count: int
    data: list[StudentCourseGradeResponse]


# --- Published final grades ---

class FinalGradeEntry(BaseModel):
    student_uuid: str | None = None
    course_id: int | None = None
    final_weighted_score: float | None = None
    weight_sum: float | None = None
    final_percentage: float | None = None
    letter_grade: str | None = Field(default=None, max_length=2)
    notes: str | None = None


class FinalGradeBatch(BaseModel):
    grades: list[FinalGradeEntry]


class FinalGradeResponse(BaseModel):
    id: int
    student_uuid: str
    course_id: int
    final_weighted_score: float
    weight_sum: float
    final_percentage: float
    letter_grade: str
    professor_uuid: str | None
    notes: str | None
    computed_at: datetime | None = None

    class Config:
        from_attributes = True


class TranscriptCourse(BaseModel):
    course_id: int
    course_code: str
    course_name: str
    semester: str | None
    credits: int
    weights: dict | None
    summary: StudentCourseGradeResponse | None
    final_grade: FinalGradeResponse | None
    grades: list[dict]


class TranscriptResponse(BaseModel):
    student_uuid: str
    courses: list[TranscriptCourse]
