from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class CourseCreate(BaseModel):
    course_code: str
    course_name: str
    semester: Optional[str] = None
    credits: int = 3
    professor_id: int | None = None


class CourseResponse(BaseModel):
    id: int
    course_code: str
    course_name: str
    semester: str | None
    credits: int
    professor_id: int | None
    professor_name: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class EnrollmentCreate(BaseModel):
    student_uuid: str


class EnrollmentResponse(BaseModel):
    id: int
    course_id: int
    student_uuid: str | None
    student_name: str | None = None
    student_email: str | None = None
    status: str
    enrolled_at: datetime | None = None
