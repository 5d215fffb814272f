from pydantic import BaseModel, Field
from datetime import datetime


# --- Category weights ---

class GradingWeightsUpdate(BaseModel):
    """Omitted categories fall back to the default split (20/20/25/35)."""
    assignment_weight: float | None = None
    quiz_weight: float | None = None
    midterm_weight: float | None = None
    final_weight: float | None = None

    def as_weights(self) -> dict:
        return {
            "assignment": self.assignment_weight,
            "quiz": self.quiz_weight,
            "midterm": self.midterm_weight,
            "final": self.final_weight,
        }


class GradingWeightsResponse(BaseModel):
    course_id: int
    professor_uuid: str | None
    assignment_weight: float
    quiz_weight: float
    midterm_weight: float
    final_weight: float
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# --- Item weights ---

class AssessmentWeightCreate(BaseModel):
    course_id: int
    assessment_type: str
    assessment_id: str
    weight: float


class AssessmentWeightResponse(BaseModel):
    id: int
    course_id: int
    assessment_type: str
    assessment_id: str
    weight: float
    updated_at: datetime | None = None


# --- Grades ---

class GradeCreate(BaseModel):
    student_uuid: str
    course_id: int
    assessment_type: str
    assessment_id: str | None = None
    score: float
    max_score: float = 100.0
    weight: float | None = None


class GradeUpdate(BaseModel):
    score: float | None = None
    max_score: float | None = None
    weight: float | None = None


class GradeResponse(BaseModel):
    id: int
    student_uuid: str
    course_id: int
    assessment_type: str
    assessment_id: str | None
    score: float
    max_score: float
    percentage: float
    weight: float | None = None
    graded_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryAverageResponse(BaseModel):
    student_uuid: str
    course_id: int
    assessment_type: str
    avg_score: float
    avg_max_score: float
    avg_percentage: float
    count: int


class CategoryTotal(BaseModel):
    total_weighted_score: float
    count: int
    average: float


class WeightedTotalsResponse(BaseModel):
    student_uuid: str
    course_id: int
    categories: dict[str, CategoryTotal]


class DeletedGradesResponse(BaseModel):
    deleted: int = Field(ge=0)
