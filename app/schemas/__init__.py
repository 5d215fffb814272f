from app.schemas.user import UserCreate, UserResponse, Token
from app.schemas.course import CourseCreate, CourseResponse, EnrollmentCreate, EnrollmentResponse
from app.schemas.grading import (
    GradingWeightsUpdate, GradingWeightsResponse,
    AssessmentWeightCreate, AssessmentWeightResponse,
    GradeCreate, GradeUpdate, GradeResponse,
    CategoryAverageResponse, WeightedTotalsResponse,
)
from app.schemas.report import (
    StudentCourseGradeResponse, CourseReportResponse,
    FinalGradeEntry, FinalGradeBatch, FinalGradeResponse,
    TranscriptResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "Token",
    "CourseCreate", "CourseResponse", "EnrollmentCreate", "EnrollmentResponse",
    "GradingWeightsUpdate", "GradingWeightsResponse",
    "AssessmentWeightCreate", "AssessmentWeightResponse",
    "GradeCreate", "GradeUpdate", "GradeResponse",
    "CategoryAverageResponse", "WeightedTotalsResponse",
    "StudentCourseGradeResponse", "CourseReportResponse",
    "FinalGradeEntry", "FinalGradeBatch", "FinalGradeResponse",
    "TranscriptResponse",
]
