from app.models.user import User, UserRole
from app.models.course import Course, Enrollment, EnrollmentStatus
from app.models.grading import AssessmentType, AssessmentWeight, Grade, GradingWeight
from app.models.report import FinalGrade, StudentCourseGrade
from app.models.token_blacklist import TokenBlacklist

__all__ = [
    "User",
    "UserRole",
    "Course",
    "Enrollment",
    "EnrollmentStatus",
    "AssessmentType",
    "AssessmentWeight",
    "Grade",
    "GradingWeight",
    "FinalGrade",
    "StudentCourseGrade",
    "TokenBlacklist",
]
