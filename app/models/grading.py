import enum

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.db.database import Base


class AssessmentType(str, enum.Enum):
    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    MIDTERM = "midterm"
    FINAL = "final"


class GradingWeight(Base):
    """Category weights for one course, as percentages (expected to sum to 100)."""

    __tablename__ = "grading_weights"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, unique=True)
    professor_uuid = Column(String(36), nullable=True)

    assignment_weight = Column(Float, nullable=False)
    quiz_weight = Column(Float, nullable=False)
    midterm_weight = Column(Float, nullable=False)
    final_weight = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    def as_dict(self) -> dict[AssessmentType, float]:
        return {
            AssessmentType.ASSIGNMENT: self.assignment_weight,
            AssessmentType.QUIZ: self.quiz_weight,
            AssessmentType.MIDTERM: self.midterm_weight,
            AssessmentType.FINAL: self.final_weight,
        }


class AssessmentWeight(Base):
    """Weight of one specific graded item (e.g. quiz #3) within its category."""

    __tablename__ = "assessment_weights"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    assessment_type = Column(Enum(AssessmentType), nullable=False)
    assessment_id = Column(String(64), nullable=False)
    weight = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("course_id", "assessment_type", "assessment_id", name="uq_assessment_weights_item"),
    )


class Grade(Base):
    """One recorded score. Natural key: (student_uuid, course_id, assessment_type, assessment_id)."""

    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, index=True)
    student_uuid = Column(String(36), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    assessment_type = Column(Enum(AssessmentType), nullable=False)
    assessment_id = Column(String(64), nullable=True)  # null for single-item categories

    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False, default=100.0)
    percentage = Column(Float, nullable=False)  # pre-computed: (score / max_score) * 100

    graded_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "student_uuid", "course_id", "assessment_type", "assessment_id", name="uq_grades_natural_key"
        ),
        # NULLs never conflict in the constraint above, so itemless rows need their own index
        Index(
            "uq_grades_itemless",
            "student_uuid", "course_id", "assessment_type",
            unique=True,
            sqlite_where=assessment_id.is_(None),
            postgresql_where=assessment_id.is_(None),
        ),
        Index("ix_grades_course_assessment", "course_id", "assessment_type", "assessment_id"),
    )
