from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.db.database import Base


class StudentCourseGrade(Base):
    """Computed grade summary for one student in one course.

    Written only by the grade resolver; recomputation overwrites the row.
    """

    __tablename__ = "student_course_grades"

    id = Column(Integer, primary_key=True, index=True)
    student_uuid = Column(String(36), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)

    # Category averages on a 0-100 scale
    assignment_avg = Column(Float, nullable=False, default=0.0)
    quiz_avg = Column(Float, nullable=False, default=0.0)
    midterm_score = Column(Float, nullable=False, default=0.0)
    final_score = Column(Float, nullable=False, default=0.0)

    weight_sum = Column(Float, nullable=False, default=0.0)
    weighted_total = Column(Float, nullable=False, default=0.0)
    letter_grade = Column(String(2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("student_uuid", "course_id", name="uq_student_course_grades"),
    )


class FinalGrade(Base):
    """Instructor-published final grade. Values are supplied by the caller."""

    __tablename__ = "final_grades"

    id = Column(Integer, primary_key=True, index=True)
    student_uuid = Column(String(36), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)

    final_weighted_score = Column(Float, nullable=False)
    weight_sum = Column(Float, nullable=False)
    final_percentage = Column(Float, nullable=False)
    letter_grade = Column(String(2), nullable=False)

    professor_uuid = Column(String(36), nullable=True)
    notes = Column(Text, nullable=True)
    computed_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("student_uuid", "course_id", name="uq_final_grades_student_course"),
    )
