import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    DROPPED = "dropped"


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    course_code = Column(String(20), unique=True, nullable=False, index=True)
    course_name = Column(String(255), nullable=False)
    semester = Column(String(50), nullable=True)
    credits = Column(Integer, nullable=False, default=3)
    professor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    professor = relationship("User")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")


class Enrollment(Base):
    """A student's membership in a course.

    ``student_uuid`` is nullable: rows imported without a linked account are
    kept, but course-wide grade resolution skips them.
    """

    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    student_uuid = Column(String(36), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(EnrollmentStatus), nullable=False, default=EnrollmentStatus.ACTIVE)
    enrolled_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("Course", back_populates="enrollments")
    student = relationship("User", primaryjoin="Enrollment.student_uuid == User.uuid", viewonly=True)

    __table_args__ = (
        UniqueConstraint("student_uuid", "course_id", name="uq_enrollments_student_course"),
    )
