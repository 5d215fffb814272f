"""Grade resolver - turns category averages and weights into a course grade."""

import logging
import math
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.config import settings
from app.domains.scores.services import ScoreAggregator
from app.domains.weights.services import WeightStore
from app.models.course import Enrollment, EnrollmentStatus
from app.models.grading import AssessmentType
from app.models.report import FinalGrade, StudentCourseGrade
from app.models.user import User

logger = logging.getLogger(__name__)

# Inclusive lower bounds, checked top-down.
LETTER_THRESHOLDS = [
    (90.0, "A"),
    (80.0, "B"),
    (70.0, "C"),
    (60.0, "D"),
]

_SUMMARY_COLUMNS = {
    AssessmentType.ASSIGNMENT: "assignment_avg",
    AssessmentType.QUIZ: "quiz_avg",
    AssessmentType.MIDTERM: "midterm_score",
    AssessmentType.FINAL: "final_score",
}

_FINAL_REQUIRED = ("student_uuid", "course_id", "final_weighted_score", "weight_sum", "final_percentage")


def letter_grade(pct) -> str:
    """Map a 0-100 percentage to A/B/C/D/F. Missing or non-numeric input counts as 0."""
    try:
        value = float(pct)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value):
        value = 0.0
    for threshold, letter in LETTER_THRESHOLDS:
        if value >= threshold:
            return letter
    return "F"


class GradeResolver:
    """Computes and stores per-student course grades."""

    def __init__(self, db: Session, exclude_empty_categories: bool | None = None):
        self.db = db
        self.weights = WeightStore(db)
        self.scores = ScoreAggregator(db)
        if exclude_empty_categories is None:
            exclude_empty_categories = settings.exclude_empty_categories
        self.exclude_empty_categories = exclude_empty_categories

    def compute(self, student_uuid: str, course_id: int) -> dict:
        """Read-only computation of a student's weighted course grade.

        Returns the four category averages (normalized percentages), the
        weight sum actually applied, the weighted total and the letter.

        With exclude_empty_categories, a category with no graded rows is left
        out and the total is rescaled by the remaining weight sum.
        """
        weights = self.weights.effective_weights(course_id)

        result = {}
        weighted_total = 0.0
        weight_sum = 0.0
        for category in AssessmentType:
            avg = self.scores.average_for_category(student_uuid, course_id, category)
            result[_SUMMARY_COLUMNS[category]] = avg.avg_percentage
            if self.exclude_empty_categories and avg.count == 0:
                continue
            w = weights[category]
            weighted_total += avg.avg_percentage * (w / 100)
            weight_sum += w

        if self.exclude_empty_categories:
            weighted_total = (weighted_total / weight_sum) * 100 if weight_sum else 0.0

        result["weight_sum"] = weight_sum
        result["weighted_total"] = weighted_total
        result["letter_grade"] = letter_grade(weighted_total)
        return result

    # ------------------------------------------------------------------
    # Computed summaries
    # ------------------------------------------------------------------

    def get_student_course_grade(self, student_uuid: str, course_id: int) -> StudentCourseGrade | None:
        return (
            self.db.query(StudentCourseGrade)
            .filter(
                StudentCourseGrade.student_uuid == student_uuid,
                StudentCourseGrade.course_id == course_id,
            )
            .first()
        )

    def resolve_student(self, student_uuid: str, course_id: int) -> StudentCourseGrade:
        """Compute and upsert the student's summary row, overwriting every field."""
        computed = self.compute(student_uuid, course_id)

        row = self.get_student_course_grade(student_uuid, course_id)
        if not row:
            row = StudentCourseGrade(student_uuid=student_uuid, course_id=course_id)
            self.db.add(row)

        for field, value in computed.items():
            setattr(row, field, value)
        row.updated_at = datetime.now(timezone.utc)

        self.db.commit()
        self.db.refresh(row)
        logger.info(
            f"Resolved grade for student {student_uuid} in course {course_id}: "
            f"{row.weighted_total:.2f} ({row.letter_grade})"
        )
        return row

    def resolve_course(self, course_id: int) -> list[StudentCourseGrade]:
        """Resolve every actively enrolled student. Failures are logged and skipped."""
        enrollments = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.course_id == course_id,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .order_by(Enrollment.id)
            .all()
        )
        logger.info(f"Resolving grades for course {course_id}: {len(enrollments)} active enrollments")

        resolved = []
        skipped = 0
        for enrollment in enrollments:
            student_uuid = enrollment.student_uuid
            if not student_uuid:
                skipped += 1
                logger.warning(f"Enrollment {enrollment.id} in course {course_id} has no student, skipping")
                continue
            if not self.db.query(User.id).filter(User.uuid == student_uuid).first():
                skipped += 1
                logger.warning(
                    f"Enrollment {enrollment.id} in course {course_id} references unknown student "
                    f"{student_uuid}, skipping"
                )
                continue
            try:
                resolved.append(self.resolve_student(student_uuid, course_id))
            except Exception as e:
                skipped += 1
                logger.warning(f"Grade resolution failed for student {student_uuid} in course {course_id}: {e}")
                self.db.rollback()

        logger.info(f"Course {course_id} grade resolution complete: {len(resolved)} resolved, {skipped} skipped")
        return resolved

    # ------------------------------------------------------------------
    # Published final grades
    # ------------------------------------------------------------------

    def get_final_grade(self, student_uuid: str, course_id: int) -> FinalGrade | None:
        return (
            self.db.query(FinalGrade)
            .filter(FinalGrade.student_uuid == student_uuid, FinalGrade.course_id == course_id)
            .first()
        )

    def record_final_grades(self, entries: list[dict], professor_uuid: str | None) -> list[FinalGrade]:
        """Upsert caller-supplied final grades.

        Entries missing a required value, or naming a student with no account,
        are skipped. The letter is derived from final_percentage when the
        entry does not carry one.
        """
        saved = []
        for entry in entries:
            missing = [k for k in _FINAL_REQUIRED if entry.get(k) is None]
            if missing:
                logger.warning(f"Skipping final grade entry missing {', '.join(missing)}")
                continue
            if not self.db.query(User.id).filter(User.uuid == entry["student_uuid"]).first():
                logger.warning(
                    f"Skipping final grade for unknown student {entry['student_uuid']} "
                    f"in course {entry['course_id']}"
                )
                continue

            row = self.get_final_grade(entry["student_uuid"], entry["course_id"])
            if not row:
                row = FinalGrade(student_uuid=entry["student_uuid"], course_id=entry["course_id"])
                self.db.add(row)

            row.final_weighted_score = float(entry["final_weighted_score"])
            row.weight_sum = float(entry["weight_sum"])
            row.final_percentage = float(entry["final_percentage"])
            row.letter_grade = entry.get("letter_grade") or letter_grade(row.final_percentage)
            row.notes = entry.get("notes")
            row.professor_uuid = professor_uuid
            row.computed_at = datetime.now(timezone.utc)

            self.db.commit()
            self.db.refresh(row)
            saved.append(row)

        logger.info(f"Recorded {len(saved)} of {len(entries)} final grades")
        return saved

    def list_final_grades_for_course(self, course_id: int) -> list[FinalGrade]:
        return (
            self.db.query(FinalGrade)
            .filter(FinalGrade.course_id == course_id)
            .order_by(FinalGrade.student_uuid)
            .all()
        )

    def list_final_grades_for_student(self, student_uuid: str) -> list[FinalGrade]:
        return (
            self.db.query(FinalGrade)
            .filter(FinalGrade.student_uuid == student_uuid)
            .order_by(FinalGrade.course_id)
            .all()
        )
