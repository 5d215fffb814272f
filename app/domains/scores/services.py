"""Score aggregator - records raw scores and derives category statistics."""

import logging
import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.grading_errors import INVALID_SCORE, raise_grading_error
from app.domains.weights.services import WeightStore, normalize_item_id, parse_assessment_type
from app.models.grading import AssessmentType, Grade

logger = logging.getLogger(__name__)


@dataclass
class CategoryAverage:
    avg_score: float = 0.0
    avg_max_score: float = 0.0
    avg_percentage: float = 0.0
    count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def _validate_score(score, max_score) -> tuple[float, float]:
    try:
        score = float(score)
        max_score = float(max_score)
    except (TypeError, ValueError):
        raise_grading_error(400, "score and max_score must be numbers", INVALID_SCORE)
    if not math.isfinite(score) or not math.isfinite(max_score):
        raise_grading_error(400, "score and max_score must be finite", INVALID_SCORE)
    if max_score <= 0:
        raise_grading_error(400, "max_score must be greater than 0", INVALID_SCORE)
    if score < 0:
        raise_grading_error(400, "score must not be negative", INVALID_SCORE)
    return score, max_score


def _percentage(score: float, max_score: float) -> float:
    return round((score / max_score) * 100, 2) if max_score else 0.0


class ScoreAggregator:
    """Service for recording scores and computing per-category figures."""

    def __init__(self, db: Session):
        self.db = db
        self.weights = WeightStore(db)

    # ------------------------------------------------------------------
    # Averages
    # ------------------------------------------------------------------

    def average_for_category(self, student_uuid: str, course_id: int, category) -> CategoryAverage:
        """Mean score, mean max score and mean normalized percentage for one category.

        avg_percentage averages score/max_score*100 per row, so items graded
        out of different maxima are combined on the same scale. A student with
        no rows in the category gets zeros across the board.
        """
        category = parse_assessment_type(category)
        row = (
            self.db.query(
                func.avg(Grade.score),
                func.avg(Grade.max_score),
                func.avg(Grade.score * 100.0 / Grade.max_score),
                func.count(Grade.id),
            )
            .filter(
                Grade.student_uuid == student_uuid,
                Grade.course_id == course_id,
                Grade.assessment_type == category,
            )
            .one()
        )
        avg_score, avg_max, avg_pct, count = row
        if not count:
            return CategoryAverage()
        return CategoryAverage(
            avg_score=float(avg_score or 0.0),
            avg_max_score=float(avg_max or 0.0),
            avg_percentage=float(avg_pct or 0.0),
            count=int(count),
        )

    def weighted_category_totals(self, student_uuid: str, course_id: int) -> dict[str, dict]:
        """Item-weighted running totals per category.

        Each row contributes (score / max_score) * item_weight, where an item
        with no configured weight counts as 0. Reporting only, nothing is saved.
        """
        item_weights = self.weights.item_weight_map(course_id)
        totals = {t.value: {"total_weighted_score": 0.0, "count": 0, "average": 0.0} for t in AssessmentType}

        rows = (
            self.db.query(Grade)
            .filter(Grade.student_uuid == student_uuid, Grade.course_id == course_id)
            .order_by(Grade.id)
            .all()
        )
        for g in rows:
            weight = item_weights.get((g.assessment_type, g.assessment_id), 0.0)
            bucket = totals[g.assessment_type.value]
            if g.max_score:
                bucket["total_weighted_score"] += (g.score / g.max_score) * weight
            bucket["count"] += 1

        for bucket in totals.values():
            if bucket["count"]:
                bucket["average"] = bucket["total_weighted_score"] / bucket["count"]
        return totals

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def find_grade(self, student_uuid: str, course_id: int, category, item_id=None) -> Grade | None:
        """Look up a grade by its natural key. item_id=None matches the itemless row."""
        category = parse_assessment_type(category)
        item_id = normalize_item_id(item_id)
        query = self.db.query(Grade).filter(
            Grade.student_uuid == student_uuid,
            Grade.course_id == course_id,
            Grade.assessment_type == category,
        )
        if item_id is None:
            query = query.filter(Grade.assessment_id.is_(None))
        else:
            query = query.filter(Grade.assessment_id == item_id)
        return query.first()

    def record_or_update_score(
        self,
        student_uuid: str,
        course_id: int,
        category,
        item_id=None,
        score: float = 0.0,
        max_score: float = 100.0,
        weight: float | None = None,
    ) -> tuple[Grade, bool]:
        """Insert or update the grade identified by (student, course, category, item).

        When weight is given along with an item_id the item weight is upserted
        in the same transaction. Returns (grade, created) so callers can tell
        an insert from an update.

        Raises:
            IntegrityError when a concurrent request inserted the same key
            first. Nothing from this call is kept in that case.
        """
        category = parse_assessment_type(category)
        item_id = normalize_item_id(item_id)
        score, max_score = _validate_score(score, max_score)

        if weight is not None and item_id is not None:
            self.weights.set_item_weight(course_id, category, item_id, weight, commit=False)

        grade = self.find_grade(student_uuid, course_id, category, item_id)
        created = grade is None
        if created:
            grade = Grade(
                student_uuid=student_uuid,
                course_id=course_id,
                assessment_type=category,
                assessment_id=item_id,
            )
            self.db.add(grade)

        grade.score = score
        grade.max_score = max_score
        grade.percentage = _percentage(score, max_score)
        if not created:
            grade.updated_at = datetime.now(timezone.utc)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"Duplicate grade rejected: student={student_uuid} course={course_id} "
                f"{category.value}/{item_id}"
            )
            raise
        self.db.refresh(grade)
        logger.info(
            f"Grade {grade.id} {'recorded' if created else 'updated'}: student={student_uuid} "
            f"course={course_id} {category.value}/{item_id} {score:g}/{max_score:g}"
        )
        return grade, created

    def get_grade(self, grade_id: int) -> Grade | None:
        return self.db.query(Grade).filter(Grade.id == grade_id).first()

    def update_grade(self, grade_id: int, updates: dict) -> Grade | None:
        """Apply score / max_score / weight changes to an existing grade."""
        grade = self.get_grade(grade_id)
        if not grade:
            return None

        score = updates.get("score")
        max_score = updates.get("max_score")
        score, max_score = _validate_score(
            grade.score if score is None else score,
            grade.max_score if max_score is None else max_score,
        )

        weight = updates.get("weight")
        if weight is not None and grade.assessment_id is not None:
            self.weights.set_item_weight(
                grade.course_id, grade.assessment_type, grade.assessment_id, weight, commit=False
            )

        grade.score = score
        grade.max_score = max_score
        grade.percentage = _percentage(score, max_score)
        grade.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(grade)
        return grade

    # ------------------------------------------------------------------
    # Listing / deletion
    # ------------------------------------------------------------------

    def list_grades_for_course(self, course_id: int) -> list[Grade]:
        return (
            self.db.query(Grade)
            .filter(Grade.course_id == course_id)
            .order_by(Grade.student_uuid, Grade.assessment_type, Grade.id)
            .all()
        )

    def list_grades_for_student(self, student_uuid: str, course_id: int) -> list[Grade]:
        return (
            self.db.query(Grade)
            .filter(Grade.student_uuid == student_uuid, Grade.course_id == course_id)
            .order_by(Grade.graded_at.desc(), Grade.id.desc())
            .all()
        )

    def latest_grades_by_category(self, student_uuid: str, course_id: int) -> dict[str, Grade | None]:
        """Most recently graded row in each category (None where nothing is graded)."""
        latest: dict[str, Grade | None] = {t.value: None for t in AssessmentType}
        for g in self.list_grades_for_student(student_uuid, course_id):
            if latest[g.assessment_type.value] is None:
                latest[g.assessment_type.value] = g
        return latest

    def delete_grades_for_assessment(self, course_id: int, category, item_id) -> list[Grade]:
        """Remove every student's grade for one item. Returns the deleted rows."""
        category = parse_assessment_type(category)
        item_id = normalize_item_id(item_id)
        query = self.db.query(Grade).filter(
            Grade.course_id == course_id,
            Grade.assessment_type == category,
        )
        if item_id is None:
            query = query.filter(Grade.assessment_id.is_(None))
        else:
            query = query.filter(Grade.assessment_id == item_id)

        rows = query.all()
        for g in rows:
            self.db.delete(g)
        self.db.commit()
        if rows:
            logger.info(f"Deleted {len(rows)} grades for course {course_id} {category.value}/{item_id}")
        return rows
