"""Weight store - per-course category weights and per-item assessment weights."""

import logging
import math
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.grading_errors import (
    INVALID_ASSESSMENT_TYPE,
    INVALID_WEIGHT,
    MISSING_IDENTIFIER,
    WEIGHTS_SUM_INVALID,
    raise_grading_error,
)
from app.models.grading import AssessmentType, AssessmentWeight, GradingWeight

logger = logging.getLogger(__name__)

# Applied for any category a weight submission leaves out.
DEFAULT_WEIGHTS: dict[AssessmentType, float] = {
    AssessmentType.ASSIGNMENT: 20.0,
    AssessmentType.QUIZ: 20.0,
    AssessmentType.MIDTERM: 25.0,
    AssessmentType.FINAL: 35.0,
}

WEIGHT_SUM_TOLERANCE = 0.001

_WEIGHT_COLUMNS = {
    AssessmentType.ASSIGNMENT: "assignment_weight",
    AssessmentType.QUIZ: "quiz_weight",
    AssessmentType.MIDTERM: "midterm_weight",
    AssessmentType.FINAL: "final_weight",
}


def parse_assessment_type(value) -> AssessmentType:
    """Coerce a raw category value to AssessmentType or raise a 400 with INVALID_ASSESSMENT_TYPE."""
    if isinstance(value, AssessmentType):
        return value
    try:
        return AssessmentType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in AssessmentType)
        raise_grading_error(
            status_code=400,
            detail=f"Invalid assessment type '{value}'. Must be one of: {allowed}",
            error_code=INVALID_ASSESSMENT_TYPE,
        )


def normalize_item_id(item_id) -> str | None:
    """Item ids are compared stripped; blank means no item."""
    if item_id is None:
        return None
    item_id = str(item_id).strip()
    return item_id or None


def validate_weight_value(value, label: str = "weight") -> float:
    """Return value as a float, rejecting non-numeric, non-finite and negative values."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise_grading_error(400, f"{label} must be a number", INVALID_WEIGHT)
    if not math.isfinite(number) or number < 0:
        raise_grading_error(400, f"{label} must be a non-negative number", INVALID_WEIGHT)
    return number


class WeightStore:
    """Service for grading weight configuration."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Course-level category weights
    # ------------------------------------------------------------------

    def get_weights(self, course_id: int) -> GradingWeight | None:
        return self.db.query(GradingWeight).filter(GradingWeight.course_id == course_id).first()

    def effective_weights(self, course_id: int) -> dict[AssessmentType, float]:
        """Configured weights for the course, or all zeros if never configured."""
        row = self.get_weights(course_id)
        if not row:
            return {t: 0.0 for t in AssessmentType}
        return {t: float(w or 0.0) for t, w in row.as_dict().items()}

    def validate_weights(self, weights: dict) -> dict[AssessmentType, float]:
        """Normalize a weight mapping and check the four categories sum to 100.

        Missing categories are filled from DEFAULT_WEIGHTS. Keys may be
        AssessmentType members or their string values.

        Raises:
            GradingErrorException (400) on an unknown category, a negative or
            non-numeric value, or a total outside 100 +/- WEIGHT_SUM_TOLERANCE.
        """
        resolved = dict(DEFAULT_WEIGHTS)
        for key, value in weights.items():
            if value is None:
                continue
            category = parse_assessment_type(key)
            resolved[category] = validate_weight_value(value, f"{category.value} weight")

        total = sum(resolved.values())
        if abs(total - 100) > WEIGHT_SUM_TOLERANCE:
            raise_grading_error(
                status_code=400,
                detail=f"Total weights must equal 100 (got {total:g})",
                error_code=WEIGHTS_SUM_INVALID,
            )
        return resolved

    def set_weights(self, course_id: int, professor_uuid: str | None, weights: dict) -> GradingWeight:
        """Validate and upsert the course's weights. Re-submission overwrites the existing row."""
        resolved = self.validate_weights(weights)

        row = self.get_weights(course_id)
        if not row:
            row = GradingWeight(course_id=course_id)
            self.db.add(row)

        row.professor_uuid = professor_uuid
        for category, column in _WEIGHT_COLUMNS.items():
            setattr(row, column, resolved[category])
        row.updated_at = datetime.now(timezone.utc)

        self.db.commit()
        self.db.refresh(row)
        logger.info(
            f"Grading weights set for course {course_id}: "
            + ", ".join(f"{c.value}={resolved[c]:g}" for c in AssessmentType)
        )
        return row

    # ------------------------------------------------------------------
    # Per-item weights
    # ------------------------------------------------------------------

    def _item_query(self, course_id: int, category: AssessmentType, item_id: str):
        return self.db.query(AssessmentWeight).filter(
            AssessmentWeight.course_id == course_id,
            AssessmentWeight.assessment_type == category,
            AssessmentWeight.assessment_id == normalize_item_id(item_id),
        )

    def get_item_weight_record(self, course_id: int, category, item_id: str) -> AssessmentWeight | None:
        category = parse_assessment_type(category)
        return self._item_query(course_id, category, item_id).first()

    def get_item_weight(self, course_id: int, category, item_id: str) -> float:
        """Weight configured for one graded item, 0 when never set."""
        row = self.get_item_weight_record(course_id, category, item_id)
        return float(row.weight) if row and row.weight is not None else 0.0

    def set_item_weight(self, course_id: int, category, item_id: str, weight, commit: bool = True) -> AssessmentWeight:
        """Upsert the weight of one item, keyed by (course, category, item).

        With commit=False the change is only flushed, so a caller can write it
        in the same transaction as its own rows.
        """
        category = parse_assessment_type(category)
        item_id = normalize_item_id(item_id)
        if item_id is None:
            raise_grading_error(400, "assessment_id is required for an item weight", MISSING_IDENTIFIER)
        value = validate_weight_value(weight)

        row = self._item_query(course_id, category, item_id).first()
        if not row:
            row = AssessmentWeight(
                course_id=course_id,
                assessment_type=category,
                assessment_id=item_id,
            )
            self.db.add(row)

        row.weight = value
        row.updated_at = datetime.now(timezone.utc)
        if not commit:
            self.db.flush()
            return row
        self.db.commit()
        self.db.refresh(row)
        return row

    def list_item_weights(self, course_id: int) -> list[AssessmentWeight]:
        return (
            self.db.query(AssessmentWeight)
            .filter(AssessmentWeight.course_id == course_id)
            .order_by(AssessmentWeight.assessment_type, AssessmentWeight.assessment_id)
            .all()
        )

    def item_weight_map(self, course_id: int) -> dict[tuple[AssessmentType, str], float]:
        """All item weights for a course keyed by (category, item id)."""
        return {
            (row.assessment_type, row.assessment_id): float(row.weight or 0.0)
            for row in self.list_item_weights(course_id)
        }

    def delete_item_weight(self, course_id: int, category, item_id: str) -> AssessmentWeight | None:
        category = parse_assessment_type(category)
        row = self._item_query(course_id, category, item_id).first()
        if not row:
            return None
        self.db.delete(row)
        self.db.commit()
        return row
