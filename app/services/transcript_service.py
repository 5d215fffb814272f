"""Per-student transcript view across all enrolled courses.

Combines, for each active enrollment, the course info, the saved computed
summary, the published final grade, the raw grade rows (with item weights
attached where configured) and the course's category weights. Nothing here
is required to exist: a missing piece comes back as None or an empty list.
"""

import logging

from sqlalchemy.orm import Session

from app.domains.grading.services import GradeResolver
from app.domains.scores.services import ScoreAggregator
from app.domains.weights.services import WeightStore
from app.models.course import Course, Enrollment, EnrollmentStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------

def _summary_dict(row) -> dict | None:
    if row is None:
        return None
    return {
        "id": row.id,
        "student_uuid": row.student_uuid,
        "course_id": row.course_id,
        "assignment_avg": row.assignment_avg,
        "quiz_avg": row.quiz_avg,
        "midterm_score": row.midterm_score,
        "final_score": row.final_score,
        "weight_sum": row.weight_sum,
        "weighted_total": row.weighted_total,
        "letter_grade": row.letter_grade,
        "updated_at": row.updated_at,
    }


def _final_dict(row) -> dict | None:
    if row is None:
        return None
    return {
        "id": row.id,
        "student_uuid": row.student_uuid,
        "course_id": row.course_id,
        "final_weighted_score": row.final_weighted_score,
        "weight_sum": row.weight_sum,
        "final_percentage": row.final_percentage,
        "letter_grade": row.letter_grade,
        "professor_uuid": row.professor_uuid,
        "notes": row.notes,
        "computed_at": row.computed_at,
    }


def _weights_dict(row) -> dict | None:
    if row is None:
        return None
    return {category.value: weight for category, weight in row.as_dict().items()}


# ---------------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------------

def get_active_courses(db: Session, student_uuid: str, professor_id: int | None = None) -> list[Course]:
    """Courses the student is actively enrolled in, optionally limited to one professor's courses."""
    query = (
        db.query(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .filter(
            Enrollment.student_uuid == student_uuid,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
    )
    if professor_id is not None:
        query = query.filter(Course.professor_id == professor_id)
    return query.order_by(Course.id).all()


def build_transcript(db: Session, student_uuid: str, professor_id: int | None = None) -> dict:
    weights = WeightStore(db)
    scores = ScoreAggregator(db)
    resolver = GradeResolver(db)

    courses = []
    for course in get_active_courses(db, student_uuid, professor_id):
        item_weights = weights.item_weight_map(course.id)
        grades = []
        for g in scores.list_grades_for_student(student_uuid, course.id):
            grades.append({
                "id": g.id,
                "assessment_type": g.assessment_type.value,
                "assessment_id": g.assessment_id,
                "score": g.score,
                "max_score": g.max_score,
                "percentage": g.percentage,
                "weight": item_weights.get((g.assessment_type, g.assessment_id)),
                "graded_at": g.graded_at,
            })

        courses.append({
            "course_id": course.id,
            "course_code": course.course_code,
            "course_name": course.course_name,
            "semester": course.semester,
            "credits": course.credits,
            "weights": _weights_dict(weights.get_weights(course.id)),
            "summary": _summary_dict(resolver.get_student_course_grade(student_uuid, course.id)),
            "final_grade": _final_dict(resolver.get_final_grade(student_uuid, course.id)),
            "grades": grades,
        })

    logger.debug(f"Built transcript for student {student_uuid}: {len(courses)} courses")
    return {"student_uuid": student_uuid, "courses": courses}
