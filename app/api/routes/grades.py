from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, require_course_manager, require_role, require_student_view
from app.db.database import get_db
from app.domains.scores.services import ScoreAggregator
from app.domains.weights.services import WeightStore, parse_assessment_type
from app.models.grading import Grade
from app.models.user import User, UserRole
from app.schemas.grading import (
    CategoryAverageResponse,
    DeletedGradesResponse,
    GradeCreate,
    GradeResponse,
    GradeUpdate,
    WeightedTotalsResponse,
)
from app.schemas.report import TranscriptResponse
from app.services.transcript_service import build_transcript

router = APIRouter(prefix="/grades", tags=["Grades"])


def _grade_to_response(grade: Grade, weight: float | None = None) -> dict:
    return {
        "id": grade.id,
        "student_uuid": grade.student_uuid,
        "course_id": grade.course_id,
        "assessment_type": grade.assessment_type.value,
        "assessment_id": grade.assessment_id,
        "score": grade.score,
        "max_score": grade.max_score,
        "percentage": grade.percentage,
        "weight": weight,
        "graded_at": grade.graded_at,
        "updated_at": grade.updated_at,
    }


def _with_weights(db: Session, course_id: int, grades: list[Grade]) -> list[dict]:
    weights = WeightStore(db).item_weight_map(course_id)
    return [_grade_to_response(g, weights.get((g.assessment_type, g.assessment_id))) for g in grades]


@router.post("/", response_model=GradeResponse)
def record_grade(
    data: GradeCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    """Record a score. Re-posting the same student/course/type/item updates it in place (200 instead of 201)."""
    require_course_manager(db, current_user, data.course_id)
    if not db.query(User.id).filter(User.uuid == data.student_uuid).first():
        raise HTTPException(status_code=404, detail="Student not found")

    grade, created = ScoreAggregator(db).record_or_update_score(
        student_uuid=data.student_uuid,
        course_id=data.course_id,
        category=data.assessment_type,
        item_id=data.assessment_id,
        score=data.score,
        max_score=data.max_score,
        weight=data.weight,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    weight = None
    if grade.assessment_id is not None:
        record = WeightStore(db).get_item_weight_record(grade.course_id, grade.assessment_type, grade.assessment_id)
        weight = record.weight if record else None
    return _grade_to_response(grade, weight)


@router.put("/{grade_id}", response_model=GradeResponse)
def update_grade(
    grade_id: int,
    data: GradeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    service = ScoreAggregator(db)
    grade = service.get_grade(grade_id)
    if not grade:
        raise HTTPException(status_code=404, detail="Grade not found")
    require_course_manager(db, current_user, grade.course_id)

    grade = service.update_grade(grade_id, data.model_dump(exclude_unset=True))
    return _with_weights(db, grade.course_id, [grade])[0]


@router.get("/course/{course_id}", response_model=list[GradeResponse])
def list_course_grades(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    return _with_weights(db, course_id, ScoreAggregator(db).list_grades_for_course(course_id))


@router.get("/student/{student_uuid}/course/{course_id}", response_model=list[GradeResponse])
def list_student_grades(
    student_uuid: str,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    return _with_weights(db, course_id, ScoreAggregator(db).list_grades_for_student(student_uuid, course_id))


@router.get("/average/{student_uuid}/{course_id}/{assessment_type}", response_model=CategoryAverageResponse)
def get_category_average(
    student_uuid: str,
    course_id: int,
    assessment_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Average of one category. A category with no grades answers zeros, not 404."""
    category = parse_assessment_type(assessment_type)
    require_student_view(db, current_user, student_uuid, course_id)
    avg = ScoreAggregator(db).average_for_category(student_uuid, course_id, category)
    return {
        "student_uuid": student_uuid,
        "course_id": course_id,
        "assessment_type": category.value,
        **avg.to_dict(),
    }


@router.get("/weighted-totals/{student_uuid}/{course_id}", response_model=WeightedTotalsResponse)
def get_weighted_totals(
    student_uuid: str,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_student_view(db, current_user, student_uuid, course_id)
    return {
        "student_uuid": student_uuid,
        "course_id": course_id,
        "categories": ScoreAggregator(db).weighted_category_totals(student_uuid, course_id),
    }


@router.get("/student/{student_uuid}/all-courses", response_model=TranscriptResponse)
def get_all_course_grades(
    student_uuid: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every active course of the student with its grades, weights and saved results."""
    require_student_view(db, current_user, student_uuid)
    if not db.query(User.id).filter(User.uuid == student_uuid).first():
        raise HTTPException(status_code=404, detail="Student not found")
    professor_id = current_user.id if current_user.has_role(UserRole.PROFESSOR) else None
    return build_transcript(db, student_uuid, professor_id=professor_id)


@router.delete("/assessment/{course_id}/{assessment_type}/{assessment_id}", response_model=DeletedGradesResponse)
def delete_assessment_grades(
    course_id: int,
    assessment_type: str,
    assessment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    deleted = ScoreAggregator(db).delete_grades_for_assessment(course_id, assessment_type, assessment_id)
    return {"deleted": len(deleted)}
