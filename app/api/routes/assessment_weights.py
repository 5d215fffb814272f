from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import require_course_manager, require_role
from app.db.database import get_db
from app.domains.weights.services import WeightStore
from app.models.grading import AssessmentWeight
from app.models.user import User, UserRole
from app.schemas.grading import AssessmentWeightCreate, AssessmentWeightResponse

router = APIRouter(prefix="/assessment-weights", tags=["Assessment Weights"])


def _item_weight_to_response(row: AssessmentWeight) -> dict:
    return {
        "id": row.id,
        "course_id": row.course_id,
        "assessment_type": row.assessment_type.value,
        "assessment_id": row.assessment_id,
        "weight": row.weight,
        "updated_at": row.updated_at,
    }


@router.post("/", response_model=AssessmentWeightResponse, status_code=status.HTTP_201_CREATED)
def set_assessment_weight(
    data: AssessmentWeightCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, data.course_id)
    row = WeightStore(db).set_item_weight(data.course_id, data.assessment_type, data.assessment_id, data.weight)
    return _item_weight_to_response(row)


@router.get("/{course_id}", response_model=list[AssessmentWeightResponse])
def list_assessment_weights(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    return [_item_weight_to_response(r) for r in WeightStore(db).list_item_weights(course_id)]


@router.get("/{course_id}/{assessment_type}/{assessment_id}", response_model=AssessmentWeightResponse)
def get_assessment_weight(
    course_id: int,
    assessment_type: str,
    assessment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    row = WeightStore(db).get_item_weight_record(course_id, assessment_type, assessment_id)
    if not row:
        raise HTTPException(status_code=404, detail="Assessment weight not found")
    return _item_weight_to_response(row)


@router.delete("/{course_id}/{assessment_type}/{assessment_id}", response_model=AssessmentWeightResponse)
def delete_assessment_weight(
    course_id: int,
    assessment_type: str,
    assessment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    row = WeightStore(db).delete_item_weight(course_id, assessment_type, assessment_id)
    if not row:
        raise HTTPException(status_code=404, detail="Assessment weight not found")
    return _item_weight_to_response(row)
