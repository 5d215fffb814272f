from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import require_course_manager, require_role
from app.db.database import get_db
from app.domains.weights.services import WeightStore
from app.models.grading import GradingWeight
from app.models.user import User, UserRole
from app.schemas.grading import GradingWeightsResponse, GradingWeightsUpdate

router = APIRouter(prefix="/grading-weights", tags=["Grading Weights"])


def _weights_to_response(row: GradingWeight) -> dict:
    return {
        "course_id": row.course_id,
        "professor_uuid": row.professor_uuid,
        "assignment_weight": row.assignment_weight,
        "quiz_weight": row.quiz_weight,
        "midterm_weight": row.midterm_weight,
        "final_weight": row.final_weight,
        "updated_at": row.updated_at,
    }


@router.get("/{course_id}", response_model=GradingWeightsResponse)
def get_grading_weights(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    row = WeightStore(db).get_weights(course_id)
    if not row:
        raise HTTPException(status_code=404, detail="Grading weights not configured for this course")
    return _weights_to_response(row)


@router.post("/{course_id}", response_model=GradingWeightsResponse)
def set_grading_weights(
    course_id: int,
    data: GradingWeightsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    """Create or replace the course's category weights. The four values must total 100."""
    require_course_manager(db, current_user, course_id)
    row = WeightStore(db).set_weights(course_id, current_user.uuid, data.as_weights())
    return _weights_to_response(row)
