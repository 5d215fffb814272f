from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, require_course_manager, require_role, require_student_view
from app.db.database import get_db
from app.domains.grading.services import GradeResolver
from app.models.user import User, UserRole
from app.schemas.report import CourseReportResponse, StudentCourseGradeResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/course/{course_id}", response_model=CourseReportResponse)
def resolve_course_grades(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    """Recompute every active student's grade. Students that cannot be resolved are left out of the result."""
    require_course_manager(db, current_user, course_id)
    rows = GradeResolver(db).resolve_course(course_id)
    return {"count": len(rows), "data": rows}


@router.post("/student/{student_uuid}/course/{course_id}", response_model=StudentCourseGradeResponse)
def resolve_student_grade(
    student_uuid: str,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    if not db.query(User.id).filter(User.uuid == student_uuid).first():
        raise HTTPException(status_code=404, detail="Student not found")
    return GradeResolver(db).resolve_student(student_uuid, course_id)


@router.get("/student/{student_uuid}/course/{course_id}", response_model=StudentCourseGradeResponse)
def get_student_grade(
    student_uuid: str,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_student_view(db, current_user, student_uuid, course_id)
    row = GradeResolver(db).get_student_course_grade(student_uuid, course_id)
    if not row:
        raise HTTPException(status_code=404, detail="No computed grade for this student and course")
    return row
