from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, require_course_manager, require_role, require_student_view
from app.db.database import get_db
from app.domains.grading.services import GradeResolver
from app.models.course import Course
from app.models.user import User, UserRole
from app.schemas.report import FinalGradeBatch, FinalGradeResponse

router = APIRouter(prefix="/final-grades", tags=["Final Grades"])


@router.post("/", response_model=list[FinalGradeResponse])
def publish_final_grades(
    data: FinalGradeBatch,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    """Save instructor-supplied final grades. Incomplete entries are skipped."""
    if not data.grades:
        raise HTTPException(status_code=400, detail="grades must be a non-empty list")

    course_ids = {e.course_id for e in data.grades if e.course_id is not None}
    for course_id in sorted(course_ids):
        require_course_manager(db, current_user, course_id)

    entries = [e.model_dump() for e in data.grades]
    return GradeResolver(db).record_final_grades(entries, current_user.uuid)


@router.get("/course/{course_id}", response_model=list[FinalGradeResponse])
def list_course_final_grades(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    return GradeResolver(db).list_final_grades_for_course(course_id)


@router.get("/student/{student_uuid}/course/{course_id}", response_model=FinalGradeResponse)
def get_student_final_grade(
    student_uuid: str,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_student_view(db, current_user, student_uuid, course_id)
    row = GradeResolver(db).get_final_grade(student_uuid, course_id)
    if not row:
        raise HTTPException(status_code=404, detail="Final grade not found")
    return row


@router.get("/student/{student_uuid}", response_model=list[FinalGradeResponse])
def list_student_final_grades(
    student_uuid: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All published final grades of a student. Professors only see their own courses."""
    require_student_view(db, current_user, student_uuid)
    rows = GradeResolver(db).list_final_grades_for_student(student_uuid)
    if current_user.has_role(UserRole.PROFESSOR):
        taught = {c.id for c in db.query(Course.id).filter(Course.professor_id == current_user.id).all()}
        rows = [r for r in rows if r.course_id in taught]
    return rows
