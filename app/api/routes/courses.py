import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_course_or_404, get_current_user, require_course_manager, require_role
from app.db.database import get_db
from app.models.course import Course, Enrollment, EnrollmentStatus
from app.models.user import User, UserRole
from app.schemas.course import CourseCreate, CourseResponse, EnrollmentCreate, EnrollmentResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/courses", tags=["Courses"])


def _course_to_response(course: Course) -> dict:
    return {
        "id": course.id,
        "course_code": course.course_code,
        "course_name": course.course_name,
        "semester": course.semester,
        "credits": course.credits,
        "professor_id": course.professor_id,
        "professor_name": course.professor.full_name if course.professor else None,
        "created_at": course.created_at,
    }


def _enrollment_to_response(enrollment: Enrollment) -> dict:
    student = enrollment.student
    return {
        "id": enrollment.id,
        "course_id": enrollment.course_id,
        "student_uuid": enrollment.student_uuid,
        "student_name": student.full_name if student else None,
        "student_email": student.email if student else None,
        "status": enrollment.status.value,
        "enrolled_at": enrollment.enrolled_at,
    }


@router.post("/", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN)),
):
    if db.query(Course.id).filter(Course.course_code == data.course_code).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists")

    if data.professor_id is not None:
        professor = db.query(User).filter(User.id == data.professor_id).first()
        if not professor or not professor.has_role(UserRole.PROFESSOR):
            raise HTTPException(status_code=400, detail="professor_id must reference a professor account")

    course = Course(**data.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info(f"Course {course.id} ({course.course_code}) created by user {current_user.id}")
    return _course_to_response(course)


@router.get("/", response_model=list[CourseResponse])
def list_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Admins see every course, professors the ones they teach, students the ones they are enrolled in."""
    query = db.query(Course)
    if current_user.has_role(UserRole.PROFESSOR):
        query = query.filter(Course.professor_id == current_user.id)
    elif current_user.has_role(UserRole.STUDENT):
        query = query.join(Enrollment).filter(
            Enrollment.student_uuid == current_user.uuid,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
    return [_course_to_response(c) for c in query.order_by(Course.id).all()]


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _course_to_response(get_course_or_404(db, course_id))


@router.post("/{course_id}/enrollments", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll_student(
    course_id: int,
    data: EnrollmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    """Enroll a student. Re-enrolling a dropped student reactivates the row."""
    require_course_manager(db, current_user, course_id)

    student = db.query(User).filter(User.uuid == data.student_uuid).first()
    if not student or not student.has_role(UserRole.STUDENT):
        raise HTTPException(status_code=404, detail="Student not found")

    enrollment = db.query(Enrollment).filter(
        Enrollment.course_id == course_id,
        Enrollment.student_uuid == data.student_uuid,
    ).first()
    if enrollment:
        if enrollment.status == EnrollmentStatus.ACTIVE:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Student already enrolled")
        enrollment.status = EnrollmentStatus.ACTIVE
    else:
        enrollment = Enrollment(course_id=course_id, student_uuid=data.student_uuid)
        db.add(enrollment)

    db.commit()
    db.refresh(enrollment)
    logger.info(f"Student {data.student_uuid} enrolled in course {course_id}")
    return _enrollment_to_response(enrollment)


@router.delete("/{course_id}/enrollments/{student_uuid}", response_model=EnrollmentResponse)
def drop_student(
    course_id: int,
    student_uuid: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)

    enrollment = db.query(Enrollment).filter(
        Enrollment.course_id == course_id,
        Enrollment.student_uuid == student_uuid,
        Enrollment.status == EnrollmentStatus.ACTIVE,
    ).first()
    if not enrollment:
        raise HTTPException(status_code=404, detail="Enrollment not found")

    enrollment.status = EnrollmentStatus.DROPPED
    db.commit()
    db.refresh(enrollment)
    logger.info(f"Student {student_uuid} dropped from course {course_id}")
    return _enrollment_to_response(enrollment)


@router.get("/{course_id}/enrollments", response_model=list[EnrollmentResponse])
def list_enrollments(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.PROFESSOR)),
):
    require_course_manager(db, current_user, course_id)
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.status == EnrollmentStatus.ACTIVE)
        .order_by(Enrollment.id)
        .all()
    )
    return [_enrollment_to_response(e) for e in enrollments]
