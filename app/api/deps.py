from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.db.database import get_db
from app.models.course import Course
from app.models.token_blacklist import TokenBlacklist
from app.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    # Check token blacklist (revoked tokens)
    jti = payload.get("jti")
    if jti:
        revoked = db.query(TokenBlacklist.id).filter(TokenBlacklist.jti == jti).first()
        if revoked:
            raise credentials_exception

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None or not user.is_active:
        raise credentials_exception

    # Make user ID and token claims available to logout and request logging
    request.state.user_id = user.id
    request.state.token_payload = payload

    return user


def require_role(*roles: UserRole):
    """Dependency factory that checks the current user has one of the required roles."""
    def checker(current_user: User = Depends(get_current_user)):
        if not any(current_user.has_role(r) for r in roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user
    return checker


def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


def require_course_manager(db: Session, user: User, course_id: int) -> Course:
    """Return the course if the user may manage its grades.

    Admins manage every course; professors only the courses they teach.
    """
    course = get_course_or_404(db, course_id)
    if user.has_role(UserRole.ADMIN):
        return course
    if user.has_role(UserRole.PROFESSOR) and course.professor_id == user.id:
        return course
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not the professor of this course")


def require_student_view(db: Session, user: User, student_uuid: str, course_id: int | None = None) -> None:
    """Students may read only their own grades. Staff go through the course check when a course is given."""
    if user.has_role(UserRole.STUDENT):
        if user.uuid != student_uuid:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Students can only view their own grades")
        return
    if course_id is not None:
        require_course_manager(db, user, course_id)
    elif not (user.has_role(UserRole.ADMIN) or user.has_role(UserRole.PROFESSOR)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
