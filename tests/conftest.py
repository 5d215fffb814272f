import os

# Settings are read at import time; pin them before the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("EXCLUDE_EMPTY_CATEGORIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.rate_limit import limiter
from app.core.security import create_access_token, get_password_hash
from app.db.database import Base, get_db
from app.models.course import Course, Enrollment
from app.models.user import User, UserRole
from main import app

PASSWORD = "Password123!"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture()
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session):
    limiter.reset()
    with TestClient(app) as c:
        yield c


def make_user(db, email, role, full_name=None):
    user = User(
        email=email,
        full_name=full_name or email.split("@")[0].title(),
        role=role,
        hashed_password=get_password_hash(PASSWORD),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def admin(db_session):
    return make_user(db_session, "admin@test.com", UserRole.ADMIN, "Site Admin")


@pytest.fixture()
def professor(db_session):
    return make_user(db_session, "prof@test.com", UserRole.PROFESSOR, "Prof Ada")


@pytest.fixture()
def other_professor(db_session):
    return make_user(db_session, "prof2@test.com", UserRole.PROFESSOR, "Prof Bo")


@pytest.fixture()
def student(db_session):
    return make_user(db_session, "student@test.com", UserRole.STUDENT, "Sam Student")


@pytest.fixture()
def other_student(db_session):
    return make_user(db_session, "student2@test.com", UserRole.STUDENT, "Kim Student")


@pytest.fixture()
def course(db_session, professor, student):
    """A course taught by `professor` with `student` actively enrolled."""
    c = Course(course_code="CS101", course_name="Intro to CS", semester="2025-Fall", professor_id=professor.id)
    db_session.add(c)
    db_session.flush()
    db_session.add(Enrollment(course_id=c.id, student_uuid=student.uuid))
    db_session.commit()
    db_session.refresh(c)
    return c
