import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.routes import (
    assessment_weights,
    auth,
    courses,
    final_grades,
    grades,
    grading_weights,
    reports,
    users,
)
from app.core.config import settings
from app.core.grading_errors import GradingErrorException, grading_error_exception_handler
from app.core.logging_config import setup_logging
from app.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.core.rate_limit import limiter
from app.db.database import Base, engine
from app import models  # noqa: F401  registers every table on Base.metadata

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.app_name} started ({settings.environment})")
    yield
    logger.info(f"{settings.app_name} shutting down")


app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(GradingErrorException, grading_error_exception_handler)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(courses.router, prefix="/api")
app.include_router(grading_weights.router, prefix="/api")
app.include_router(assessment_weights.router, prefix="/api")
app.include_router(grades.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(final_grades.router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "healthy", "app": settings.app_name}
