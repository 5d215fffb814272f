"""Recompute stored course grades for every course (or a single one).

Operator-triggered, see scripts/recompute_grades.py. Each course is resolved
independently; a course that fails is logged and rolled back and the run
continues with the next one.
"""

import logging

from sqlalchemy.orm import Session

from app.db.database import SessionLocal
from app.domains.grading.services import GradeResolver
from app.models.course import Course

logger = logging.getLogger(__name__)


def recompute_grades(db: Session | None = None, course_id: int | None = None) -> dict:
    """Resolve every active enrollment of the selected courses.

    Returns {"courses": n, "resolved": n, "failed_courses": [ids]}.
    """
    owns_session = db is None
    if owns_session:
        db = SessionLocal()

    logger.info("Starting grade recompute...")
    processed = 0
    resolved = 0
    failed_courses = []

    try:
        query = db.query(Course).order_by(Course.id)
        if course_id is not None:
            query = query.filter(Course.id == course_id)
        course_ids = [c.id for c in query.all()]

        logger.info(f"Found {len(course_ids)} courses to recompute")

        resolver = GradeResolver(db)
        for cid in course_ids:
            try:
                rows = resolver.resolve_course(cid)
                processed += 1
                resolved += len(rows)
                logger.info(f"Recomputed course {cid}: {len(rows)} students")
            except Exception as e:
                failed_courses.append(cid)
                logger.warning(f"Grade recompute failed for course {cid}: {e}")
                db.rollback()

        logger.info(
            f"Grade recompute complete | "
            f"courses={processed} | resolved={resolved} | failed={len(failed_courses)}"
        )
    finally:
        if owns_session:
            db.close()

    return {"courses": processed, "resolved": resolved, "failed_courses": failed_courses}
