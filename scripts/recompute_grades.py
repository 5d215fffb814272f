"""Recompute and store course grades from the current weights and scores.

Usage:
  python -m scripts.recompute_grades                 # every course
  python -m scripts.recompute_grades --course-id 3   # one course
  python -m scripts.recompute_grades --exclude-empty # re-normalize over graded categories
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.logging_config import setup_logging
from app.db.database import Base, engine
from app.jobs.recompute_grades import recompute_grades
from app import models  # noqa: F401


def main() -> int:
    parser = argparse.ArgumentParser(description="Recompute stored course grades")
    parser.add_argument("--course-id", type=int, default=None, help="Only recompute this course")
    parser.add_argument(
        "--exclude-empty",
        action="store_true",
        help="Leave out categories with no grades and re-normalize the remaining weights",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    if args.exclude_empty:
        settings.exclude_empty_categories = True

    setup_logging(level=args.log_level)
    Base.metadata.create_all(bind=engine)

    result = recompute_grades(course_id=args.course_id)
    print(
        f"Recomputed {result['courses']} course(s), "
        f"{result['resolved']} student grade(s), "
        f"{len(result['failed_courses'])} failed"
    )
    return 1 if result["failed_courses"] else 0


if __name__ == "__main__":
    sys.exit(main())
