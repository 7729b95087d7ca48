"""
Grace-interval re-check for delivered work.

Meant to be run by cron or a job runner, either for one delivery
(``--assignment-id`` and ``--student-id``) or as a sweep over every
assignment that still has ``submitted`` records.
"""

import argparse
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from classroom.core.config import AWAITING_CORRECTION_GRACE, LOG_LEVEL
from classroom.core.logging_middleware import configure_logging
from classroom.db.session import SessionLocal
from classroom.models.assignment import Assignment
from classroom.models.enums import SubmissionStatus
from classroom.models.submission import Submission
from classroom.services import lifecycle

logger = logging.getLogger(__name__)


def run_recheck(
    db: Session,
    now: datetime,
    *,
    grace: timedelta = AWAITING_CORRECTION_GRACE,
    assignment_id: Optional[int] = None,
    student_id: Optional[int] = None,
) -> dict[int, list[int]]:
    """Promote due deliveries and commit. Returns ``{assignment_id: [student_id, ...]}``."""
    query = db.query(Assignment)
    if assignment_id is not None:
        query = query.filter(Assignment.id == assignment_id)
    else:
        query = query.filter(
            Assignment.id.in_(
                select(Submission.assignment_id).where(
                    Submission.status == SubmissionStatus.SUBMITTED.value
                )
            )
        )

    promoted: dict[int, list[int]] = {}
    for assignment in query.with_for_update().all():
        if student_id is not None:
            moved = [student_id] if lifecycle.promote_to_awaiting_correction(
                assignment, student_id, now=now, grace=grace
            ) else []
        else:
            moved = lifecycle.promote_all_due(assignment, now=now, grace=grace)
        if moved:
            promoted[assignment.id] = moved

    db.commit()
    return promoted


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Move delivered submissions into the correction queue.")
    parser.add_argument("--assignment-id", type=int, default=None)
    parser.add_argument("--student-id", type=int, default=None, help="Requires --assignment-id")
    parser.add_argument(
        "--grace-seconds",
        type=int,
        default=int(AWAITING_CORRECTION_GRACE.total_seconds()),
        help="Minimum time since delivery before a submission is queued for correction",
    )
    args = parser.parse_args()
    if args.student_id is not None and args.assignment_id is None:
        parser.error("--student-id requires --assignment-id")
    return args


def main() -> None:
    args = parse_args()
    configure_logging(LOG_LEVEL)

    with SessionLocal() as db:
        promoted = run_recheck(
            db,
            datetime.now(timezone.utc),
            grace=timedelta(seconds=args.grace_seconds),
            assignment_id=args.assignment_id,
            student_id=args.student_id,
        )

    total = sum(len(v) for v in promoted.values())
    logger.info("recheck_finished assignments=%s submissions=%s", len(promoted), total)
    print(f"promoted {total} submission(s) across {len(promoted)} assignment(s)")


if __name__ == "__main__":
    main()
