from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from portal.core.deps import get_db
from portal.core.permissions import ensure_assignment_exists, ensure_student_enrolled
from portal.models.submission import Submission
from portal.schemas.submission import SubmissionCreate, SubmissionRead

router = APIRouter()


@router.post(
    "/assignments/{assignment_id}/submissions",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int,
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
):
    assignment = ensure_assignment_exists(db, assignment_id)
    ensure_student_enrolled(db, assignment.classroom_id, payload.student_id)

    now = datetime.now(timezone.utc)

    # allow resubmission: update existing submission if it exists
    existing = (
        db.query(Submission)
        .filter(
            and_(
                Submission.assignment_id == assignment_id,
                Submission.student_id == payload.student_id,
            )
        )
        .first()
    )

    if existing:
        existing.content = payload.content or ""
        existing.submitted_at = now
        submission = existing
    else:
        submission = Submission(
            assignment_id=assignment_id,
            student_id=payload.student_id,
            content=payload.content or "",
            submitted_at=now,
        )
        db.add(submission)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(submission)
    return submission


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=list[SubmissionRead],
)
def list_submissions_for_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
):
    ensure_assignment_exists(db, assignment_id)
    return (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
