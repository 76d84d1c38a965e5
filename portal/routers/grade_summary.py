from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.core.deps import get_db
from portal.core.permissions import (
    ensure_classroom_exists,
    ensure_student_enrolled,
    ensure_user_exists,
)
from portal.models.enrollment import Enrollment
from portal.models.user import User
from portal.schemas.grade_summary import GradeComputeRequest, StudentGradeSummaryRead
from portal.services import grade_records, grade_settings
from portal.services.grade_summary import summarize_student

router = APIRouter()


@router.get(
    "/classrooms/{classroom_id}/students/{student_id}/grade-summary",
    response_model=StudentGradeSummaryRead,
)
def student_grade_summary(
    classroom_id: int,
    student_id: int,
    now: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    student = ensure_user_exists(db, student_id)
    ensure_student_enrolled(db, classroom_id, student_id)

    settings = grade_settings.as_engine_settings(grade_settings.get_or_create(db, classroom_id))
    assignments, grades, submitted = grade_records.load_student_inputs(db, classroom_id, student_id)

    summary = summarize_student(settings, assignments, grades, submitted, now=now)
    return StudentGradeSummaryRead.from_summary(summary, student.id, student.email)


@router.get(
    "/classrooms/{classroom_id}/grade-summary",
    response_model=list[StudentGradeSummaryRead],
)
def classroom_grade_summary(
    classroom_id: int,
    now: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)

    settings = grade_settings.as_engine_settings(grade_settings.get_or_create(db, classroom_id))
    assignments = grade_records.load_classroom_assignments(db, classroom_id)

    students = (
        db.query(User)
        .join(Enrollment, Enrollment.student_id == User.id)
        .filter(Enrollment.classroom_id == classroom_id)
        .order_by(User.email.asc())
        .all()
    )

    result: list[StudentGradeSummaryRead] = []
    for s in students:
        grades = grade_records.load_student_grades(db, classroom_id, s.id)
        submitted = grade_records.load_submitted_assignment_ids(db, classroom_id, s.id)
        summary = summarize_student(settings, assignments, grades, submitted, now=now)
        result.append(StudentGradeSummaryRead.from_summary(summary, s.id, s.email))

    return result


@router.post("/grade-summary/compute", response_model=StudentGradeSummaryRead)
def compute_grade_summary(payload: GradeComputeRequest):
    summary = summarize_student(
        payload.engine_settings(),
        payload.engine_assignments(),
        payload.engine_grades(),
        payload.submitted_assignment_ids,
        now=payload.now,
    )
    return StudentGradeSummaryRead.from_summary(summary)
