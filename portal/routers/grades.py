from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal.core.deps import get_db
from portal.core.permissions import (
    ensure_assignment_in_classroom,
    ensure_classroom_exists,
    ensure_student_enrolled,
)
from portal.models.grade import Grade
from portal.schemas.grade import GradeRead, GradeUpsert
from portal.schemas.grade_settings import GradeSettingsRead, GradeSettingsUpdate
from portal.services import grade_records, grade_settings

router = APIRouter()


@router.put(
    "/classrooms/{classroom_id}/grades",
    response_model=GradeRead,
    status_code=status.HTTP_200_OK,
)
def record_grade(
    classroom_id: int,
    payload: GradeUpsert,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    assignment = ensure_assignment_in_classroom(db, classroom_id, payload.assignment_id)
    ensure_student_enrolled(db, classroom_id, payload.student_id)

    return grade_records.upsert_grade(
        db,
        classroom_id=classroom_id,
        assignment_id=assignment.id,
        student_id=payload.student_id,
        points_earned=payload.points_earned,
        status=payload.status,
        late_days_override=payload.late_days_override,
        feedback=payload.feedback,
    )


@router.get("/classrooms/{classroom_id}/grades", response_model=list[GradeRead])
def list_grades(classroom_id: int, db: Session = Depends(get_db)):
    ensure_classroom_exists(db, classroom_id)
    return (
        db.query(Grade)
        .filter(Grade.classroom_id == classroom_id)
        .order_by(Grade.updated_at.desc(), Grade.id.desc())
        .all()
    )


@router.get(
    "/classrooms/{classroom_id}/grade-settings",
    response_model=GradeSettingsRead,
)
def read_grade_settings(classroom_id: int, db: Session = Depends(get_db)):
    ensure_classroom_exists(db, classroom_id)
    return grade_settings.get_or_create(db, classroom_id)


@router.put(
    "/classrooms/{classroom_id}/grade-settings",
    response_model=GradeSettingsRead,
)
def update_grade_settings(
    classroom_id: int,
    payload: GradeSettingsUpdate,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    return grade_settings.upsert(
        db,
        classroom_id,
        categories=payload.categories,
        late_penalty_per_day_pct=payload.late_penalty_per_day_pct,
        max_late_penalty_pct=payload.max_late_penalty_pct,
    )
