import logging
from typing import Any

from sqlalchemy.orm import Session

from portal.core.config import MAX_LATE_DAYS
from portal.models.assignment import Assignment
from portal.models.grade import Grade
from portal.models.submission import Submission
from portal.services.grade_summary import clamp, normalize_status, round_half_up, to_number

logger = logging.getLogger(__name__)


def normalize_points_earned(value: Any) -> float | None:
    """None means ungraded. Negative or non-numeric input is stored as ungraded."""
    n = to_number(value)
    if n is None or n < 0:
        return None
    return round_half_up(n * 100) / 100


def normalize_late_days(value: Any) -> int | None:
    n = to_number(value)
    if n is None:
        return None
    return int(clamp(round_half_up(n), 0, MAX_LATE_DAYS))


def upsert_grade(
    db: Session,
    classroom_id: int,
    assignment_id: int,
    student_id: int,
    points_earned: Any = None,
    status: Any = None,
    late_days_override: Any = None,
    feedback: str | None = None,
) -> Grade:
    grade = (
        db.query(Grade)
        .filter(
            Grade.assignment_id == assignment_id,
            Grade.student_id == student_id,
        )
        .first()
    )
    if grade is None:
        grade = Grade(
            classroom_id=classroom_id,
            assignment_id=assignment_id,
            student_id=student_id,
        )
        db.add(grade)

    grade.points_earned = normalize_points_earned(points_earned)
    grade.status = normalize_status(status)
    grade.late_days_override = normalize_late_days(late_days_override)
    grade.feedback = (feedback or "").strip()

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(grade)
    logger.info(
        "grade recorded: assignment=%s student=%s status=%s points=%s",
        assignment_id,
        student_id,
        grade.status,
        grade.points_earned,
    )
    return grade


def assignment_row(a: Assignment) -> dict:
    return {
        "id": a.id,
        "category": a.category,
        "points": a.points,
        "due_at": a.due_at,
    }


def grade_row(g: Grade) -> dict:
    return {
        "assignment_id": g.assignment_id,
        "points_earned": g.points_earned,
        "status": g.status,
        "late_days_override": g.late_days_override,
    }


def load_classroom_assignments(db: Session, classroom_id: int) -> list[dict]:
    assignments = (
        db.query(Assignment)
        .filter(Assignment.classroom_id == classroom_id)
        .order_by(Assignment.id.asc())
        .all()
    )
    return [assignment_row(a) for a in assignments]


def load_student_grades(db: Session, classroom_id: int, student_id: int) -> list[dict]:
    grades = (
        db.query(Grade)
        .filter(Grade.classroom_id == classroom_id, Grade.student_id == student_id)
        .all()
    )
    return [grade_row(g) for g in grades]


def load_submitted_assignment_ids(db: Session, classroom_id: int, student_id: int) -> set[str]:
    rows = (
        db.query(Submission.assignment_id)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .filter(
            Assignment.classroom_id == classroom_id,
            Submission.student_id == student_id,
        )
        .distinct()
        .all()
    )
    return {str(r.assignment_id) for r in rows}


def load_student_inputs(
    db: Session, classroom_id: int, student_id: int
) -> tuple[list[dict], list[dict], set[str]]:
    """Engine inputs for one student: (assignments, grades, submitted ids)."""
    return (
        load_classroom_assignments(db, classroom_id),
        load_student_grades(db, classroom_id, student_id),
        load_submitted_assignment_ids(db, classroom_id, student_id),
    )
