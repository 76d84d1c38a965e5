from datetime import timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.config import DEFAULT_CATEGORY
from portal.core.deps import get_db
from portal.core.permissions import (
    ensure_classroom_exists,
    ensure_module_exists,
    ensure_user_exists,
)
from portal.models.assignment import Assignment
from portal.models.classroom import Classroom
from portal.models.enrollment import Enrollment
from portal.schemas.assignment import AssignmentCreate, AssignmentRead
from portal.schemas.classroom import (
    ClassroomCreate,
    ClassroomRead,
    EnrollmentCreate,
    EnrollmentOut,
)

router = APIRouter()


def _assignment_order_by():
    """
    Assignment ordering:
    - due_at NULLs last (SQLite-safe)
    - due_at ascending
    - assignment id ascending (stable tie-break)
    """
    return (
        Assignment.due_at.is_(None),
        Assignment.due_at.asc(),
        Assignment.id.asc(),
    )


@router.post("", response_model=ClassroomRead, status_code=status.HTTP_201_CREATED)
def create_classroom(payload: ClassroomCreate, db: Session = Depends(get_db)):
    teacher = ensure_user_exists(db, payload.teacher_id)
    if teacher.role != "teacher":
        raise HTTPException(status_code=400, detail="teacher_id must reference a teacher")

    classroom = Classroom(
        title=payload.title,
        description=payload.description,
        teacher_id=teacher.id,
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return classroom


@router.get("/{classroom_id}", response_model=ClassroomRead)
def get_classroom(classroom_id: int, db: Session = Depends(get_db)):
    return ensure_classroom_exists(db, classroom_id)


@router.post(
    "/{classroom_id}/enrollments",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
def enroll_student(
    classroom_id: int,
    payload: EnrollmentCreate,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    student = ensure_user_exists(db, payload.student_id)
    if student.role != "student":
        raise HTTPException(status_code=400, detail="Only students can be enrolled")

    enrollment = Enrollment(student_id=student.id, classroom_id=classroom_id)
    db.add(enrollment)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Already enrolled")

    db.refresh(enrollment)
    return enrollment


@router.get("/{classroom_id}/assignments", response_model=list[AssignmentRead])
def list_assignments(classroom_id: int, db: Session = Depends(get_db)):
    ensure_classroom_exists(db, classroom_id)
    return (
        db.query(Assignment)
        .filter(Assignment.classroom_id == classroom_id)
        .order_by(*_assignment_order_by())
        .all()
    )


@router.post(
    "/{classroom_id}/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    classroom_id: int,
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    if payload.module_id is not None:
        ensure_module_exists(db, classroom_id, payload.module_id)

    due_at = payload.due_at
    # SQLite drops tzinfo on write; store UTC wall time
    if due_at is not None and due_at.tzinfo is not None:
        due_at = due_at.astimezone(timezone.utc)

    a = Assignment(
        classroom_id=classroom_id,
        module_id=payload.module_id,
        title=payload.title,
        description=payload.description,
        category=payload.category.strip() or DEFAULT_CATEGORY,
        points=payload.points,
        due_at=due_at,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    return a
