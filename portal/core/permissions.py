from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from portal.models.assignment import Assignment
from portal.models.classroom import Classroom
from portal.models.enrollment import Enrollment
from portal.models.module import Module
from portal.models.user import User


def ensure_classroom_exists(db: Session, classroom_id: int) -> Classroom:
    classroom = db.query(Classroom).filter(Classroom.id == classroom_id).first()
    if not classroom:
        raise HTTPException(status_code=404, detail="Classroom not found")
    return classroom


def ensure_assignment_exists(db: Session, assignment_id: int) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return a


def ensure_user_exists(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def ensure_student_enrolled(db: Session, classroom_id: int, student_id: int) -> None:
    enrolled = (
        db.query(Enrollment)
        .filter(Enrollment.classroom_id == classroom_id, Enrollment.student_id == student_id)
        .first()
        is not None
    )
    if not enrolled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enrolled in this classroom",
        )


def ensure_module_exists(db: Session, classroom_id: int, module_id: int) -> Module:
    module = (
        db.query(Module)
        .filter(Module.id == module_id, Module.classroom_id == classroom_id)
        .first()
    )
    if not module:
        raise HTTPException(status_code=404, detail="Module not found")
    return module


def ensure_assignment_in_classroom(db: Session, classroom_id: int, assignment_id: int) -> Assignment:
    a = ensure_assignment_exists(db, assignment_id)
    if a.classroom_id != classroom_id:
        raise HTTPException(
            status_code=400,
            detail="Assignment does not belong to this classroom",
        )
    return a
