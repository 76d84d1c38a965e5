from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.core.deps import get_db
from portal.core.permissions import ensure_assignment_in_classroom, ensure_classroom_exists
from portal.schemas.rubric import RubricRead, RubricUpdate
from portal.services import rubrics

router = APIRouter()


@router.get(
    "/classrooms/{classroom_id}/assignments/{assignment_id}/rubric",
    response_model=Optional[RubricRead],
)
def read_rubric(classroom_id: int, assignment_id: int, db: Session = Depends(get_db)):
    """null until a rubric has been saved for the assignment."""
    ensure_classroom_exists(db, classroom_id)
    ensure_assignment_in_classroom(db, classroom_id, assignment_id)
    return rubrics.get_for_assignment(db, assignment_id)


@router.put(
    "/classrooms/{classroom_id}/assignments/{assignment_id}/rubric",
    response_model=RubricRead,
)
def save_rubric(
    classroom_id: int,
    assignment_id: int,
    payload: RubricUpdate,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    ensure_assignment_in_classroom(db, classroom_id, assignment_id)
    return rubrics.upsert(db, classroom_id, assignment_id, payload.criteria)
