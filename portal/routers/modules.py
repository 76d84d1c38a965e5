from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.core.config import DEFAULT_MODULE_LIST_LIMIT
from portal.core.deps import get_db
from portal.core.permissions import ensure_classroom_exists, ensure_module_exists
from portal.schemas.assignment import AssignmentRead
from portal.schemas.module import ModuleCreate, ModuleDeleted, ModuleRead, ModuleWithAssignments
from portal.services import modules as modules_service

router = APIRouter()


@router.post(
    "/classrooms/{classroom_id}/modules",
    response_model=ModuleRead,
    status_code=status.HTTP_201_CREATED,
)
def create_module(
    classroom_id: int,
    payload: ModuleCreate,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    if not payload.title.strip():
        raise HTTPException(status_code=400, detail="Module title is required")

    return modules_service.create_module(db, classroom_id, payload.title, payload.description)


@router.get(
    "/classrooms/{classroom_id}/modules",
    response_model=list[ModuleWithAssignments],
)
def list_modules(
    classroom_id: int,
    limit: int = DEFAULT_MODULE_LIST_LIMIT,
    db: Session = Depends(get_db),
):
    ensure_classroom_exists(db, classroom_id)
    return [
        ModuleWithAssignments(
            **ModuleRead.model_validate(module).model_dump(),
            assignments=[AssignmentRead.model_validate(a) for a in assignments],
        )
        for module, assignments in modules_service.list_with_assignments(db, classroom_id, limit)
    ]


@router.delete(
    "/classrooms/{classroom_id}/modules/{module_id}",
    response_model=ModuleDeleted,
)
def delete_module(
    classroom_id: int,
    module_id: int,
    db: Session = Depends(get_db),
):
    module = ensure_module_exists(db, classroom_id, module_id)
    # serialize before the row is gone
    deleted = ModuleRead.model_validate(module)
    removed = modules_service.delete_module(db, module)
    return ModuleDeleted(module=deleted, removed_assignments=removed)
