from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from portal.schemas.assignment import AssignmentRead


class ModuleCreate(BaseModel):
    # trimmed and truncated by the modules service
    title: str
    description: Optional[str] = None


class ModuleRead(BaseModel):
    id: int
    classroom_id: int
    title: str
    description: str
    created_at: datetime

    class Config:
        from_attributes = True


class ModuleWithAssignments(ModuleRead):
    assignments: list[AssignmentRead] = []


class ModuleDeleted(BaseModel):
    module: ModuleRead
    removed_assignments: int
