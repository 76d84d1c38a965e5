from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.core.config import DEFAULT_CATEGORY, DEFAULT_POINTS, MAX_POINTS, MIN_POINTS


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = DEFAULT_CATEGORY
    points: int = Field(default=DEFAULT_POINTS, ge=MIN_POINTS, le=MAX_POINTS)
    due_at: Optional[datetime] = None
    module_id: Optional[int] = None


class AssignmentRead(BaseModel):
    id: int
    classroom_id: int
    module_id: Optional[int] = None
    title: str
    description: Optional[str]
    category: str
    points: int
    due_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True
