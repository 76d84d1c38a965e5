from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class RubricCriterion(BaseModel):
    id: str
    title: str
    points_max: int


class RubricUpdate(BaseModel):
    # loosely typed: the rubrics service drops invalid criteria
    criteria: Optional[list[Any]] = None


class RubricRead(BaseModel):
    classroom_id: int
    assignment_id: int
    criteria: list[RubricCriterion]
    updated_at: datetime

    class Config:
        from_attributes = True
