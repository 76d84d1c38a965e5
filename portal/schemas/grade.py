from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GradeUpsert(BaseModel):
    assignment_id: int
    student_id: int
    points_earned: Optional[float] = None
    status: Optional[str] = None  # graded | late | missing | excused
    late_days_override: Optional[int] = Field(default=None, ge=0)
    feedback: Optional[str] = None


class GradeRead(BaseModel):
    id: int
    classroom_id: int
    assignment_id: int
    student_id: int
    points_earned: Optional[float] = None
    status: str
    late_days_override: Optional[int] = None
    feedback: str = ""
    updated_at: datetime

    class Config:
        from_attributes = True
