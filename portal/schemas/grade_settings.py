from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class GradeCategory(BaseModel):
    name: str
    weight_pct: int


class GradeSettingsUpdate(BaseModel):
    # loosely typed: the settings service normalizes these
    categories: Optional[list[Any]] = None
    late_penalty_per_day_pct: Optional[float] = None
    max_late_penalty_pct: Optional[float] = None


class GradeSettingsRead(BaseModel):
    classroom_id: int
    categories: list[GradeCategory]
    late_penalty_per_day_pct: int
    max_late_penalty_pct: int
    updated_at: datetime

    class Config:
        from_attributes = True
