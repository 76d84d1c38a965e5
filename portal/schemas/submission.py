from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SubmissionCreate(BaseModel):
    student_id: int
    content: Optional[str] = None


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    content: Optional[str]
    submitted_at: datetime

    class Config:
        from_attributes = True
