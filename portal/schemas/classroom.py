from datetime import datetime

from pydantic import BaseModel, Field


class ClassroomCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    teacher_id: int


class ClassroomRead(BaseModel):
    id: int
    title: str
    description: str | None = None
    teacher_id: int

    class Config:
        from_attributes = True


class EnrollmentCreate(BaseModel):
    student_id: int


class EnrollmentOut(BaseModel):
    id: int
    student_id: int
    classroom_id: int
    created_at: datetime

    class Config:
        from_attributes = True
