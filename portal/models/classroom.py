from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base_class import Base


class Classroom(Base):
    __tablename__ = "classrooms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    enrollments = relationship(
        "Enrollment", back_populates="classroom", cascade="all, delete-orphan"
    )

    modules = relationship(
        "Module", back_populates="classroom", cascade="all, delete-orphan"
    )

    assignments = relationship(
        "Assignment", back_populates="classroom", cascade="all, delete-orphan"
    )

    grade_settings = relationship(
        "GradeSettings",
        back_populates="classroom",
        uselist=False,
        cascade="all, delete-orphan",
    )
