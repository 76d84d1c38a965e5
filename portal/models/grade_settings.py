from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.config import DEFAULT_LATE_PENALTY_PER_DAY_PCT, DEFAULT_MAX_LATE_PENALTY_PCT
from portal.db.base_class import Base


class GradeSettings(Base):
    __tablename__ = "grade_settings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    classroom_id: Mapped[int] = mapped_column(
        ForeignKey("classrooms.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # [{"name": "Homework", "weight_pct": 30}, ...]
    categories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    late_penalty_per_day_pct: Mapped[int] = mapped_column(
        nullable=False, default=DEFAULT_LATE_PENALTY_PER_DAY_PCT
    )
    max_late_penalty_pct: Mapped[int] = mapped_column(
        nullable=False, default=DEFAULT_MAX_LATE_PENALTY_PCT
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    classroom = relationship("Classroom", back_populates="grade_settings")
