from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from portal.db.base_class import Base


class Grade(Base):
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, index=True)

    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # NULL means "not graded yet"
    points_earned = Column(Numeric(8, 2, asdecimal=False), nullable=True)
    status = Column(String(20), nullable=False, default="graded")
    late_days_override = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # one active grade per student per assignment
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_grade_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="grades")
    student = relationship("User", back_populates="grades")
