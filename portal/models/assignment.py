from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from portal.core.config import DEFAULT_CATEGORY, DEFAULT_POINTS
from portal.db.base_class import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL for assignments posted straight to the classroom
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(120), nullable=False, default=DEFAULT_CATEGORY)
    points = Column(Integer, nullable=False, default=DEFAULT_POINTS)
    due_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    classroom = relationship("Classroom", back_populates="assignments")
    module = relationship("Module", back_populates="assignments")

    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan")
    grades = relationship("Grade", back_populates="assignment", cascade="all, delete-orphan")
    rubric = relationship("Rubric", back_populates="assignment", uselist=False, cascade="all, delete-orphan")
