from typing import Any, Optional

from pydantic import BaseModel, Field

from portal.services.grade_summary import StudentGradeSummary

# wire names used by the portal frontend -> engine keys
_ENGINE_KEYS = {
    "weightPct": "weight_pct",
    "latePenaltyPerDayPct": "late_penalty_per_day_pct",
    "maxLatePenaltyPct": "max_late_penalty_pct",
    "dueAt": "due_at",
    "assignmentId": "assignment_id",
    "pointsEarned": "points_earned",
    "lateDaysOverride": "late_days_override",
}


def _engine_record(record: Any) -> Any:
    if not isinstance(record, dict):
        return record
    return {_ENGINE_KEYS.get(k, k): v for k, v in record.items()}


class CategoryScoreRead(BaseModel):
    key: str
    earned: float
    possible: float
    percent: float
    weight: float


class StudentGradeSummaryRead(BaseModel):
    student_id: Optional[int] = None
    student_email: Optional[str] = None

    current_grade: float | None  # null when no assignment counts yet
    has_data: bool
    letter: str
    missing_count: int
    categories: list[CategoryScoreRead] = []

    @classmethod
    def from_summary(
        cls,
        summary: StudentGradeSummary,
        student_id: int | None = None,
        student_email: str | None = None,
    ) -> "StudentGradeSummaryRead":
        return cls(
            student_id=student_id,
            student_email=student_email,
            current_grade=summary.percent,
            has_data=summary.percent is not None,
            letter=summary.letter,
            missing_count=summary.missing_count,
            categories=[
                CategoryScoreRead(
                    key=c.key,
                    earned=c.earned,
                    possible=c.possible,
                    percent=c.percent,
                    weight=c.weight,
                )
                for c in summary.categories
            ],
        )


class GradeComputeRequest(BaseModel):
    """
    Plain engine inputs. Values are left untyped on purpose: the engine
    coerces malformed fields instead of rejecting the request.
    """

    settings: Any = None
    assignments: Any = None
    grades: Any = None
    submitted_assignment_ids: Any = Field(default=None, alias="submittedAssignmentIds")
    now: Any = None

    class Config:
        populate_by_name = True

    def engine_settings(self) -> Any:
        if not isinstance(self.settings, dict):
            return self.settings
        settings = _engine_record(self.settings)
        categories = settings.get("categories")
        if isinstance(categories, list):
            settings["categories"] = [_engine_record(c) for c in categories]
        return settings

    def engine_assignments(self) -> Any:
        if not isinstance(self.assignments, list):
            return self.assignments
        return [_engine_record(a) for a in self.assignments]

    def engine_grades(self) -> Any:
        if not isinstance(self.grades, list):
            return self.grades
        return [_engine_record(g) for g in self.grades]
