"""
Grade aggregation.

Turns assignments, a student's grade records, the ids of assignments the
student has submitted work for, and the classroom grade settings into a
weighted current-grade percentage and a missing-assignment count.

Everything here is a pure function over plain mappings. Malformed fields are
coerced to safe defaults instead of raising, so a bad record never breaks a
dashboard render.
"""
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from portal.core.config import (
    DEFAULT_CATEGORY,
    DEFAULT_POINTS,
    GRADE_STATUSES,
    MAX_LATE_DAYS,
    MAX_POINTS,
    MIN_POINTS,
)

logger = logging.getLogger(__name__)

# inclusive lower bounds, highest first
LETTER_BREAKPOINTS = (
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)


@dataclass(frozen=True)
class Percent:
    value: float


@dataclass(frozen=True)
class NoData:
    """No assignment contributes yet. Distinct from a real 0%."""


NO_DATA = NoData()

GradePercent = Percent | NoData


@dataclass(frozen=True)
class CategoryScore:
    key: str
    earned: float
    possible: float
    percent: float
    weight: float  # effective weight, after equal-weight fallback


@dataclass(frozen=True)
class StudentGradeSummary:
    current_grade: GradePercent
    letter: str
    missing_count: int
    categories: list[CategoryScore] = field(default_factory=list)

    @property
    def percent(self) -> float | None:
        if isinstance(self.current_grade, Percent):
            return self.current_grade.value
        return None


# ---------------------------------------------------------------------------
# normalization helpers
# ---------------------------------------------------------------------------


def clamp(n: float, min_value: float, max_value: float) -> float:
    return min(max_value, max(min_value, n))


def round_half_up(n: float) -> int:
    # Python's round() is banker's rounding; grades must round .5 up.
    return int(math.floor(n + 0.5))


def to_number(value: Any) -> float | None:
    """Finite float for numbers and numeric strings, otherwise None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(n):
        return None
    return n


def parse_points(value: Any) -> int:
    n = to_number(value)
    if n is None:
        return DEFAULT_POINTS
    rounded = round_half_up(n)
    if rounded < MIN_POINTS or rounded > MAX_POINTS:
        return DEFAULT_POINTS
    return rounded


def normalize_status(status: Any) -> str:
    s = str(status or "").strip().lower()
    if s in GRADE_STATUSES:
        return s
    return "graded"


def parse_timestamp(value: Any) -> datetime | None:
    """
    Accepts datetimes, dates and ISO-8601 strings (date-only or date-time,
    trailing "Z" allowed). Naive values are treated as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw[-1] in "Zz":
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_past_due(due_at: Any, now: datetime) -> bool:
    due = parse_timestamp(due_at)
    if due is None:
        return False
    return due < now


def letter_from_percent(percent: Any) -> str:
    if isinstance(percent, Percent):
        percent = percent.value
    p = to_number(percent)
    if p is None:
        return "N/A"
    for lower_bound, letter in LETTER_BREAKPOINTS:
        if p >= lower_bound:
            return letter
    return "F"


def compute_category_weights(settings: Mapping | None) -> dict[str, int]:
    weights: dict[str, int] = {}
    categories = settings.get("categories") if isinstance(settings, Mapping) else None
    if not isinstance(categories, (list, tuple)):
        return weights

    for c in categories:
        if not isinstance(c, Mapping):
            continue
        name = str(c.get("name") or "").strip()
        if not name:
            continue
        w = to_number(c.get("weight_pct"))
        if w is None:
            continue
        weights[name.lower()] = int(clamp(round_half_up(w), 0, 100))
    return weights


def _late_policy(settings: Mapping | None) -> tuple[float, float]:
    if not isinstance(settings, Mapping):
        return (0.0, 0.0)
    per_day = clamp(to_number(settings.get("late_penalty_per_day_pct")) or 0, 0, 100)
    max_pct = clamp(to_number(settings.get("max_late_penalty_pct")) or 0, 0, 100)
    return (per_day, max_pct)


def _records(items: Any) -> Iterable[Mapping]:
    if not isinstance(items, (list, tuple)):
        return []
    return [r for r in items if isinstance(r, Mapping)]


def _record_id(value: Any) -> str:
    # falsy ids (None, 0, False, "") mean "no id"
    if not value:
        return ""
    return str(value).strip()


def _category_key(value: Any) -> str:
    name = str(value or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY
    return name.lower()


def _index_grades(grades: Any) -> dict[str, Mapping]:
    by_assignment: dict[str, Mapping] = {}
    for g in _records(grades):
        assignment_id = _record_id(g.get("assignment_id"))
        if not assignment_id:
            continue
        by_assignment[assignment_id] = g
    return by_assignment


def _submitted_set(submitted_assignment_ids: Any) -> set[str]:
    if submitted_assignment_ids is None or isinstance(submitted_assignment_ids, (str, bytes)):
        return set()
    try:
        return {_record_id(i) for i in submitted_assignment_ids}
    except TypeError:
        return set()


def _resolve_now(now: Any) -> datetime:
    resolved = parse_timestamp(now) if now is not None else None
    if resolved is None:
        resolved = datetime.now(timezone.utc)
    return resolved


def _late_days(grade: Mapping | None) -> int:
    if grade is None:
        return 0
    n = to_number(grade.get("late_days_override"))
    if n is None:
        return 0
    return int(clamp(round_half_up(n), 0, MAX_LATE_DAYS))


# ---------------------------------------------------------------------------
# aggregation
# ---------------------------------------------------------------------------


def _aggregate(
    settings: Mapping | None,
    assignments: Any,
    grades: Any,
    submitted_assignment_ids: Any,
    now: datetime,
) -> tuple[list[CategoryScore], float]:
    grade_by_assignment = _index_grades(grades)
    submitted = _submitted_set(submitted_assignment_ids)
    weights = compute_category_weights(settings)
    per_day_pct, max_penalty_pct = _late_policy(settings)

    earned_by_cat: dict[str, float] = {}
    possible_by_cat: dict[str, float] = {}

    for a in _records(assignments):
        assignment_id = _record_id(a.get("id"))
        if not assignment_id:
            continue

        cat_key = _category_key(a.get("category"))
        points_possible = parse_points(a.get("points"))
        past_due = is_past_due(a.get("due_at"), now)

        g = grade_by_assignment.get(assignment_id)
        status = normalize_status(g.get("status") if g is not None else None)
        if status == "excused":
            continue

        earned: float | None = None
        points_earned = to_number(g.get("points_earned")) if g is not None else None

        if g is not None and status == "missing":
            earned = 0
        elif points_earned is not None:
            earned = clamp(points_earned, 0, points_possible)
        elif past_due and assignment_id not in submitted:
            # unsubmitted past-due work counts as zero
            earned = 0

        if earned is None:
            continue

        late_days = _late_days(g)
        if late_days > 0 and per_day_pct > 0:
            penalty_pct = clamp(late_days * per_day_pct, 0, max_penalty_pct)
            earned = clamp(earned * (1 - penalty_pct / 100), 0, points_possible)

        earned_by_cat[cat_key] = earned_by_cat.get(cat_key, 0) + earned
        possible_by_cat[cat_key] = possible_by_cat.get(cat_key, 0) + points_possible

    contributing = [
        (key, earned_by_cat.get(key, 0), possible)
        for key, possible in possible_by_cat.items()
        if possible > 0
    ]
    if not contributing:
        return ([], 0.0)

    cat_weights = [weights.get(key, 0) for key, _, _ in contributing]
    weight_sum = sum(cat_weights)
    if weight_sum <= 0:
        equal = 100 / len(contributing)
        cat_weights = [equal] * len(contributing)
        weight_sum = 100

    rows = [
        CategoryScore(
            key=key,
            earned=earned,
            possible=possible,
            percent=(earned / possible) * 100,
            weight=weight,
        )
        for (key, earned, possible), weight in zip(contributing, cat_weights)
    ]
    return (rows, weight_sum)


def _overall(rows: list[CategoryScore], weight_sum: float) -> GradePercent:
    if not rows:
        logger.debug("no contributing assignments, grade unavailable")
        return NO_DATA
    overall = sum(r.percent * (r.weight / weight_sum) for r in rows)
    return Percent(clamp(overall, 0, 100))


def compute_category_breakdown(
    settings: Mapping | None,
    assignments: Any,
    grades: Any,
    submitted_assignment_ids: Any,
    now: Any = None,
) -> list[CategoryScore]:
    """Per-category rows behind the current grade, in first-contribution order."""
    rows, _ = _aggregate(settings, assignments, grades, submitted_assignment_ids, _resolve_now(now))
    return rows


def compute_current_grade_percent(
    settings: Mapping | None,
    assignments: Any,
    grades: Any,
    submitted_assignment_ids: Any,
    now: Any = None,
) -> GradePercent:
    """
    Weighted current grade in [0, 100].

    Excused work is ignored. Explicit "missing" grades count as zero, numeric
    grades are clamped to the assignment's points, and past-due work the
    student never submitted counts as zero. Late penalties come from the
    grade's late-days override and are capped by the settings. Categories
    are weighted by their configured weight; when none of the contributing
    categories carries weight they are averaged equally.

    Returns NO_DATA when no assignment contributes.
    """
    rows, weight_sum = _aggregate(
        settings, assignments, grades, submitted_assignment_ids, _resolve_now(now)
    )
    return _overall(rows, weight_sum)


def compute_missing_assignment_count(
    assignments: Any,
    grades: Any,
    submitted_assignment_ids: Any,
    now: Any = None,
) -> int:
    """
    Past-due assignments the student effectively did not turn in.

    An explicit "missing" status always counts. Otherwise a submission or a
    numeric grade (even 0) means the work is not missing, and excused or
    not-yet-due work never is.
    """
    now = _resolve_now(now)
    grade_by_assignment = _index_grades(grades)
    submitted = _submitted_set(submitted_assignment_ids)

    count = 0
    for a in _records(assignments):
        assignment_id = _record_id(a.get("id"))
        if not assignment_id:
            continue
        if not is_past_due(a.get("due_at"), now):
            continue

        g = grade_by_assignment.get(assignment_id)
        status = normalize_status(g.get("status") if g is not None else None)
        if status == "excused":
            continue
        if status == "missing":
            count += 1
            continue

        if assignment_id in submitted:
            continue

        # graded by the teacher (even 0) is not "missing"
        if g is not None and to_number(g.get("points_earned")) is not None:
            continue

        count += 1

    return count


def summarize_student(
    settings: Mapping | None,
    assignments: Any,
    grades: Any,
    submitted_assignment_ids: Any,
    now: Any = None,
) -> StudentGradeSummary:
    now = _resolve_now(now)
    rows, weight_sum = _aggregate(settings, assignments, grades, submitted_assignment_ids, now)
    current = _overall(rows, weight_sum)

    return StudentGradeSummary(
        current_grade=current,
        letter=letter_from_percent(current),
        missing_count=compute_missing_assignment_count(
            assignments, grades, submitted_assignment_ids, now
        ),
        categories=rows,
    )
