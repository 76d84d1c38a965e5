import logging
from typing import Any

from sqlalchemy.orm import Session

from portal.core.config import (
    DEFAULT_GRADE_CATEGORIES,
    DEFAULT_LATE_PENALTY_PER_DAY_PCT,
    DEFAULT_MAX_LATE_PENALTY_PCT,
    MAX_CATEGORIES,
)
from portal.models.grade_settings import GradeSettings
from portal.services.grade_summary import clamp, round_half_up, to_number

logger = logging.getLogger(__name__)


def default_categories() -> list[dict]:
    return [{"name": name, "weight_pct": weight} for name, weight in DEFAULT_GRADE_CATEGORIES]


def normalize_categories(categories: Any) -> list[dict]:
    """
    Clean a teacher-entered category list.

    - blank names are dropped
    - names are unique case-insensitively (first one wins)
    - weights must be finite and within 0..100, then rounded
    - at most MAX_CATEGORIES are kept
    """
    out: list[dict] = []
    seen: set[str] = set()
    if not isinstance(categories, (list, tuple)):
        return out

    for c in categories:
        if isinstance(c, dict):
            name, weight = c.get("name"), c.get("weight_pct")
        else:
            name, weight = getattr(c, "name", None), getattr(c, "weight_pct", None)

        name = str(name or "").strip()
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)

        w = to_number(weight)
        if w is None or w < 0 or w > 100:
            continue
        out.append({"name": name, "weight_pct": round_half_up(w)})

    return out[:MAX_CATEGORIES]


def normalize_pct(value: Any, fallback: int) -> int:
    n = to_number(value)
    if n is None:
        return fallback
    return round_half_up(clamp(n, 0, 100))


def get_or_create(db: Session, classroom_id: int) -> GradeSettings:
    settings = (
        db.query(GradeSettings)
        .filter(GradeSettings.classroom_id == classroom_id)
        .first()
    )
    if settings:
        return settings

    settings = GradeSettings(
        classroom_id=classroom_id,
        categories=default_categories(),
        late_penalty_per_day_pct=DEFAULT_LATE_PENALTY_PER_DAY_PCT,
        max_late_penalty_pct=DEFAULT_MAX_LATE_PENALTY_PCT,
    )
    db.add(settings)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(settings)
    logger.info("created default grade settings for classroom %s", classroom_id)
    return settings


def upsert(
    db: Session,
    classroom_id: int,
    categories: Any = None,
    late_penalty_per_day_pct: Any = None,
    max_late_penalty_pct: Any = None,
) -> GradeSettings:
    settings = get_or_create(db, classroom_id)

    normalized = normalize_categories(categories)
    # an empty/invalid list keeps what the teacher already had
    if normalized:
        settings.categories = normalized
    settings.late_penalty_per_day_pct = normalize_pct(
        late_penalty_per_day_pct, settings.late_penalty_per_day_pct
    )
    settings.max_late_penalty_pct = normalize_pct(
        max_late_penalty_pct, settings.max_late_penalty_pct
    )

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(settings)
    logger.info(
        "updated grade settings for classroom %s: %d categories, %s%%/day, cap %s%%",
        classroom_id,
        len(settings.categories),
        settings.late_penalty_per_day_pct,
        settings.max_late_penalty_pct,
    )
    return settings


def as_engine_settings(settings: GradeSettings) -> dict:
    return {
        "categories": list(settings.categories or []),
        "late_penalty_per_day_pct": settings.late_penalty_per_day_pct,
        "max_late_penalty_pct": settings.max_late_penalty_pct,
    }
