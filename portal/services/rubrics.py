import logging
import math
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from portal.core.config import MAX_RUBRIC_CRITERIA, MAX_RUBRIC_POINTS
from portal.models.rubric import Rubric
from portal.services.grade_summary import to_number

logger = logging.getLogger(__name__)


def normalize_rubric(items: Any) -> list[dict]:
    """
    Keeps criteria with a title and a max score in (0, MAX_RUBRIC_POINTS],
    rounded down. Titles are unique case-insensitively (first one wins, even
    when its score is invalid). At most MAX_RUBRIC_CRITERIA are kept.
    """
    out: list[dict] = []
    seen: set[str] = set()
    for item in items if isinstance(items, (list, tuple)) else []:
        if not isinstance(item, Mapping):
            continue
        title = str(item.get("title") or "").strip()
        if not title:
            continue
        key = title.lower()
        if key in seen:
            continue
        seen.add(key)

        points_max = to_number(item.get("points_max"))
        if points_max is None or points_max <= 0 or points_max > MAX_RUBRIC_POINTS:
            continue
        out.append(
            {
                "id": str(item.get("id") or uuid.uuid4()),
                "title": title,
                "points_max": int(math.floor(points_max)),
            }
        )
    return out[:MAX_RUBRIC_CRITERIA]


def get_for_assignment(db: Session, assignment_id: int) -> Rubric | None:
    return db.query(Rubric).filter(Rubric.assignment_id == assignment_id).first()


def upsert(db: Session, classroom_id: int, assignment_id: int, criteria: Any) -> Rubric:
    rubric = get_for_assignment(db, assignment_id)
    if rubric is None:
        rubric = Rubric(classroom_id=classroom_id, assignment_id=assignment_id)
        db.add(rubric)

    rubric.criteria = normalize_rubric(criteria)
    db.commit()
    db.refresh(rubric)
    logger.info(
        "rubric for assignment %s saved with %d criteria", assignment_id, len(rubric.criteria)
    )
    return rubric
