import logging
import math
from typing import Any

from sqlalchemy.orm import Session

from portal.core.config import (
    DEFAULT_MODULE_LIST_LIMIT,
    MAX_ASSIGNMENTS_PER_MODULE,
    MAX_MODULE_LIST_LIMIT,
    MODULE_DESCRIPTION_MAX_LENGTH,
    MODULE_TITLE_MAX_LENGTH,
)
from portal.models.assignment import Assignment
from portal.models.module import Module
from portal.services.grade_summary import to_number

logger = logging.getLogger(__name__)


def normalize_text(value: Any, max_length: int | None = None) -> str:
    text = str(value or "").strip()
    if max_length and len(text) > max_length:
        return text[:max_length]
    return text


def normalize_limit(value: Any, fallback: int = DEFAULT_MODULE_LIST_LIMIT) -> int:
    n = to_number(value)
    if n is None or n <= 0:
        return fallback
    return min(int(math.floor(n)), MAX_MODULE_LIST_LIMIT)


def create_module(db: Session, classroom_id: int, title: Any, description: Any = None) -> Module:
    module = Module(
        classroom_id=classroom_id,
        title=normalize_text(title, MODULE_TITLE_MAX_LENGTH),
        description=normalize_text(description, MODULE_DESCRIPTION_MAX_LENGTH),
    )
    db.add(module)
    db.commit()
    db.refresh(module)
    logger.info("module %s created in classroom %s", module.id, classroom_id)
    return module


def list_with_assignments(
    db: Session, classroom_id: int, limit: Any = DEFAULT_MODULE_LIST_LIMIT
) -> list[tuple[Module, list[Assignment]]]:
    """Newest modules first, each with its newest assignments."""
    modules = (
        db.query(Module)
        .filter(Module.classroom_id == classroom_id)
        .order_by(Module.created_at.desc(), Module.id.desc())
        .limit(normalize_limit(limit))
        .all()
    )
    if not modules:
        return []

    assignments = (
        db.query(Assignment)
        .filter(Assignment.module_id.in_([m.id for m in modules]))
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .all()
    )
    by_module: dict[int, list[Assignment]] = {}
    for a in assignments:
        by_module.setdefault(a.module_id, []).append(a)

    return [(m, by_module.get(m.id, [])[:MAX_ASSIGNMENTS_PER_MODULE]) for m in modules]


def delete_module(db: Session, module: Module) -> int:
    """Deletes the module and its assignments. Returns how many assignments went with it."""
    module_id = module.id
    removed = len(module.assignments)
    db.delete(module)
    db.commit()
    logger.info("module %s deleted with %d assignment(s)", module_id, removed)
    return removed
