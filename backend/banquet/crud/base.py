from typing import List, Tuple
import math

from sqlalchemy.orm import Query, Session

from ..utils.dates import utcnow


def normalize_page(page: int, limit: int, default_limit: int, max_limit: int) -> Tuple[int, int]:
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else default_limit
    return page, min(limit, max_limit)


def paginate(query: Query, page: int, limit: int) -> Tuple[List, dict]:
    """Run ``query`` for one page and return ``(items, pagination)``."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pagination = {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if total else 0,
    }
    return items, pagination


def compare_and_set(db: Session, record, expected, values: dict) -> bool:
    """Conditionally update ``record`` if its status is still ``expected``.

    Issues ``UPDATE ... WHERE id = :id AND status = :expected`` without
    committing; returns False when no row matched.
    """
    model = type(record)
    values = {"updated_at": utcnow(), **values}
    updated = (
        db.query(model)
        .filter(model.id == record.id, model.status == expected)
        .update(values, synchronize_session=False)
    )
    return updated > 0
