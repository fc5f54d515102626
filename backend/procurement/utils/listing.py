from __future__ import annotations
import math
from typing import Callable, Tuple
from sqlalchemy import select, func
from sqlalchemy.orm import Session
from procurement.config.pagination import normalize_pagination


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def build_page_payload(rows: list, total: int, page: int, limit: int):
    return {
        'data': rows,
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'pages': page_count(total, limit),
        }
    }


def paginate(session: Session, stmt, page_raw=None, limit_raw=None) -> Tuple[list, int, int, int]:
    """Run stmt for one page. Returns (rows, total, page, limit).

    Total is counted over the unordered statement so ORDER BY never reaches the count query.
    """
    page, limit = normalize_pagination(page_raw, limit_raw)
    total = session.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = session.execute(stmt.offset((page - 1) * limit).limit(limit)).scalars().unique().all()
    return rows, total, page, limit


def paginated_payload(session: Session, stmt, serialize: Callable, page_raw=None, limit_raw=None):
    rows, total, page, limit = paginate(session, stmt, page_raw, limit_raw)
    return build_page_payload([serialize(r) for r in rows], total, page, limit)
