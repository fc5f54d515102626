from __future__ import annotations
from procurement.errors import InvalidArgument

def apply_multi_sort(stmt, sort_expr: str | None, allowed: dict, tie_breaker, default: str | None = None):
    """Apply multi-field sort to a SQLAlchemy select.
    sort_expr: comma-separated tokens, each optionally prefixed with '-'.
    allowed: mapping of field key -> column object.
    tie_breaker: column to append for deterministic ordering.
    default: sort expression used when sort_expr is empty.
    """
    sort_expr = sort_expr or default
    if not sort_expr:
        return stmt.order_by(tie_breaker.asc())
    clauses = []
    for raw in sort_expr.split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        col = allowed.get(key)
        if col is None:
            raise InvalidArgument(f'Invalid sort field {key}')
        clauses.append(col.desc() if desc else col.asc())
    clauses.append(tie_breaker.asc())
    return stmt.order_by(*clauses)
