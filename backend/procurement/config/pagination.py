DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

def _to_int(raw):
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None

def normalize_pagination(page_raw, limit_raw):
    """Return (page, limit). Missing or unparseable values fall back to defaults."""
    page = _to_int(page_raw)
    limit = _to_int(limit_raw)
    if page is None or page < 1:
        page = DEFAULT_PAGE
    if limit is None or limit < 1:
        limit = DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)
    return page, limit
