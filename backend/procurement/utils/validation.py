from __future__ import annotations
"""Reusable validation helpers for request and service inputs.

Every helper fails fast with ``InvalidArgument`` instead of coercing bad input
into something that silently widens or empties a query.
"""
import math
import re
from datetime import datetime, time
from typing import Any, Iterable, Optional
from procurement.errors import InvalidArgument

SEARCH_MAX_LENGTH = 100
_DATE_FORMATS = ('%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M:%S%z')


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or raises InvalidArgument.
    """
    if new_status not in allowed:
        raise InvalidArgument(f"{field_name} invalid", detail=f"{field_name} must be one of {', '.join(allowed)}")
    return new_status


def validate_id(value: Any, field_name: str = 'id') -> int:
    """Return value as a positive int identifier."""
    if isinstance(value, bool):
        raise InvalidArgument(f'Invalid {field_name}: {value}')
    if isinstance(value, int):
        ident = value
    elif isinstance(value, str) and re.fullmatch(r'[0-9]+', value.strip()):
        ident = int(value.strip())
    else:
        raise InvalidArgument(f'Invalid {field_name}: {value}')
    if ident <= 0:
        raise InvalidArgument(f'Invalid {field_name}: {value}')
    return ident


def _is_date_only(value: str) -> bool:
    return len(value) == 10 and value[4] == '-' and value[7] == '-'


def parse_date(value: Optional[str], field_name: str = 'date', end_of_day: bool = False) -> Optional[datetime]:
    """Parse an incoming date string into a naive local datetime.

    A date-only value with ``end_of_day`` set is pushed to 23:59:59.999999 so
    an inclusive upper bound covers the whole day.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    raw = str(value).strip()
    parsed = None
    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(raw, fmt)
            break
        except ValueError:
            continue
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(raw.replace('Z', '+00:00'))
        except ValueError:
            raise InvalidArgument(f'Invalid date: {value}', detail=f'{field_name} must be an ISO-8601 date')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    if end_of_day and _is_date_only(raw):
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


def parse_date_range(date_from: Optional[str], date_to: Optional[str]):
    start = parse_date(date_from, 'date_from')
    end = parse_date(date_to, 'date_to', end_of_day=True)
    if start and end and start > end:
        raise InvalidArgument('date_from must not be after date_to')
    return start, end


def sanitize_search(search: Optional[str]) -> Optional[str]:
    """Trim, cap at SEARCH_MAX_LENGTH and escape LIKE wildcards.

    The result is meant for ``ilike(f'%{s}%', escape='\\\\')``.
    """
    if search is None:
        return None
    text = str(search).strip()[:SEARCH_MAX_LENGTH]
    if not text:
        return None
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def require_number(value: Any, field_name: str, minimum: float = 0.0, strict: bool = False) -> float:
    """Return value as float; bools and strings are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f'{field_name} must be a number')
    if not math.isfinite(value):
        raise InvalidArgument(f'{field_name} must be a finite number')
    if strict and value <= minimum:
        raise InvalidArgument(f'{field_name} must be greater than {minimum:g}')
    if not strict and value < minimum:
        raise InvalidArgument(f'{field_name} must be at least {minimum:g}')
    return float(value)


__all__ = [
    'validate_status', 'validate_id', 'parse_date', 'parse_date_range', 'sanitize_search', 'require_number',
    'SEARCH_MAX_LENGTH'
]
